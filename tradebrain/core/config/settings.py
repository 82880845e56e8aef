"""
配置设置定义

使用 Pydantic Settings 实现类型安全的配置
"""

from decimal import Decimal
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """运行环境"""

    DEV = "dev"
    PROD = "prod"


class CalculatorSettings(BaseSettings):
    """计算器初始状态配置"""

    model_config = SettingsConfigDict(
        env_prefix="TRADEBRAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    risk_per_trade: Decimal = Field(
        default=Decimal("0"), description="单笔风险预算 (100% 风险对应的金额)"
    )
    stock_price: Decimal = Field(default=Decimal("0"), description="初始股价")
    price_step: Decimal = Field(
        default=Decimal("10"), description="模拟价格跳动的步长"
    )
    currency_places: int = Field(default=2, ge=0, description="金额保留小数位")


class Settings(BaseSettings):
    """主配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 环境
    env: Environment = Field(default=Environment.DEV, description="运行环境")

    # 日志
    log_dir: Path = Field(default=Path("./logs"), description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")

    # 子配置
    calculator: CalculatorSettings = Field(default_factory=CalculatorSettings)

    @property
    def is_prod(self) -> bool:
        """是否为生产环境"""
        return self.env == Environment.PROD

    @property
    def is_dev(self) -> bool:
        """是否为开发环境"""
        return self.env == Environment.DEV


@lru_cache
def get_settings() -> Settings:
    """
    获取配置单例

    使用 lru_cache 确保配置只加载一次

    Returns:
        Settings: 配置实例
    """
    return Settings()
