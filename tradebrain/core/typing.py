"""
公共类型定义

包含:
- 操作/持仓方向枚举
- 成交 (Trade) 与挂单 (StopOrder / TargetOrder) 值对象
- 各命令的结构化请求
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from tradebrain.core.numeric import to_decimal


class OperationType(str, Enum):
    """操作方向"""

    BUY = "buy"
    SELL = "sell"

    @property
    def opposite(self) -> "OperationType":
        return OperationType.SELL if self is OperationType.BUY else OperationType.BUY


class PositionSide(str, Enum):
    """持仓方向"""

    LONG = "long"
    SHORT = "short"
    FLAT = "flat"  # 无持仓，方向未定义

    @property
    def is_short(self) -> bool | None:
        """三态: 空仓为 None"""
        if self is PositionSide.FLAT:
            return None
        return self is PositionSide.SHORT

    @property
    def opening_operation(self) -> OperationType:
        """开仓方向的操作类型 (空仓按非空头处理)"""
        return OperationType.SELL if self is PositionSide.SHORT else OperationType.BUY

    @property
    def closing_operation(self) -> OperationType:
        """平仓方向的操作类型"""
        return self.opening_operation.opposite


@dataclass(frozen=True)
class Trade:
    """
    成交记录

    shares_count 为带符号股数: 正数为多头贡献，负数为空头/平多贡献。
    追加后不可修改。
    """

    stock_price: Decimal
    shares_count: int
    operation_type: OperationType
    risk_line: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "stock_price": str(self.stock_price),
            "shares_count": self.shares_count,
            "operation_type": self.operation_type.value,
            "risk_line": str(self.risk_line),
        }


@dataclass(frozen=True)
class ProtectiveOrder:
    """挂单 (止损/止盈)，针对整体持仓而非单笔成交"""

    shares_count: int
    stock_price: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "shares_count": self.shares_count,
            "stock_price": str(self.stock_price),
        }


@dataclass(frozen=True)
class StopOrder(ProtectiveOrder):
    """止损单"""


@dataclass(frozen=True)
class TargetOrder(ProtectiveOrder):
    """止盈单"""


# ======================================================================
# 命令请求
# ======================================================================


def _to_int(value: Any) -> int:
    """股数转换: 接受数字或数字字符串"""
    if isinstance(value, int):
        return value
    return int(to_decimal(value))


@dataclass
class AddTradeRequest:
    """按风险倍数开仓/加仓"""

    multiplier: Decimal
    operation_type: OperationType
    risk_line: Decimal

    def __post_init__(self) -> None:
        self.multiplier = to_decimal(self.multiplier)
        self.operation_type = OperationType(self.operation_type)
        self.risk_line = to_decimal(self.risk_line)


@dataclass
class RiskPercentRequest:
    """按风险百分比执行 (加仓或减仓由当前方向决定)"""

    risk_percent: Decimal
    risk_line: Decimal
    operation_type: OperationType

    def __post_init__(self) -> None:
        self.risk_percent = to_decimal(self.risk_percent)
        self.risk_line = to_decimal(self.risk_line)
        self.operation_type = OperationType(self.operation_type)


@dataclass
class SellExistingRequest:
    """按股数平掉已有持仓"""

    operation_type: OperationType
    shares_count: int
    risk_line: Decimal

    def __post_init__(self) -> None:
        self.operation_type = OperationType(self.operation_type)
        self.shares_count = _to_int(self.shares_count)
        self.risk_line = to_decimal(self.risk_line)


@dataclass
class PositionPercentRequest:
    """按持仓百分比平仓"""

    position_percent: Decimal
    risk_line: Decimal

    def __post_init__(self) -> None:
        self.position_percent = to_decimal(self.position_percent)
        self.risk_line = to_decimal(self.risk_line)


@dataclass
class OrderRequest:
    """新增止损/止盈挂单"""

    shares_count: int
    stock_price: Decimal

    def __post_init__(self) -> None:
        self.shares_count = _to_int(self.shares_count)
        self.stock_price = to_decimal(self.stock_price)
