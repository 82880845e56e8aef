"""
Core 模块 - 基础组件

包含:
- config: 配置加载与环境区分
- errors: 异常定义
- numeric: Decimal 工具
- typing: 公共类型定义
"""

from .errors import (
    DegenerateAverageError,
    DegenerateRiskLineError,
    InvalidRiskLineError,
    MissingInputError,
    TradeBrainError,
)
from .typing import (
    AddTradeRequest,
    OperationType,
    OrderRequest,
    PositionPercentRequest,
    PositionSide,
    ProtectiveOrder,
    RiskPercentRequest,
    SellExistingRequest,
    StopOrder,
    TargetOrder,
    Trade,
)

__all__ = [
    # Errors
    "TradeBrainError",
    "MissingInputError",
    "InvalidRiskLineError",
    "DegenerateRiskLineError",
    "DegenerateAverageError",
    # Enums
    "OperationType",
    "PositionSide",
    # Values
    "Trade",
    "ProtectiveOrder",
    "StopOrder",
    "TargetOrder",
    # Requests
    "AddTradeRequest",
    "RiskPercentRequest",
    "SellExistingRequest",
    "PositionPercentRequest",
    "OrderRequest",
]
