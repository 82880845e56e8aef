"""
Risk 模块 - 风险定仓与挂单保护

包含:
- sizing: 风险预算定仓、平仓路径
- protection: 止损/止盈覆盖率与挂单调整
"""

from tradebrain.risk.protection import (
    OrdersPrediction,
    ProtectionAccountant,
    ProtectionSummary,
    distribute_round_robin,
)
from tradebrain.risk.sizing import RiskSizingEngine, shares_for_risk

__all__ = [
    # sizing
    "RiskSizingEngine",
    "shares_for_risk",
    # protection
    "ProtectionAccountant",
    "ProtectionSummary",
    "OrdersPrediction",
    "distribute_round_robin",
]
