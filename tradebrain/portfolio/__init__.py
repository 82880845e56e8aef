"""
Portfolio 模块 - 台账与核算

包含:
- ledger: 成交台账、挂单、方向推导
- accounting: 均价/盈亏/保本价
"""

from tradebrain.portfolio.accounting import PnLCalculator, SideVolume
from tradebrain.portfolio.ledger import PositionLedger

__all__ = [
    # ledger
    "PositionLedger",
    # accounting
    "PnLCalculator",
    "SideVolume",
]
