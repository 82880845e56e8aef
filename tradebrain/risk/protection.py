"""
持仓保护核算

职责:
- 统计止损/止盈挂单覆盖的持仓比例
- 预测持仓变化后挂单的调整量
- 将未覆盖股数轮询分摊到现有挂单
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog

from tradebrain.core.typing import PositionSide, ProtectiveOrder
from tradebrain.portfolio.ledger import PositionLedger

logger = structlog.get_logger(__name__)

OrderT = TypeVar("OrderT", bound=ProtectiveOrder)


@dataclass(frozen=True)
class ProtectionSummary:
    """挂单保护情况"""

    protected_percent_with_stops: int = 0
    protected_percent_with_targets: int = 0
    protected_with_stops_count: int = 0
    protected_with_targets_count: int = 0

    @property
    def unprotected_percent_with_stops(self) -> int:
        return 100 - self.protected_percent_with_stops

    @property
    def unprotected_percent_with_targets(self) -> int:
        return 100 - self.protected_percent_with_targets

    def to_dict(self) -> dict[str, Any]:
        return {
            "protected_percent_with_stops": self.protected_percent_with_stops,
            "protected_percent_with_targets": self.protected_percent_with_targets,
            "protected_with_stops_count": self.protected_with_stops_count,
            "protected_with_targets_count": self.protected_with_targets_count,
            "unprotected_percent_with_stops": self.unprotected_percent_with_stops,
            "unprotected_percent_with_targets": self.unprotected_percent_with_targets,
        }


@dataclass(frozen=True)
class OrdersPrediction:
    """
    挂单调整预测

    stops_count / targets_count 为 0/1 标志 (是否需要调整该类挂单)，
    不是挂单数量；*_shares_count 为需要补充的未覆盖股数。
    """

    stops_count: int = 0
    stops_shares_count: int = 0
    targets_count: int = 0
    targets_shares_count: int = 0

    @property
    def needs_update(self) -> bool:
        return bool(self.stops_shares_count or self.targets_shares_count)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stops_count": self.stops_count,
            "stops_shares_count": self.stops_shares_count,
            "targets_count": self.targets_count,
            "targets_shares_count": self.targets_shares_count,
        }


def distribute_round_robin(orders: Sequence[OrderT], shares: int) -> list[OrderT]:
    """
    将股数逐股轮询分配到挂单上

    第 i 张挂单增加 shares // n 股，前 shares % n 张各多 1 股。
    挂单为空或股数非正时原样返回。
    """
    updated = list(orders)
    if not updated or shares <= 0:
        return updated

    base, extra = divmod(shares, len(updated))
    return [
        type(order)(
            shares_count=order.shares_count + base + (1 if index < extra else 0),
            stock_price=order.stock_price,
        )
        for index, order in enumerate(updated)
    ]


class ProtectionAccountant:
    """
    保护核算器

    只通过台账的 replace_stops / replace_targets 修改挂单。
    """

    def __init__(self, ledger: PositionLedger) -> None:
        self.ledger = ledger

    def percent_protected(self) -> ProtectionSummary:
        """
        计算保护比例

        - 止盈: 空头统计低于现价的挂单，否则统计高于现价的挂单
        - 止损: 空头统计高于现价的挂单，否则统计低于现价的挂单

        百分比 = floor(覆盖股数 / |净持仓| * 100)，无持仓时为 0。
        """
        stock_price = self.ledger.stock_price
        is_short = self.ledger.direction() is PositionSide.SHORT
        open_shares = abs(self.ledger.net_shares())

        def below(order: ProtectiveOrder) -> bool:
            return order.stock_price < stock_price

        def above(order: ProtectiveOrder) -> bool:
            return order.stock_price > stock_price

        target_side, stop_side = (below, above) if is_short else (above, below)
        targets_count = sum(t.shares_count for t in self.ledger.targets if target_side(t))
        stops_count = sum(s.shares_count for s in self.ledger.stops if stop_side(s))

        return ProtectionSummary(
            protected_percent_with_stops=self._percent(stops_count, open_shares),
            protected_percent_with_targets=self._percent(targets_count, open_shares),
            protected_with_stops_count=stops_count,
            protected_with_targets_count=targets_count,
        )

    @staticmethod
    def _percent(count: int, open_shares: int) -> int:
        if open_shares == 0:
            return 0
        return count * 100 // open_shares

    def update_orders_prediction(self) -> OrdersPrediction:
        """
        预测挂单调整

        仅当某类挂单已覆盖部分 (但非全部) 持仓时，才需要把缺口补到现有挂单上。
        """
        summary = self.percent_protected()
        open_shares = abs(self.ledger.net_shares())

        return OrdersPrediction(
            stops_count=1 if summary.protected_with_stops_count else 0,
            stops_shares_count=self._shortfall(
                summary.protected_with_stops_count, open_shares
            ),
            targets_count=1 if summary.protected_with_targets_count else 0,
            targets_shares_count=self._shortfall(
                summary.protected_with_targets_count, open_shares
            ),
        )

    @staticmethod
    def _shortfall(protected: int, open_shares: int) -> int:
        if protected and protected < open_shares:
            return open_shares - protected
        return 0

    def rebalance_orders(self) -> OrdersPrediction:
        """
        执行挂单调整

        将未覆盖股数逐股轮询分配到该类全部现有挂单上；没有挂单时不做修改。

        Returns:
            执行前的调整预测
        """
        prediction = self.update_orders_prediction()

        if prediction.targets_shares_count and self.ledger.targets:
            self.ledger.replace_targets(
                distribute_round_robin(self.ledger.targets, prediction.targets_shares_count)
            )
        if prediction.stops_shares_count and self.ledger.stops:
            self.ledger.replace_stops(
                distribute_round_robin(self.ledger.stops, prediction.stops_shares_count)
            )

        if prediction.needs_update:
            logger.info(
                "orders_rebalanced",
                stops_shares=prediction.stops_shares_count,
                targets_shares=prediction.targets_shares_count,
                stops=len(self.ledger.stops),
                targets=len(self.ledger.targets),
            )
        return prediction
