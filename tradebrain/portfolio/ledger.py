"""
持仓台账

职责:
- 成交列表 (按时间顺序) 维护
- 当前股价与单笔风险预算
- 止损/止盈挂单列表
- 净持仓与方向推导

设计原则:
- 列表整体替换，不做原地修改
- 方向按需从净持仓推导，不缓存
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

import structlog

from tradebrain.core.errors import MissingInputError
from tradebrain.core.numeric import to_decimal
from tradebrain.core.typing import (
    OrderRequest,
    PositionSide,
    StopOrder,
    TargetOrder,
    Trade,
)

logger = structlog.get_logger(__name__)


class PositionLedger:
    """
    持仓台账

    单品种的全部可变状态:
    - trades: 成交元组，净持仓归零时清空 (一轮交易结束)
    - stops / targets: 挂单元组
    - stock_price / risk_per_trade: 最新标量
    """

    def __init__(
        self,
        stock_price: Any = Decimal("0"),
        risk_per_trade: Any = Decimal("0"),
    ) -> None:
        self._trades: tuple[Trade, ...] = ()
        self._stops: tuple[StopOrder, ...] = ()
        self._targets: tuple[TargetOrder, ...] = ()
        self._stock_price = to_decimal(stock_price)
        self._risk_per_trade = to_decimal(risk_per_trade)

    # ------------------------------------------------------------------
    # 标量
    # ------------------------------------------------------------------

    @property
    def stock_price(self) -> Decimal:
        return self._stock_price

    def set_stock_price(self, value: Any) -> None:
        """覆盖当前股价，不做校验"""
        self._stock_price = to_decimal(value)

    @property
    def risk_per_trade(self) -> Decimal:
        return self._risk_per_trade

    def set_risk_per_trade(self, value: Any) -> None:
        """覆盖单笔风险预算，不做校验"""
        self._risk_per_trade = to_decimal(value)

    # ------------------------------------------------------------------
    # 成交
    # ------------------------------------------------------------------

    @property
    def trades(self) -> tuple[Trade, ...]:
        return self._trades

    def get_trades(self) -> list[Trade]:
        """获取成交列表副本"""
        return list(self._trades)

    def net_shares(self, trades: Sequence[Trade] | None = None) -> int:
        """
        净持仓股数

        Args:
            trades: 成交列表，默认使用当前台账

        Returns:
            带符号股数之和
        """
        source = self._trades if trades is None else trades
        return sum(trade.shares_count for trade in source)

    def direction(self, trades: Sequence[Trade] | None = None) -> PositionSide:
        """持仓方向 (净持仓为零时为 FLAT)"""
        shares = self.net_shares(trades)
        if shares > 0:
            return PositionSide.LONG
        elif shares < 0:
            return PositionSide.SHORT
        else:
            return PositionSide.FLAT

    @property
    def is_short(self) -> bool | None:
        """三态方向: None 表示无持仓"""
        return self.direction().is_short

    def replace_trades(self, trades: Iterable[Trade]) -> None:
        """
        整体替换成交列表

        唯一的成交修改入口；净持仓为零时清空台账，开始新一轮交易。
        """
        updated = tuple(trades)
        if self.net_shares(updated) == 0:
            if updated:
                logger.info("round_trip_closed", executions=len(updated))
            self._trades = ()
        else:
            self._trades = updated

    def append_trade(self, trade: Trade) -> None:
        self.replace_trades((*self._trades, trade))

    def total_entry_shares_count(self) -> int:
        """开仓方向成交股数之和 (空头统计卖出，否则统计买入)"""
        opening = self.direction().opening_operation
        return sum(
            trade.shares_count
            for trade in self._trades
            if trade.operation_type is opening
        )

    @property
    def last_trade(self) -> Trade | None:
        return self._trades[-1] if self._trades else None

    # ------------------------------------------------------------------
    # 挂单
    # ------------------------------------------------------------------

    @property
    def stops(self) -> tuple[StopOrder, ...]:
        return self._stops

    @property
    def targets(self) -> tuple[TargetOrder, ...]:
        return self._targets

    def add_stop(self, request: OrderRequest) -> StopOrder:
        """新增止损单"""
        self._validate_order(request)
        stop = StopOrder(
            shares_count=request.shares_count, stock_price=request.stock_price
        )
        self.replace_stops((*self._stops, stop))
        logger.info(
            "stop_added",
            shares_count=stop.shares_count,
            stock_price=str(stop.stock_price),
        )
        return stop

    def add_target(self, request: OrderRequest) -> TargetOrder:
        """新增止盈单"""
        self._validate_order(request)
        target = TargetOrder(
            shares_count=request.shares_count, stock_price=request.stock_price
        )
        self.replace_targets((*self._targets, target))
        logger.info(
            "target_added",
            shares_count=target.shares_count,
            stock_price=str(target.stock_price),
        )
        return target

    def replace_stops(self, stops: Iterable[StopOrder]) -> None:
        self._stops = tuple(stops)

    def replace_targets(self, targets: Iterable[TargetOrder]) -> None:
        self._targets = tuple(targets)

    @staticmethod
    def _validate_order(request: OrderRequest) -> None:
        if request.shares_count <= 0 or request.stock_price <= 0:
            raise MissingInputError("挂单数据缺失: 股数与价格必须为正数")

    # ------------------------------------------------------------------

    def reset(self) -> None:
        """清空成交与挂单，保留标量"""
        self._trades = ()
        self._stops = ()
        self._targets = ()

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "trades": [t.to_dict() for t in self._trades],
            "stops": [s.to_dict() for s in self._stops],
            "targets": [t.to_dict() for t in self._targets],
            "stock_price": str(self._stock_price),
            "risk_per_trade": str(self._risk_per_trade),
            "net_shares": self.net_shares(),
            "side": self.direction().value,
        }
