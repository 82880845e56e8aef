"""
盈亏核算

职责:
- 成交量加权均价
- 已实现 (回合内) 盈亏
- 未实现盈亏
- 保本调整价 (BERT)

所有金额结果保留两位小数 (half-up)。
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from tradebrain.core.errors import DegenerateAverageError
from tradebrain.core.numeric import round_currency
from tradebrain.core.typing import OperationType, PositionSide, Trade
from tradebrain.portfolio.ledger import PositionLedger


@dataclass
class SideVolume:
    """单侧成交量与成交额"""

    count: int = 0
    amount: Decimal = Decimal("0")

    def add(self, shares: int, price: Decimal) -> None:
        self.count += shares
        self.amount += shares * price


class PnLCalculator:
    """
    盈亏计算器

    只读访问台账，每次查询都从完整成交列表重新计算。
    """

    def __init__(self, ledger: PositionLedger, currency_places: int = 2) -> None:
        self.ledger = ledger
        self.currency_places = currency_places

    def _round(self, value: Decimal) -> Decimal:
        return round_currency(value, self.currency_places)

    def average_price(
        self,
        trades: Sequence[Trade] | None = None,
        is_short: bool | None = None,
    ) -> Decimal:
        """
        成交量加权均价

        Args:
            trades: 覆盖的成交列表，默认使用台账
            is_short: 覆盖的方向，默认由台账推导

        Returns:
            空头取卖出侧均价，否则取买入侧均价；台账为空时返回 0

        Raises:
            DegenerateAverageError: 对应方向没有成交量
        """
        if trades is None:
            trades = self.ledger.trades
            if not trades:
                return Decimal("0")

        if is_short is None:
            is_short = self.ledger.direction() is PositionSide.SHORT

        buys = SideVolume()
        sells = SideVolume()
        for trade in trades:
            if trade.shares_count < 0:
                sells.add(-trade.shares_count, trade.stock_price)
            else:
                buys.add(trade.shares_count, trade.stock_price)

        side = sells if is_short else buys
        if side.count == 0:
            raise DegenerateAverageError(
                f"{'卖出' if is_short else '买入'}侧没有成交量，无法计算均价"
            )
        return self._round(side.amount / side.count)

    def realized_round_trip_profit(self) -> Decimal:
        """
        已实现盈亏

        按时间顺序遍历成交，以此前所有成交的净持仓和均价为基准:
        - 空头中买入 (回补): (均价 - 成交价) * 股数
        - 多头中卖出 (平仓): (成交价 - 均价) * 股数
        - 空头中继续卖出: 不计入
        """
        trades = self.ledger.trades
        if len(trades) < 2:
            return Decimal("0")

        realized = Decimal("0")
        for index in range(1, len(trades)):
            trade = trades[index]
            processed = trades[:index]
            running_shares = self.ledger.net_shares(processed)
            running_avg = self.average_price(processed, is_short=running_shares < 0)
            shares = abs(trade.shares_count)

            if running_shares < 0 and trade.operation_type is OperationType.BUY:
                realized += (running_avg - trade.stock_price) * shares
            elif running_shares > 0 and trade.operation_type is OperationType.SELL:
                realized += (trade.stock_price - running_avg) * shares
            # 空头继续卖出属于加仓，不产生已实现盈亏

        return self._round(realized)

    def unrealized_profit(self) -> Decimal:
        """未实现盈亏 (按当前股价盯市)"""
        net_shares = self.ledger.net_shares()
        avg_price = self.average_price()
        stock_price = self.ledger.stock_price
        is_short = self.ledger.direction() is PositionSide.SHORT

        price_diff = avg_price - stock_price if is_short else stock_price - avg_price
        return self._round(price_diff * net_shares * (-1 if is_short else 1))

    def break_even_adjusted(self) -> Decimal:
        """
        保本调整价 (BERT)

        均价 - 已实现盈亏 / 净持仓；无持仓时返回 NaN。
        """
        net_shares = self.ledger.net_shares()
        if net_shares == 0:
            return Decimal("NaN")
        realized = self.realized_round_trip_profit()
        return self._round(self.average_price() - realized / net_shares)
