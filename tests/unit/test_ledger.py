"""
PositionLedger 单元测试

测试范围:
- 标量设置与 Decimal 转换
- 净持仓与三态方向
- replace_trades 的清空规则
- 开仓方向股数统计
- 挂单新增与校验
"""

from decimal import Decimal

import pytest

from tradebrain.core.errors import MissingInputError
from tradebrain.core.numeric import floor_shares, round_currency, to_decimal
from tradebrain.core.typing import (
    OperationType,
    OrderRequest,
    PositionSide,
    StopOrder,
    TargetOrder,
    Trade,
)
from tradebrain.portfolio.ledger import PositionLedger


def make_trade(shares: int, price: str, op: OperationType | None = None) -> Trade:
    if op is None:
        op = OperationType.BUY if shares > 0 else OperationType.SELL
    return Trade(
        stock_price=Decimal(price),
        shares_count=shares,
        operation_type=op,
        risk_line=Decimal("1"),
    )


class TestNumeric:
    """数值工具测试"""

    def test_to_decimal_coercion(self) -> None:
        """测试各类输入转换"""
        assert to_decimal("12.5") == Decimal("12.5")
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")

    def test_round_currency_half_up(self) -> None:
        """测试 half-up 舍入"""
        assert round_currency(Decimal("1.005")) == Decimal("1.01")
        assert round_currency(Decimal("2.344")) == Decimal("2.34")
        assert round_currency(Decimal("-1.005")) == Decimal("-1.01")

    def test_round_currency_nan_passthrough(self) -> None:
        """测试 NaN 原样返回"""
        assert round_currency(Decimal("NaN")).is_nan()

    def test_floor_shares(self) -> None:
        """测试股数向下取整"""
        assert floor_shares(Decimal("99.99")) == 99
        assert floor_shares(Decimal("100")) == 100


class TestScalars:
    """标量设置测试"""

    def test_initial_state(self) -> None:
        """测试初始状态"""
        ledger = PositionLedger()
        assert ledger.stock_price == Decimal("0")
        assert ledger.risk_per_trade == Decimal("0")
        assert ledger.trades == ()
        assert ledger.direction() == PositionSide.FLAT

    def test_set_values_without_validation(self) -> None:
        """测试设置时不做校验 (允许零与负数)"""
        ledger = PositionLedger()
        ledger.set_stock_price("101.25")
        ledger.set_risk_per_trade(-50)

        assert ledger.stock_price == Decimal("101.25")
        assert ledger.risk_per_trade == Decimal("-50")

        ledger.set_stock_price(0)
        assert ledger.stock_price == Decimal("0")


class TestNetSharesAndDirection:
    """净持仓与方向测试"""

    def test_long(self) -> None:
        """测试多头"""
        ledger = PositionLedger()
        ledger.replace_trades([make_trade(100, "100"), make_trade(-30, "105")])

        assert ledger.net_shares() == 70
        assert ledger.direction() == PositionSide.LONG
        assert ledger.is_short is False

    def test_short(self) -> None:
        """测试空头"""
        ledger = PositionLedger()
        ledger.replace_trades([make_trade(-100, "100")])

        assert ledger.net_shares() == -100
        assert ledger.direction() == PositionSide.SHORT
        assert ledger.is_short is True

    def test_flat_is_undefined(self) -> None:
        """测试无持仓时方向为 None"""
        ledger = PositionLedger()
        assert ledger.is_short is None

    def test_override_trades(self) -> None:
        """测试传入成交列表覆盖台账"""
        ledger = PositionLedger()
        ledger.replace_trades([make_trade(100, "100")])
        other = [make_trade(-5, "100")]

        assert ledger.net_shares(other) == -5
        assert ledger.direction(other) == PositionSide.SHORT
        assert ledger.net_shares() == 100


class TestReplaceTrades:
    """replace_trades 测试"""

    def test_zero_sum_clears_ledger(self) -> None:
        """测试净持仓归零时台账清空"""
        ledger = PositionLedger()
        ledger.replace_trades([make_trade(100, "100")])
        ledger.append_trade(make_trade(-100, "110"))

        assert ledger.trades == ()
        assert ledger.net_shares() == 0

    def test_round_trip_value_equality(self) -> None:
        """测试替换后读取结果按值相等"""
        ledger = PositionLedger()
        trades = [make_trade(100, "100"), make_trade(-40, "101.5")]

        ledger.replace_trades(trades)

        assert ledger.get_trades() == trades

    def test_external_list_not_aliased(self) -> None:
        """测试修改原列表不影响台账"""
        ledger = PositionLedger()
        trades = [make_trade(100, "100")]
        ledger.replace_trades(trades)

        trades.append(make_trade(50, "100"))

        assert ledger.net_shares() == 100

    def test_netshares_matches_signed_sum(self) -> None:
        """测试净持仓等于带符号股数之和"""
        ledger = PositionLedger()
        sequence = [make_trade(100, "10"), make_trade(-250, "11"), make_trade(20, "9")]

        ledger.replace_trades(sequence)

        assert ledger.net_shares() == sum(t.shares_count for t in sequence)


class TestTotalEntryShares:
    """开仓方向股数测试"""

    def test_long_counts_buys(self) -> None:
        """测试多头统计买入"""
        ledger = PositionLedger()
        ledger.replace_trades(
            [make_trade(100, "100"), make_trade(50, "101"), make_trade(-30, "102")]
        )
        assert ledger.total_entry_shares_count() == 150

    def test_short_counts_sells(self) -> None:
        """测试空头统计卖出"""
        ledger = PositionLedger()
        ledger.replace_trades([make_trade(-100, "100"), make_trade(40, "95")])
        assert ledger.total_entry_shares_count() == -100


class TestOrders:
    """挂单测试"""

    def test_add_stop_and_target(self) -> None:
        """测试新增止损和止盈"""
        ledger = PositionLedger()
        stop = ledger.add_stop(OrderRequest(shares_count=50, stock_price="95"))
        target = ledger.add_target(OrderRequest(shares_count="40", stock_price=120))

        assert ledger.stops == (StopOrder(shares_count=50, stock_price=Decimal("95")),)
        assert ledger.targets == (
            TargetOrder(shares_count=40, stock_price=Decimal("120")),
        )
        assert stop.shares_count == 50
        assert target.stock_price == Decimal("120")

    @pytest.mark.parametrize(
        ("shares", "price"),
        [(0, "95"), (10, "0"), (-5, "95"), (10, "-1")],
    )
    def test_invalid_order_rejected(self, shares: int, price: str) -> None:
        """测试无效挂单被拒绝且不修改状态"""
        ledger = PositionLedger()
        with pytest.raises(MissingInputError):
            ledger.add_stop(OrderRequest(shares_count=shares, stock_price=price))
        with pytest.raises(MissingInputError):
            ledger.add_target(OrderRequest(shares_count=shares, stock_price=price))

        assert ledger.stops == ()
        assert ledger.targets == ()

    def test_reset_keeps_scalars(self) -> None:
        """测试重置保留标量"""
        ledger = PositionLedger(stock_price="100", risk_per_trade="1000")
        ledger.replace_trades([make_trade(100, "100")])
        ledger.add_stop(OrderRequest(shares_count=10, stock_price="90"))

        ledger.reset()

        assert ledger.trades == ()
        assert ledger.stops == ()
        assert ledger.stock_price == Decimal("100")
        assert ledger.risk_per_trade == Decimal("1000")

    def test_to_dict(self) -> None:
        """测试转换为字典"""
        ledger = PositionLedger(stock_price="100")
        ledger.replace_trades([make_trade(-10, "100")])
        d = ledger.to_dict()

        assert d["net_shares"] == -10
        assert d["side"] == "short"
        assert d["trades"][0]["operation_type"] == "sell"
