"""
风险定仓

职责:
- 按风险预算与风险线价差计算股数
- 开仓/加仓 (按风险倍数)
- 按风险百分比执行: 根据当前方向判断为加仓或减仓
- 平仓路径: 按股数、按持仓百分比

所有命令先校验后修改，校验失败时台账保持不变。
"""

from decimal import Decimal

import structlog

from tradebrain.core.errors import (
    DegenerateRiskLineError,
    InvalidRiskLineError,
    MissingInputError,
)
from tradebrain.core.numeric import floor_shares
from tradebrain.core.typing import (
    AddTradeRequest,
    OperationType,
    PositionPercentRequest,
    PositionSide,
    RiskPercentRequest,
    SellExistingRequest,
    Trade,
)
from tradebrain.portfolio.ledger import PositionLedger

logger = structlog.get_logger(__name__)

HUNDRED = Decimal("100")


def shares_for_risk(risk_amount: Decimal, price_distance: Decimal) -> int:
    """
    风险金额 / 价差，向下取整为股数

    Raises:
        DegenerateRiskLineError: 价差为零
    """
    if price_distance == 0:
        raise DegenerateRiskLineError("风险线与股价相同，无法计算股数")
    return floor_shares(risk_amount / price_distance)


class RiskSizingEngine:
    """
    风险定仓引擎

    生成成交并通过 PositionLedger.replace_trades 写入台账。
    """

    def __init__(self, ledger: PositionLedger) -> None:
        self.ledger = ledger

    # ==================================================================
    # 开仓 / 加仓
    # ==================================================================

    def add_trade(self, request: AddTradeRequest) -> Trade:
        """
        按风险倍数开仓或加仓

        股数 = floor(单笔风险 * 倍数 / |股价 - 风险线|)，卖出时取负。

        Raises:
            MissingInputError: 倍数为零
            InvalidRiskLineError: 风险线位于错误一侧
            DegenerateRiskLineError: 风险线等于股价
        """
        stock_price = self.ledger.stock_price
        risk_line = request.risk_line
        is_sell = request.operation_type is OperationType.SELL

        if not request.multiplier:
            raise MissingInputError("风险倍数缺失")
        if is_sell and stock_price > risk_line:
            raise InvalidRiskLineError("卖出时风险线应高于股价")
        if not is_sell and stock_price < risk_line:
            raise InvalidRiskLineError("买入时风险线应低于股价")

        risk_amount = self.ledger.risk_per_trade * request.multiplier
        price_distance = risk_line - stock_price if is_sell else stock_price - risk_line
        shares_count = shares_for_risk(risk_amount, price_distance)

        trade = Trade(
            stock_price=stock_price,
            shares_count=-shares_count if is_sell else shares_count,
            operation_type=request.operation_type,
            risk_line=risk_line,
        )
        self.ledger.append_trade(trade)
        logger.info(
            "trade_added",
            operation=trade.operation_type.value,
            shares_count=trade.shares_count,
            stock_price=str(stock_price),
            risk_line=str(risk_line),
            risk_amount=str(risk_amount),
        )
        return trade

    def execute_by_risk_percent(self, request: RiskPercentRequest) -> Trade:
        """
        按风险百分比执行

        - 空头: 买入为回补 (减仓)，卖出为加仓
        - 多头: 买入为加仓，卖出为减仓
        - 无持仓: 按开仓处理

        加仓委托 add_trade (倍数 = 百分比 / 100)；减仓按同一风险公式计算股数后
        走平仓路径。

        Raises:
            MissingInputError: 百分比为零
        """
        if not request.risk_percent:
            raise MissingInputError("风险百分比缺失")

        side = self.ledger.direction()
        is_adding = request.operation_type is side.opening_operation
        if side is PositionSide.FLAT or is_adding:
            return self.add_trade(
                AddTradeRequest(
                    multiplier=request.risk_percent / HUNDRED,
                    operation_type=request.operation_type,
                    risk_line=request.risk_line,
                )
            )

        stock_price = self.ledger.stock_price
        risk_line = request.risk_line
        if side is PositionSide.SHORT:
            price_distance = risk_line - stock_price
        else:
            price_distance = stock_price - risk_line
        if price_distance < 0:
            raise InvalidRiskLineError(f"{side.value} 减仓时风险线位于股价错误一侧")

        risk_amount = self.ledger.risk_per_trade * request.risk_percent / HUNDRED
        shares_count = shares_for_risk(risk_amount, price_distance)
        return self.sell_existing_trade(
            SellExistingRequest(
                operation_type=side.closing_operation,
                shares_count=shares_count,
                risk_line=risk_line,
            )
        )

    # ==================================================================
    # 平仓路径
    # ==================================================================

    def sell_existing_trade(self, request: SellExistingRequest) -> Trade:
        """
        按股数平仓

        Raises:
            MissingInputError: 股数为零、无有效股价或风险线为零
        """
        stock_price = self.ledger.stock_price
        if not request.shares_count or stock_price <= 0 or not request.risk_line:
            raise MissingInputError("平仓数据缺失")

        is_sell = request.operation_type is OperationType.SELL
        trade = Trade(
            stock_price=stock_price,
            shares_count=-request.shares_count if is_sell else request.shares_count,
            operation_type=request.operation_type,
            risk_line=request.risk_line,
        )
        self.ledger.append_trade(trade)
        logger.info(
            "position_reduced",
            operation=trade.operation_type.value,
            shares_count=trade.shares_count,
            stock_price=str(stock_price),
            remaining_shares=self.ledger.net_shares(),
        )
        return trade

    def sell_by_position_percent(self, request: PositionPercentRequest) -> Trade:
        """
        按持仓百分比平仓

        100% 时平掉全部持仓，否则 floor(|净持仓| * 百分比 / 100)。
        空头以买入回补，多头以卖出平仓。

        Raises:
            MissingInputError: 百分比为零，或计算股数为零
        """
        if not request.position_percent:
            raise MissingInputError("持仓百分比缺失")

        open_shares = abs(self.ledger.net_shares())
        if request.position_percent == HUNDRED:
            shares_to_sell = open_shares
        else:
            shares_to_sell = floor_shares(
                open_shares * request.position_percent / HUNDRED
            )

        return self.sell_existing_trade(
            SellExistingRequest(
                operation_type=self.ledger.direction().closing_operation,
                shares_count=shares_to_sell,
                risk_line=request.risk_line,
            )
        )

    def close_shares(self, shares_count: int, risk_line: Decimal) -> Trade:
        """按当前方向平掉指定股数 (空头买入，否则卖出)"""
        return self.sell_existing_trade(
            SellExistingRequest(
                operation_type=self.ledger.direction().closing_operation,
                shares_count=shares_count,
                risk_line=risk_line,
            )
        )
