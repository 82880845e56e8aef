"""
交易计算器

对外的命令/查询入口，组合:
- PositionLedger: 台账
- RiskSizingEngine: 风险定仓与平仓
- PnLCalculator: 均价/盈亏/保本价
- ProtectionAccountant: 挂单保护

每个会话构造一个实例，由外部适配层 (界面、CLI) 持有并调用。
"""

import random
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from functools import wraps
from typing import Any, ParamSpec, TypeVar

import structlog

from tradebrain.core.config import CalculatorSettings
from tradebrain.core.errors import TradeBrainError
from tradebrain.core.typing import (
    AddTradeRequest,
    OrderRequest,
    PositionPercentRequest,
    RiskPercentRequest,
    SellExistingRequest,
    StopOrder,
    TargetOrder,
    Trade,
)
from tradebrain.portfolio.accounting import PnLCalculator
from tradebrain.portfolio.ledger import PositionLedger
from tradebrain.risk.protection import (
    OrdersPrediction,
    ProtectionAccountant,
    ProtectionSummary,
)
from tradebrain.risk.sizing import RiskSizingEngine

logger = structlog.get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def command(func: Callable[P, R]) -> Callable[P, R]:
    """命令包装: 记录被拒绝的命令后原样抛出"""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except TradeBrainError as e:
            logger.warning(
                "command_rejected",
                command=func.__name__,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

    return wrapper


@dataclass
class CalculatorSnapshot:
    """
    计算器快照

    供渲染层使用的完整只读视图；金额保留两位小数，股数为整数。
    """

    trades: list[Trade] = field(default_factory=list)
    stops: list[StopOrder] = field(default_factory=list)
    targets: list[TargetOrder] = field(default_factory=list)
    is_in_roundtrip_trade: bool = False
    is_short: bool | None = None
    avg_price: Decimal = Decimal("0")
    roundtrip_profit: Decimal = Decimal("0")
    unrealized_roundtrip_profit: Decimal = Decimal("0")
    bert: Decimal = Decimal("NaN")
    last_operation_count: int | None = None
    executions_count: int = 0
    percent_protected_shares: ProtectionSummary = field(
        default_factory=ProtectionSummary
    )
    update_orders_prediction: OrdersPrediction = field(
        default_factory=OrdersPrediction
    )
    active_shares_count: int = 0
    total_entry_shares_count: int = 0
    stock_price: Decimal = Decimal("0")
    risk_per_trade: Decimal = Decimal("0")

    @property
    def side_label(self) -> str:
        """方向标签: short / long / N/A"""
        if self.is_short is None:
            return "N/A"
        return "short" if self.is_short else "long"

    def to_dict(self) -> dict[str, Any]:
        """转换为字典 (Decimal 以字符串表示)"""
        return {
            "trades": [t.to_dict() for t in self.trades],
            "stops": [s.to_dict() for s in self.stops],
            "targets": [t.to_dict() for t in self.targets],
            "is_in_roundtrip_trade": self.is_in_roundtrip_trade,
            "is_short": self.is_short,
            "avg_price": str(self.avg_price),
            "roundtrip_profit": str(self.roundtrip_profit),
            "unrealized_roundtrip_profit": str(self.unrealized_roundtrip_profit),
            "bert": str(self.bert),
            "last_operation_count": self.last_operation_count,
            "executions_count": self.executions_count,
            "percent_protected_shares": self.percent_protected_shares.to_dict(),
            "update_orders_prediction": self.update_orders_prediction.to_dict(),
            "active_shares_count": self.active_shares_count,
            "total_entry_shares_count": self.total_entry_shares_count,
            "stock_price": str(self.stock_price),
            "risk_per_trade": str(self.risk_per_trade),
        }


class TradeBrain:
    """
    交易计算器

    单线程同步使用；若在并发宿主中使用，需由调用方按品种加锁。
    """

    def __init__(
        self,
        settings: CalculatorSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or CalculatorSettings()
        self.ledger = PositionLedger(
            stock_price=self.settings.stock_price,
            risk_per_trade=self.settings.risk_per_trade,
        )
        self.sizing = RiskSizingEngine(self.ledger)
        self.pnl = PnLCalculator(self.ledger, self.settings.currency_places)
        self.protection = ProtectionAccountant(self.ledger)
        self._rng = rng or random.Random()

    # ==================================================================
    # 命令
    # ==================================================================

    def set_stock_price(self, value: Any) -> None:
        self.ledger.set_stock_price(value)
        logger.debug("stock_price_set", stock_price=str(self.ledger.stock_price))

    def set_risk_per_trade(self, value: Any) -> None:
        self.ledger.set_risk_per_trade(value)
        logger.debug(
            "risk_per_trade_set", risk_per_trade=str(self.ledger.risk_per_trade)
        )

    def nudge_stock_price(self, direction: int | None = None) -> Decimal:
        """
        模拟价格跳动

        Args:
            direction: +1 / -1，缺省时随机

        Returns:
            新股价
        """
        if direction is None:
            direction = 1 if self._rng.random() < 0.5 else -1
        new_price = self.ledger.stock_price + self.settings.price_step * direction
        self.set_stock_price(new_price)
        return new_price

    @command
    def add_trade(self, request: AddTradeRequest) -> Trade:
        return self.sizing.add_trade(request)

    @command
    def execute_by_risk_percent(self, request: RiskPercentRequest) -> Trade:
        return self.sizing.execute_by_risk_percent(request)

    @command
    def sell_existing_trade(self, request: SellExistingRequest) -> Trade:
        return self.sizing.sell_existing_trade(request)

    @command
    def sell_by_position_percent(self, request: PositionPercentRequest) -> Trade:
        return self.sizing.sell_by_position_percent(request)

    @command
    def close_shares(self, shares_count: int, risk_line: Decimal) -> Trade:
        return self.sizing.close_shares(shares_count, risk_line)

    @command
    def add_stop(self, request: OrderRequest) -> StopOrder:
        return self.ledger.add_stop(request)

    @command
    def add_target(self, request: OrderRequest) -> TargetOrder:
        return self.ledger.add_target(request)

    def rebalance_orders(self) -> OrdersPrediction:
        return self.protection.rebalance_orders()

    def reset(self) -> None:
        """开始新的会话: 清空成交与挂单"""
        self.ledger.reset()
        logger.info("calculator_reset")

    # ==================================================================
    # 查询
    # ==================================================================

    def get_trades(self) -> list[Trade]:
        return self.ledger.get_trades()

    def get_info(self) -> CalculatorSnapshot:
        """生成快照，所有派生值从台账重新计算"""
        trades = self.ledger.get_trades()
        last_trade = self.ledger.last_trade
        return CalculatorSnapshot(
            trades=trades,
            stops=list(self.ledger.stops),
            targets=list(self.ledger.targets),
            is_in_roundtrip_trade=bool(trades),
            is_short=self.ledger.is_short,
            avg_price=self.pnl.average_price(),
            roundtrip_profit=self.pnl.realized_round_trip_profit(),
            unrealized_roundtrip_profit=self.pnl.unrealized_profit(),
            bert=self.pnl.break_even_adjusted(),
            last_operation_count=last_trade.shares_count if last_trade else None,
            executions_count=len(trades),
            percent_protected_shares=self.protection.percent_protected(),
            update_orders_prediction=self.protection.update_orders_prediction(),
            active_shares_count=self.ledger.net_shares(),
            total_entry_shares_count=self.ledger.total_entry_shares_count(),
            stock_price=self.ledger.stock_price,
            risk_per_trade=self.ledger.risk_per_trade,
        )
