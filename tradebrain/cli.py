#!/usr/bin/env python3
"""
会话回放脚本

功能:
- 从 JSON 文件读取命令序列
- 依次在新的计算器实例上执行
- 输出最终快照 (JSON)

场景文件格式:
    [
        {"command": "set_risk_per_trade", "value": 1000},
        {"command": "set_stock_price", "value": 100},
        {"command": "add_trade", "multiplier": 1, "operation_type": "buy", "risk_line": 90},
        {"command": "add_target", "shares_count": 40, "stock_price": 120},
        {"command": "rebalance_orders"}
    ]

使用方式:
    tradebrain-replay scenario.json
    tradebrain-replay scenario.json --pretty --stop-on-error
"""

import argparse
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from tradebrain.brain import TradeBrain
from tradebrain.core.config import get_settings
from tradebrain.core.errors import TradeBrainError
from tradebrain.core.typing import (
    AddTradeRequest,
    OrderRequest,
    PositionPercentRequest,
    RiskPercentRequest,
    SellExistingRequest,
)
from tradebrain.ops.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _dispatch_table(brain: TradeBrain) -> dict[str, Callable[[dict[str, Any]], Any]]:
    """命令名 -> 执行函数"""
    return {
        "set_stock_price": lambda a: brain.set_stock_price(a["value"]),
        "set_risk_per_trade": lambda a: brain.set_risk_per_trade(a["value"]),
        "nudge_stock_price": lambda a: brain.nudge_stock_price(a.get("direction")),
        "add_trade": lambda a: brain.add_trade(AddTradeRequest(**a)),
        "execute_by_risk_percent": lambda a: brain.execute_by_risk_percent(
            RiskPercentRequest(**a)
        ),
        "sell_existing_trade": lambda a: brain.sell_existing_trade(
            SellExistingRequest(**a)
        ),
        "sell_by_position_percent": lambda a: brain.sell_by_position_percent(
            PositionPercentRequest(**a)
        ),
        "close_shares": lambda a: brain.close_shares(a["shares_count"], a["risk_line"]),
        "add_stop": lambda a: brain.add_stop(OrderRequest(**a)),
        "add_target": lambda a: brain.add_target(OrderRequest(**a)),
        "rebalance_orders": lambda a: brain.rebalance_orders(),
        "reset": lambda a: brain.reset(),
    }


def replay(
    brain: TradeBrain,
    steps: list[dict[str, Any]],
    stop_on_error: bool = False,
) -> list[dict[str, Any]]:
    """
    回放命令序列

    Args:
        brain: 计算器实例
        steps: 命令列表
        stop_on_error: 遇到错误时是否中止

    Returns:
        错误列表 (step 序号、命令、错误信息)
    """
    handlers = _dispatch_table(brain)
    errors: list[dict[str, Any]] = []

    for index, step in enumerate(steps):
        args = dict(step)
        name = args.pop("command", None)
        handler = handlers.get(name)
        if handler is None:
            raise ValueError(f"未知命令: {name}")

        try:
            handler(args)
        except TradeBrainError as e:
            errors.append(
                {"step": index, "command": name, "error": type(e).__name__, "message": str(e)}
            )
            if stop_on_error:
                break

    return errors


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="回放交易计算器命令序列")
    parser.add_argument("scenario", type=Path, help="场景 JSON 文件")
    parser.add_argument("--pretty", action="store_true", help="格式化输出")
    parser.add_argument("--stop-on-error", action="store_true", help="遇到错误时中止")
    parser.add_argument("--log-level", default=None, help="日志级别")
    args = parser.parse_args(argv)

    configure_logging(log_level=args.log_level)

    steps = json.loads(args.scenario.read_text(encoding="utf-8"))
    if not isinstance(steps, list):
        parser.error("场景文件必须是命令列表")

    brain = TradeBrain(get_settings().calculator)
    errors = replay(brain, steps, stop_on_error=args.stop_on_error)
    logger.info("replay_finished", steps=len(steps), errors=len(errors))

    output = {"snapshot": brain.get_info().to_dict(), "errors": errors}
    print(json.dumps(output, indent=2 if args.pretty else None, ensure_ascii=False))

    return 1 if errors and args.stop_on_error else 0


if __name__ == "__main__":
    sys.exit(main())
