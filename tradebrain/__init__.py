"""
tradebrain - 单品种持仓风险计算器

包含:
- core: 类型、异常、配置
- portfolio: 台账与盈亏核算
- risk: 风险定仓与挂单保护
- ops: 日志
"""

from tradebrain.brain import CalculatorSnapshot, TradeBrain

__all__ = ["TradeBrain", "CalculatorSnapshot"]

__version__ = "0.1.0"
