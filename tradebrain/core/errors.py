"""
计算器异常定义

所有校验都是本地同步的，失败的命令不会修改任何状态。
"""


class TradeBrainError(ValueError):
    """计算器错误基类"""


class MissingInputError(TradeBrainError):
    """必填数值字段为零或缺失"""


class InvalidRiskLineError(TradeBrainError):
    """风险线位于价格的错误一侧"""


class DegenerateRiskLineError(TradeBrainError):
    """风险线与价格重合，价差为零"""


class DegenerateAverageError(TradeBrainError):
    """相关方向上没有成交量，无法计算均价"""
