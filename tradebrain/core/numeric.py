"""
数值工具

- Decimal 转换
- 金额四舍五入 (half-up)
- 股数向下取整
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def to_decimal(value: Any) -> Decimal:
    """
    转换为 Decimal

    None 与空字符串视为 0，其余输入按 str() 转换，不做范围校验。
    """
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def round_currency(value: Decimal, places: int = 2) -> Decimal:
    """金额保留指定位小数，half-up 舍入；NaN 原样返回"""
    if value.is_nan():
        return value
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def floor_shares(value: Decimal) -> int:
    """向下取整为股数"""
    return math.floor(value)
