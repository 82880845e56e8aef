"""
Ops 模块 - 运维支持

包含:
- logging: structlog 日志配置
"""

from tradebrain.ops.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
