"""Logging 相关工具子包

提供统一日志接口：
- logger：log_debug/log_info/log_warn/log_error 等统一日志接口（`{}` 占位符格式化）
"""

__all__ = ["logger"]
