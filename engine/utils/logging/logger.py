from __future__ import annotations

import logging
from typing import Any

__all__ = [
    "get_engine_logger",
    "set_log_level",
    "log_debug",
    "log_info",
    "log_warn",
    "log_error",
]

_ENGINE_LOGGER_NAME = "engine"

_engine_logger = logging.getLogger(_ENGINE_LOGGER_NAME)
_engine_logger.addHandler(logging.NullHandler())


def get_engine_logger() -> logging.Logger:
    """返回引擎统一使用的 logger（名称固定为 "engine"）。"""
    return _engine_logger


def set_log_level(level: int | str) -> None:
    """调整引擎日志级别；入口脚本/测试可按需调用。"""
    _engine_logger.setLevel(level)


def _format_message(message: object, args: tuple[Any, ...]) -> str:
    text = message if isinstance(message, str) else str(message)
    if not args:
        return text
    return text.format(*args)


def _emit(level: int, message: object, args: tuple[Any, ...]) -> None:
    # 级别未开启时不做格式化，避免热路径上的字符串拼接
    if not _engine_logger.isEnabledFor(level):
        return
    _engine_logger.log(level, _format_message(message, args), stacklevel=3)


def log_debug(message: object, *args: Any) -> None:
    """调试日志：`log_debug("耗时 {} ms", elapsed)`"""
    _emit(logging.DEBUG, message, args)


def log_info(message: object, *args: Any) -> None:
    _emit(logging.INFO, message, args)


def log_warn(message: object, *args: Any) -> None:
    """可恢复的异常情况（输入被跳过/忽略等），不打断调用方。"""
    _emit(logging.WARNING, message, args)


def log_error(message: object, *args: Any) -> None:
    _emit(logging.ERROR, message, args)
