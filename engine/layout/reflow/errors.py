"""
回流计算中的异常类型。

这些异常只在引擎内部抛出并就地捕获：回流运行在交互编辑循环里，
任何一次失败都应退化为“不额外移动”，而不是中断会话。
"""

from __future__ import annotations

from typing import Optional


class ReflowError(Exception):
    """回流相关异常基类"""


class MalformedRectangleError(ReflowError, ValueError):
    """矩形坐标缺失、类型错误或上下/左右颠倒"""

    def __init__(self, widget_id: Optional[str], reason: str):
        self.widget_id = widget_id
        self.reason = reason
        super().__init__(f"非法控件矩形 {widget_id!r}: {reason}")


class UnknownDeltaTargetError(ReflowError, KeyError):
    """delta 指向不在重叠图中的控件，或 delta 值本身非法"""

    def __init__(self, widget_id: object, reason: str = "重叠图中不存在该控件"):
        self.widget_id = widget_id
        self.reason = reason
        super().__init__(widget_id)

    def __str__(self) -> str:
        return f"忽略 delta {self.widget_id!r}: {self.reason}"
