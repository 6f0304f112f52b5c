"""
布局算法与相关数据结构（纯逻辑，无 UI）。

对外暴露少量稳定 API，核心实现位于 engine.layout 的子包中。
"""

from .reflow import (
    ReflowOutcome,
    ReflowService,
    RepositionedExtent,
    ReflowTreeNode,
    WidgetSpace,
    compute_reposition,
    generate_tree,
)

__all__ = [
    "generate_tree",
    "compute_reposition",
    "ReflowService",
    "ReflowOutcome",
    "WidgetSpace",
    "ReflowTreeNode",
    "RepositionedExtent",
]
