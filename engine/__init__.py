"""
引擎核心公共 API 导出点（稳定入口）。

仅暴露对外使用的接口；子模块默认内部。
"""

# Layout（动态高度回流）
from .layout import (
    ReflowOutcome,
    ReflowService,
    RepositionedExtent,
    ReflowTreeNode,
    WidgetSpace,
    compute_reposition,
    generate_tree,
)

# Configs
from .configs.settings import Settings, settings

__all__ = [
    "generate_tree",
    "compute_reposition",
    "ReflowService",
    "ReflowOutcome",
    "WidgetSpace",
    "ReflowTreeNode",
    "RepositionedExtent",
    "Settings",
    "settings",
]
