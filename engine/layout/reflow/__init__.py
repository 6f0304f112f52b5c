"""
动态高度回流（纯逻辑，无 UI）。

控件高度变化后，不重跑完整布局，只计算需要跟随移动的兄弟控件：
- overlap_detector：延伸包围盒 + 扫描线的空间重叠检测
- tree_builder：把相交对整理为“上方/下方”重叠图
- delta_propagator：把高度变化沿“下方”关系传播一层
"""

from .delta_propagator import compute_reposition, get_affected_widget_ids
from .errors import MalformedRectangleError, ReflowError, UnknownDeltaTargetError
from .reflow_helpers import apply_reposition, compute_height_deltas
from .reflow_models import (
    DeltaMap,
    ReflowTree,
    ReflowTreeNode,
    RepositionedExtent,
    RepositionResult,
    WidgetSpace,
)
from .reflow_service import ReflowOutcome, ReflowService
from .tree_builder import generate_tree

__all__ = [
    "generate_tree",
    "compute_reposition",
    "get_affected_widget_ids",
    "compute_height_deltas",
    "apply_reposition",
    "ReflowService",
    "ReflowOutcome",
    "WidgetSpace",
    "ReflowTreeNode",
    "RepositionedExtent",
    "ReflowTree",
    "DeltaMap",
    "RepositionResult",
    "ReflowError",
    "MalformedRectangleError",
    "UnknownDeltaTargetError",
]
