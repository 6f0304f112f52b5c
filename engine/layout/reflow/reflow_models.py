from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping


@dataclass(frozen=True)
class WidgetSpace:
    """
    控件在画布网格上占据的矩形（单位：网格行/列，不是像素）。

    约束：left <= right，top <= bottom；由 tree_builder 在建图前校验，非法矩形会被跳过。
    """

    id: str
    left: int
    right: int
    top: int
    bottom: int

    @property
    def height(self) -> int:
        return self.bottom - self.top


@dataclass(frozen=True)
class ReflowTreeNode:
    """
    重叠图中的单个节点（每个控件一个）。

    - aboves：直接位于该控件上方、且水平范围有交集的控件 id
    - belows：直接位于该控件下方、且水平范围有交集的控件 id
    - top_row / bottom_row：原始矩形的上下边界，原样拷贝，不参与修改
    """

    aboves: FrozenSet[str] = field(default_factory=frozenset)
    belows: FrozenSet[str] = field(default_factory=frozenset)
    top_row: int = 0
    bottom_row: int = 0


@dataclass(frozen=True)
class RepositionedExtent:
    """回流后的新垂直范围"""

    top_row: int
    bottom_row: int

    def as_tuple(self) -> tuple[int, int]:
        return self.top_row, self.bottom_row


# 控件 id -> 节点；每次回流请求从完整快照重建，传播阶段只读
ReflowTree = Dict[str, ReflowTreeNode]
# 控件 id -> 高度变化（行，正数=变高，负数=变矮），仅包含高度直接变化的控件
DeltaMap = Mapping[str, int]
# 控件 id -> 新范围；仅包含范围实际发生变化的控件
RepositionResult = Dict[str, RepositionedExtent]
