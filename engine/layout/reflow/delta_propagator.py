"""
高度变化传播（DeltaPropagator）

给定重叠图与每个控件的高度变化，计算受影响控件的新垂直范围：
1. 每个 delta 源把自己的 delta 贡献给其“直接下方”控件（只传播一层）；
   同一控件收到多个上方控件的贡献时求和；
2. 收到贡献的控件整体平移（上下边同时移动，高度不变）；
3. delta 源自身只移动 bottom：若它已在第 2 步被平移，则在平移后的 bottom 上叠加，
   否则以原始 top 为准、bottom = 原 bottom + delta。

已知限制（有意保留）：
- 只传播一层，距离 delta 源两层及以上的控件不会被移动；
- 不处理“被并列控件挡住无法上移”的情况。
"""

from __future__ import annotations

from time import perf_counter
from typing import Dict, Iterable, Iterator, List, Tuple

from engine.utils.logging.logger import log_debug, log_warn

from .errors import UnknownDeltaTargetError
from .reflow_models import DeltaMap, ReflowTree, RepositionedExtent, RepositionResult


# (受影响控件 id, 贡献的 delta)
ShiftContribution = Tuple[str, int]


def get_affected_widget_ids(tree: ReflowTree, widget_id: str) -> List[str]:
    """返回会被该控件高度变化直接影响的控件（即其直接下方控件），按 id 排序。"""
    node = tree.get(widget_id)
    if node is None:
        return []
    return sorted(node.belows)


def resolve_effective_deltas(tree: ReflowTree, deltas: DeltaMap) -> Tuple[Dict[str, int], List[str]]:
    """
    过滤 delta：未知控件与非整数 delta 记录警告后忽略；0 delta 无效果，直接丢弃。

    Returns:
        (有效 delta, 被忽略的控件 id 列表)
    """
    effective: Dict[str, int] = {}
    ignored: List[str] = []
    for widget_id, delta in deltas.items():
        try:
            if widget_id not in tree:
                raise UnknownDeltaTargetError(widget_id)
            if isinstance(delta, bool) or not isinstance(delta, int):
                raise UnknownDeltaTargetError(widget_id, f"delta 不是整数: {delta!r}")
        except UnknownDeltaTargetError as error:
            log_warn("[REFLOW] {}", error)
            ignored.append(str(widget_id))
            continue
        if delta == 0:
            continue
        effective[widget_id] = delta
    return effective, ignored


def iter_shift_contributions(tree: ReflowTree, deltas: DeltaMap) -> Iterator[ShiftContribution]:
    """逐个产出 delta 源对其直接下方控件的贡献。"""
    for source_id, delta in deltas.items():
        for below_id in sorted(tree[source_id].belows):
            yield below_id, delta


def fold_shift_contributions(contributions: Iterable[ShiftContribution]) -> Dict[str, int]:
    """把贡献按控件求和；结果是新字典，不修改任何输入。"""
    shifts: Dict[str, int] = {}
    for widget_id, delta in contributions:
        shifts[widget_id] = shifts.get(widget_id, 0) + delta
    return shifts


def compute_reposition(tree: ReflowTree, deltas: DeltaMap) -> RepositionResult:
    """
    根据高度变化计算受影响控件的新位置。

    Args:
        tree: generate_tree 生成的重叠图（只读）
        deltas: 控件 id -> 高度变化（行）；引用未知控件的条目会被忽略

    Returns:
        控件 id -> RepositionedExtent，仅包含范围实际变化的控件
    """
    start = perf_counter()
    effective_deltas, _ignored = resolve_effective_deltas(tree, deltas)
    repositioned = _compute_extents(tree, effective_deltas)
    log_debug(
        "[REFLOW] 动态高度回流计算耗时 {:.3f} ms（delta 源 {} 个，受影响 {} 个）",
        (perf_counter() - start) * 1000.0,
        len(effective_deltas),
        len(repositioned),
    )
    return repositioned


def _compute_extents(tree: ReflowTree, deltas: Dict[str, int]) -> RepositionResult:
    shifts = fold_shift_contributions(iter_shift_contributions(tree, deltas))

    extents: Dict[str, Tuple[int, int]] = {}
    for widget_id, shift in shifts.items():
        node = tree[widget_id]
        extents[widget_id] = (node.top_row + shift, node.bottom_row + shift)

    for widget_id, delta in deltas.items():
        node = tree[widget_id]
        top_row, bottom_row = extents.get(widget_id, (node.top_row, node.bottom_row))
        new_bottom = bottom_row + delta
        if new_bottom < top_row:
            log_warn(
                "[REFLOW] 控件 {} 缩小 {} 行超过自身高度 {}，bottom 截断到 top",
                widget_id,
                -delta,
                bottom_row - top_row,
            )
            new_bottom = top_row
        extents[widget_id] = (top_row, new_bottom)

    result: RepositionResult = {}
    for widget_id, (top_row, bottom_row) in extents.items():
        node = tree[widget_id]
        if top_row == node.top_row and bottom_row == node.bottom_row:
            continue
        result[widget_id] = RepositionedExtent(top_row=top_row, bottom_row=bottom_row)
    return result
