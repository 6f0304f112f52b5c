"""
重叠图构建（OverlapGraphBuilder）

输入一份完整的控件矩形快照，输出 控件 id -> ReflowTreeNode 的重叠图：
- 先校验矩形，非法矩形记录警告后排除（不中断整次构建）；
- 再做空间重叠检测，把每个相交对判定为“上方/下方”关系。

方向判定：top 较小者为“上方”。top 相等时按检测顺序取对中的第一个为“上方”，
这只是扫描实现的副产物，不代表任何语义，调用方不应依赖。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple, Union

from engine.utils.logging.logger import log_warn

from .errors import MalformedRectangleError
from .overlap_detector import MAX_BOX_SIZE_DEFAULT, OverlapPair, detect_overlaps
from .reflow_models import ReflowTree, ReflowTreeNode, WidgetSpace


RawWidgetSpace = Union[WidgetSpace, Mapping[str, Any]]

_COORDINATE_FIELDS: Tuple[str, ...] = ("left", "right", "top", "bottom")


@dataclass(frozen=True)
class TreeBuildResult:
    tree: ReflowTree
    skipped_widget_ids: Tuple[str, ...] = ()
    detection_aborted: bool = False


def coerce_widget_space(raw: RawWidgetSpace) -> WidgetSpace:
    """
    将 WidgetSpace 或 {"id", "left", "right", "top", "bottom"} 字典校验为 WidgetSpace。

    Raises:
        MalformedRectangleError: id 缺失、坐标缺失/非整数、或范围颠倒
    """
    if isinstance(raw, WidgetSpace):
        widget_id: Any = raw.id
        values: Dict[str, Any] = {name: getattr(raw, name) for name in _COORDINATE_FIELDS}
    elif isinstance(raw, Mapping):
        widget_id = raw.get("id")
        values = {name: raw.get(name) for name in _COORDINATE_FIELDS}
    else:
        raise MalformedRectangleError(None, f"不支持的矩形类型 {type(raw).__name__}")

    if not isinstance(widget_id, str) or not widget_id:
        raise MalformedRectangleError(None, "缺少控件 id")
    for name, value in values.items():
        if value is None:
            raise MalformedRectangleError(widget_id, f"缺少坐标 {name}")
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedRectangleError(widget_id, f"坐标 {name} 不是整数: {value!r}")
    if values["left"] > values["right"]:
        raise MalformedRectangleError(widget_id, f"left={values['left']} > right={values['right']}")
    if values["top"] > values["bottom"]:
        raise MalformedRectangleError(widget_id, f"top={values['top']} > bottom={values['bottom']}")

    if isinstance(raw, WidgetSpace):
        return raw
    return WidgetSpace(id=widget_id, **values)


def collect_valid_spaces(raw_spaces: Iterable[RawWidgetSpace]) -> Tuple[List[WidgetSpace], List[str]]:
    """
    校验整份快照：返回 (合法矩形列表, 被跳过的控件 id 列表)。

    重复 id 只保留第一次出现的矩形。
    """
    valid: List[WidgetSpace] = []
    skipped: List[str] = []
    seen_ids: Set[str] = set()
    for raw in raw_spaces:
        try:
            space = coerce_widget_space(raw)
            if space.id in seen_ids:
                raise MalformedRectangleError(space.id, "控件 id 重复")
        except MalformedRectangleError as error:
            log_warn("[REFLOW] 跳过非法控件矩形: {}", error)
            if error.widget_id is not None:
                skipped.append(error.widget_id)
            continue
        seen_ids.add(space.id)
        valid.append(space)
    return valid, skipped


def classify_overlap_pairs(
    pairs: Iterable[OverlapPair],
    top_by_id: Mapping[str, int],
) -> Tuple[Dict[str, Set[str]], Dict[str, Set[str]]]:
    """
    把无方向的相交对判定为上下关系。

    Returns:
        (above_map, below_map)：above_map[x] 为 x 上方的控件，below_map[x] 为 x 下方的控件
    """
    above_map: Dict[str, Set[str]] = {}
    below_map: Dict[str, Set[str]] = {}
    for pair in pairs:
        if pair.first_id == pair.second_id:
            continue
        if top_by_id[pair.second_id] < top_by_id[pair.first_id]:
            upper_id, lower_id = pair.second_id, pair.first_id
        else:
            upper_id, lower_id = pair.first_id, pair.second_id
        # 每对只保留一个方向
        if upper_id in below_map.get(lower_id, ()):
            continue
        below_map.setdefault(upper_id, set()).add(lower_id)
        above_map.setdefault(lower_id, set()).add(upper_id)
    return above_map, below_map


def build_reflow_tree(
    raw_spaces: Iterable[RawWidgetSpace],
    *,
    max_box_size: int = MAX_BOX_SIZE_DEFAULT,
    max_widget_count: int = 0,
    max_pair_count: int = 0,
) -> TreeBuildResult:
    """构建重叠图，并附带被跳过的控件与检测是否被放弃等诊断信息。"""
    spaces, skipped = collect_valid_spaces(raw_spaces)
    detection = detect_overlaps(
        spaces,
        max_box_size=max_box_size,
        max_widget_count=max_widget_count,
        max_pair_count=max_pair_count,
    )
    top_by_id = {space.id: space.top for space in spaces}
    above_map, below_map = classify_overlap_pairs(detection.pairs, top_by_id)

    tree: ReflowTree = {}
    for space in spaces:
        tree[space.id] = ReflowTreeNode(
            aboves=frozenset(above_map.get(space.id, ())),
            belows=frozenset(below_map.get(space.id, ())),
            top_row=space.top,
            bottom_row=space.bottom,
        )
    return TreeBuildResult(
        tree=tree,
        skipped_widget_ids=tuple(skipped),
        detection_aborted=detection.aborted,
    )


def generate_tree(
    raw_spaces: Iterable[RawWidgetSpace],
    *,
    max_box_size: int = MAX_BOX_SIZE_DEFAULT,
    max_widget_count: int = 0,
    max_pair_count: int = 0,
) -> ReflowTree:
    """
    把所有同级控件整理成重叠图，用于判断哪些控件的高度变化会影响哪些兄弟控件的位置。

    不在图中的控件（非法矩形）其高度变化不会影响任何其他控件。
    """
    return build_reflow_tree(
        raw_spaces,
        max_box_size=max_box_size,
        max_widget_count=max_widget_count,
        max_pair_count=max_pair_count,
    ).tree
