"""
调用方辅助函数：从测量高度得到 delta、把回流结果写回矩形快照。

这些步骤属于布局控制器的职责，放在这里便于 UI 层与工具脚本复用同一套换算。
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Mapping

from engine.utils.logging.logger import log_warn

from .reflow_models import RepositionResult, WidgetSpace
from .tree_builder import collect_valid_spaces


def compute_height_deltas(
    previous_spaces: Iterable[WidgetSpace],
    measured_heights: Mapping[str, int],
) -> Dict[str, int]:
    """
    对比快照中的高度与新测量的高度（行），返回高度实际变化的控件 delta。

    快照中的非法矩形（坐标缺失/非整数/颠倒、重复 id）记录警告后跳过，与建图时的处理一致；
    测量结果中不在快照里的控件会被忽略；负高度视为测量错误，同样忽略。
    """
    valid_spaces, _skipped = collect_valid_spaces(previous_spaces)
    height_by_id = {space.id: space.height for space in valid_spaces}
    deltas: Dict[str, int] = {}
    for widget_id, new_height in measured_heights.items():
        previous_height = height_by_id.get(widget_id)
        if previous_height is None:
            log_warn("[REFLOW] 测量高度对应的控件不在快照中: {}", widget_id)
            continue
        if new_height < 0:
            log_warn("[REFLOW] 控件 {} 测量高度为负数 {}，忽略", widget_id, new_height)
            continue
        if new_height != previous_height:
            deltas[widget_id] = new_height - previous_height
    return deltas


def apply_reposition(
    spaces: Iterable[WidgetSpace],
    repositioned: RepositionResult,
) -> List[WidgetSpace]:
    """返回写回新 top/bottom 后的矩形列表；未受影响的控件原样返回，列顺序保持不变。"""
    updated: List[WidgetSpace] = []
    for space in spaces:
        extent = repositioned.get(space.id)
        if extent is None:
            updated.append(space)
            continue
        updated.append(replace(space, top=extent.top_row, bottom=extent.bottom_row))
    return updated
