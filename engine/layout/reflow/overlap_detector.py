"""
空间重叠检测（SpatialOverlapDetector）

把每个控件矩形向下延伸一个哨兵距离后做包围盒求交：
“水平范围有交集、且位于我下方（不论间距多大）”的控件就会与我相交。

实现为按 top 排序的扫描线 + 水平分桶索引：
- 扫描线按 top 升序推进，延伸后底边已越过扫描线的盒子出堆失效；
- 活跃盒子按列区间注册到桶中，查询时只检查与当前盒子列区间相同桶内的候选，
  稀疏布局下远优于 O(N²)；全部互相重叠的极端情况退化为 O(N²)。

排序只影响检测速度与输出顺序，不影响报告哪些对。
排序后的下标只在本模块内部使用，对外只暴露控件 id。
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Dict, List, Sequence, Set, Tuple

from engine.utils.logging.logger import log_warn

from .reflow_models import WidgetSpace


MAX_BOX_SIZE_DEFAULT = 20000

# (left, top, right, 延伸后的 bottom)
ReflowBox = Tuple[int, int, int, int]


@dataclass(frozen=True)
class OverlapPair:
    """
    一对相交的控件（无方向）。

    first_id 为扫描顺序中较早出现的一方；方向判定由 tree_builder 负责。
    """

    first_id: str
    second_id: str


@dataclass(frozen=True)
class OverlapDetectionResult:
    pairs: Tuple[OverlapPair, ...] = ()
    # 超过规模上限时放弃检测：pairs 为空，调用方退化为“仅直接 delta”
    aborted: bool = False


def build_reflow_box(space: WidgetSpace, max_box_size: int = MAX_BOX_SIZE_DEFAULT) -> ReflowBox:
    return (space.left, space.top, space.right, space.bottom + max_box_size)


def ranges_overlap(left_a: int, right_a: int, left_b: int, right_b: int) -> bool:
    """
    半开区间 [left, right) 是否相交。

    相邻列（右边界等于左边界）不算相交；宽度为 0 的区间与任何区间都不相交。
    """
    return max(left_a, left_b) < min(right_a, right_b)


def detect_overlaps(
    spaces: Sequence[WidgetSpace],
    *,
    max_box_size: int = MAX_BOX_SIZE_DEFAULT,
    max_widget_count: int = 0,
    max_pair_count: int = 0,
) -> OverlapDetectionResult:
    """
    返回所有延伸包围盒相交的控件对。

    Args:
        spaces: 已通过校验的控件矩形
        max_box_size: 向下延伸的哨兵距离
        max_widget_count: 控件数量上限，0 表示不限制
        max_pair_count: 相交对数量上限，0 表示不限制

    宽度为 0（left == right）的控件不与任何控件相交，因此在图中没有上下关系。

    Returns:
        OverlapDetectionResult；超过任一上限时 aborted=True 且不返回任何对
    """
    if max_box_size <= 0:
        raise ValueError(f"max_box_size 必须 > 0，当前={max_box_size}")
    if not spaces:
        return OverlapDetectionResult()
    if max_widget_count and len(spaces) > max_widget_count:
        log_warn(
            "[REFLOW] 控件数量 {} 超过重叠检测上限 {}，跳过检测",
            len(spaces),
            max_widget_count,
        )
        return OverlapDetectionResult(aborted=True)

    # 稳定排序：top 相同的控件保持输入顺序
    order = sorted(range(len(spaces)), key=lambda index: spaces[index].top)
    ordered_ids: List[str] = [spaces[index].id for index in order]
    boxes: List[ReflowBox] = [build_reflow_box(spaces[index], max_box_size) for index in order]

    bucket_index = _ColumnBucketIndex(_pick_bucket_size(boxes))
    expiry_heap: List[Tuple[int, int]] = []
    expired: Set[int] = set()
    pairs: List[OverlapPair] = []

    for position, (left, top, right, extended_bottom) in enumerate(boxes):
        while expiry_heap and expiry_heap[0][0] <= top:
            _, expired_position = heapq.heappop(expiry_heap)
            expired.add(expired_position)

        if left < right:
            for candidate in bucket_index.candidates(left, right, expired):
                candidate_left, _, candidate_right, _ = boxes[candidate]
                if not ranges_overlap(candidate_left, candidate_right, left, right):
                    continue
                pairs.append(OverlapPair(ordered_ids[candidate], ordered_ids[position]))
                if max_pair_count and len(pairs) > max_pair_count:
                    log_warn(
                        "[REFLOW] 重叠对数量超过上限 {}（控件数 {}），跳过检测",
                        max_pair_count,
                        len(spaces),
                    )
                    return OverlapDetectionResult(aborted=True)
            bucket_index.register(position, left, right)

        heapq.heappush(expiry_heap, (extended_bottom, position))

    return OverlapDetectionResult(pairs=tuple(pairs))


def _pick_bucket_size(boxes: Sequence[ReflowBox]) -> int:
    """取控件宽度的中位数作为桶宽，典型控件只落在 1~2 个桶里。"""
    widths = sorted(right - left for left, _, right, _ in boxes if right > left)
    if not widths:
        return 1
    return max(1, widths[len(widths) // 2])


class _ColumnBucketIndex:
    """
    活跃盒子的水平分桶索引。

    跨越桶数超过 MAX_BUCKETS_PER_BOX 的超宽盒子不逐桶注册，而是放入 wide_positions，
    每次查询都作为候选；超宽的查询盒子直接扫描全部已注册位置。
    这样单个极宽控件不会让每次注册/查询遍历 宽度/桶宽 个桶。
    """

    MAX_BUCKETS_PER_BOX = 64

    def __init__(self, bucket_size: int) -> None:
        self.bucket_size = bucket_size
        self.bucket_map: Dict[int, List[int]] = {}
        self.wide_positions: List[int] = []
        self.registered_positions: List[int] = []

    def _bucket_range(self, left: int, right: int) -> range:
        return range(left // self.bucket_size, (right - 1) // self.bucket_size + 1)

    def _is_wide(self, left: int, right: int) -> bool:
        return len(self._bucket_range(left, right)) > self.MAX_BUCKETS_PER_BOX

    def register(self, position: int, left: int, right: int) -> None:
        self.registered_positions.append(position)
        if self._is_wide(left, right):
            self.wide_positions.append(position)
            return
        for bucket_index in self._bucket_range(left, right):
            self.bucket_map.setdefault(bucket_index, []).append(position)

    def candidates(self, left: int, right: int, expired: Set[int]) -> List[int]:
        """
        返回可能与 [left, right) 相交的活跃候选（按扫描顺序升序）。

        顺带把已失效的位置从桶中清掉，避免桶无限增长。
        """
        if self._is_wide(left, right):
            self.registered_positions = [
                position for position in self.registered_positions if position not in expired
            ]
            return list(self.registered_positions)

        seen: Set[int] = set()
        for bucket_index in self._bucket_range(left, right):
            bucket = self.bucket_map.get(bucket_index)
            if not bucket:
                continue
            alive = [position for position in bucket if position not in expired]
            if len(alive) != len(bucket):
                self.bucket_map[bucket_index] = alive
            seen.update(alive)
        self.wide_positions = [position for position in self.wide_positions if position not in expired]
        seen.update(self.wide_positions)
        return sorted(seen)
