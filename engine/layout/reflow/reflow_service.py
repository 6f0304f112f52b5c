"""
回流服务：按顺序执行 建图 -> 传播，附带耗时与诊断信息。

服务对象只持有只读参数，不在调用之间保留任何快照或图；
多个编辑器实例可以各自持有（或共享）同一个服务对象。
"""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Iterable, Tuple

from engine.configs.settings import settings
from engine.utils.logging.logger import log_info

from .delta_propagator import compute_reposition, resolve_effective_deltas
from .overlap_detector import MAX_BOX_SIZE_DEFAULT
from .reflow_models import DeltaMap, ReflowTree, RepositionResult
from .tree_builder import RawWidgetSpace, build_reflow_tree


@dataclass(frozen=True)
class ReflowOutcome:
    """一次回流请求的结果与诊断"""

    repositioned: RepositionResult
    tree: ReflowTree
    skipped_widget_ids: Tuple[str, ...] = ()
    ignored_delta_ids: Tuple[str, ...] = ()
    detection_aborted: bool = False
    elapsed_ms: float = 0.0


@dataclass(frozen=True)
class ReflowService:
    """动态高度回流的统一入口"""

    max_box_size: int = MAX_BOX_SIZE_DEFAULT
    max_widget_count: int = 0
    max_pair_count: int = 0
    timing_verbose: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.max_box_size <= 0:
            raise ValueError(f"max_box_size 必须 > 0，当前={self.max_box_size}")
        if self.max_widget_count < 0:
            raise ValueError(f"max_widget_count 必须 >= 0，当前={self.max_widget_count}")
        if self.max_pair_count < 0:
            raise ValueError(f"max_pair_count 必须 >= 0，当前={self.max_pair_count}")

    @classmethod
    def from_settings(cls) -> "ReflowService":
        return cls(
            max_box_size=int(settings.LAYOUT_REFLOW_MAX_BOX_SIZE),
            max_widget_count=int(settings.LAYOUT_REFLOW_MAX_WIDGET_COUNT),
            max_pair_count=int(settings.LAYOUT_REFLOW_MAX_PAIR_COUNT),
            timing_verbose=bool(settings.LAYOUT_REFLOW_TIMING_VERBOSE),
            verbose=bool(settings.LAYOUT_REFLOW_VERBOSE),
        )

    def build_tree(self, spaces: Iterable[RawWidgetSpace]) -> ReflowTree:
        return build_reflow_tree(
            spaces,
            max_box_size=self.max_box_size,
            max_widget_count=self.max_widget_count,
            max_pair_count=self.max_pair_count,
        ).tree

    def reflow(self, spaces: Iterable[RawWidgetSpace], deltas: DeltaMap) -> ReflowOutcome:
        start = perf_counter()
        build_result = build_reflow_tree(
            spaces,
            max_box_size=self.max_box_size,
            max_widget_count=self.max_widget_count,
            max_pair_count=self.max_pair_count,
        )
        effective_deltas, ignored = resolve_effective_deltas(build_result.tree, deltas)
        repositioned = compute_reposition(build_result.tree, effective_deltas)
        elapsed_ms = (perf_counter() - start) * 1000.0

        if self.timing_verbose:
            log_info(
                "[REFLOW] 回流总耗时 {:.3f} ms（控件 {} 个）",
                elapsed_ms,
                len(build_result.tree),
            )
        if self.verbose:
            log_info(
                "[REFLOW] delta 源 {} 个 -> 移动控件 {} 个，跳过矩形 {} 个，忽略 delta {} 个",
                len(effective_deltas),
                len(repositioned),
                len(build_result.skipped_widget_ids),
                len(ignored),
            )

        return ReflowOutcome(
            repositioned=repositioned,
            tree=build_result.tree,
            skipped_widget_ids=build_result.skipped_widget_ids,
            ignored_delta_ids=tuple(ignored),
            detection_aborted=build_result.detection_aborted,
            elapsed_ms=elapsed_ms,
        )
