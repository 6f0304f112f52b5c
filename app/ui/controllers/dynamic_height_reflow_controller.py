"""动态高度回流控制器 - 合并同一事件循环内的高度变化，统一计算兄弟控件的位移"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional

from PyQt6 import QtCore

from engine.layout.reflow import (
    ReflowOutcome,
    ReflowService,
    WidgetSpace,
    compute_height_deltas,
)
from engine.utils.logging.logger import log_info


SnapshotProvider = Callable[[], Iterable[WidgetSpace]]


class DynamicHeightReflowController(QtCore.QObject):
    """动态高度回流控制器

    职责：
    - 收集控件（例如内容自适应高度的控件）上报的新高度（单位：行）；
    - 通过 singleShot(0) 把同一轮事件循环内的多次上报合并为一次回流；
    - 回流前从 snapshot_provider 取“高度变化前”的矩形快照，计算 delta 并调用 ReflowService；
    - 通过 widgets_repositioned 信号把新范围交给画布写回控件树。

    控制器自身不缓存快照与重叠图，每次 flush 都从调用方重新获取。
    """

    widgets_repositioned = QtCore.pyqtSignal(object)  # dict[str, (top_row, bottom_row)]

    def __init__(
        self,
        snapshot_provider: SnapshotProvider,
        service: Optional[ReflowService] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._snapshot_provider = snapshot_provider
        self._service = service if service is not None else ReflowService.from_settings()
        self._pending_heights: Dict[str, int] = {}
        self._flush_scheduled = False

    @property
    def service(self) -> ReflowService:
        return self._service

    def has_pending_changes(self) -> bool:
        return bool(self._pending_heights)

    def report_height_change(self, widget_id: str, new_height: int) -> None:
        """记录控件的新高度；同一控件多次上报时以最后一次为准。"""
        self._pending_heights[str(widget_id)] = int(new_height)
        if self._flush_scheduled:
            return
        self._flush_scheduled = True
        QtCore.QTimer.singleShot(0, self._on_flush_timer)

    def discard_pending(self) -> None:
        """丢弃尚未处理的高度上报（例如画布整体重建时）。"""
        self._pending_heights = {}
        self._flush_scheduled = False

    def flush_pending(self) -> Optional[ReflowOutcome]:
        """
        立即处理已收集的高度上报。

        Returns:
            本次回流结果；没有有效高度变化时返回 None
        """
        self._flush_scheduled = False
        if not self._pending_heights:
            return None
        measured_heights = self._pending_heights
        self._pending_heights = {}

        spaces = list(self._snapshot_provider())
        deltas = compute_height_deltas(spaces, measured_heights)
        if not deltas:
            return None

        outcome = self._service.reflow(spaces, deltas)
        if outcome.detection_aborted:
            log_info("[REFLOW][Controller] 重叠检测已放弃，仅应用直接高度变化")
        if outcome.repositioned:
            payload = {
                widget_id: extent.as_tuple()
                for widget_id, extent in outcome.repositioned.items()
            }
            self.widgets_repositioned.emit(payload)
        return outcome

    @QtCore.pyqtSlot()
    def _on_flush_timer(self) -> None:
        # 已被手动 flush 过则跳过
        if not self._flush_scheduled:
            return
        self.flush_pending()
