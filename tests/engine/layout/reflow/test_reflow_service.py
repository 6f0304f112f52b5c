from __future__ import annotations

import logging

import pytest

from engine.configs.settings import settings
from engine.layout.reflow import ReflowService, RepositionedExtent, WidgetSpace


@pytest.fixture(autouse=True)
def _restore_settings():
    settings.reset()
    yield
    settings.reset()


_SPACES = [
    WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
    WidgetSpace(id="B", left=0, right=4, top=2, bottom=4),
    WidgetSpace(id="broken", left=5, right=1, top=0, bottom=2),
]


def test_reflow_runs_tree_building_and_propagation() -> None:
    outcome = ReflowService().reflow(_SPACES, {"A": -1, "ghost": 2})

    assert outcome.repositioned == {
        "A": RepositionedExtent(top_row=0, bottom_row=1),
        "B": RepositionedExtent(top_row=1, bottom_row=3),
    }
    assert set(outcome.tree) == {"A", "B"}
    assert outcome.skipped_widget_ids == ("broken",)
    assert outcome.ignored_delta_ids == ("ghost",)
    assert outcome.detection_aborted is False
    assert outcome.elapsed_ms >= 0.0


def test_aborted_detection_degrades_to_direct_deltas_only() -> None:
    outcome = ReflowService(max_widget_count=1).reflow(_SPACES[:2], {"A": -1})
    assert outcome.detection_aborted is True
    assert {key: value.as_tuple() for key, value in outcome.repositioned.items()} == {"A": (0, 1)}


def test_service_calls_do_not_share_state() -> None:
    service = ReflowService()
    first = service.reflow(_SPACES, {"A": 2})
    second = service.reflow(_SPACES, {})
    assert first.repositioned
    assert second.repositioned == {}


def test_from_settings_reads_reflow_settings() -> None:
    settings.update(
        {
            "LAYOUT_REFLOW_MAX_BOX_SIZE": 50,
            "LAYOUT_REFLOW_MAX_WIDGET_COUNT": 100,
            "LAYOUT_REFLOW_MAX_PAIR_COUNT": 7,
            "LAYOUT_REFLOW_TIMING_VERBOSE": True,
        }
    )
    service = ReflowService.from_settings()
    assert service.max_box_size == 50
    assert service.max_widget_count == 100
    assert service.max_pair_count == 7
    assert service.timing_verbose is True
    assert service.verbose is False


def test_build_tree_respects_box_size() -> None:
    spaces = [
        WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
        WidgetSpace(id="B", left=0, right=4, top=30, bottom=32),
    ]
    assert ReflowService().build_tree(spaces)["A"].belows == {"B"}
    assert ReflowService(max_box_size=10).build_tree(spaces)["A"].belows == frozenset()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_box_size": 0},
        {"max_widget_count": -1},
        {"max_pair_count": -3},
    ],
)
def test_invalid_limits_are_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        ReflowService(**kwargs)


def test_verbose_flags_log_summary_and_timing(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="engine"):
        ReflowService(timing_verbose=True, verbose=True).reflow(_SPACES[:2], {"A": 1})
    messages = [record.getMessage() for record in caplog.records]
    assert any("回流总耗时" in message for message in messages)
    timing_levels = [record.levelno for record in caplog.records if "回流总耗时" in record.getMessage()]
    assert timing_levels == [logging.INFO]
    assert any("delta 源 1 个 -> 移动控件 2 个" in message for message in messages)
