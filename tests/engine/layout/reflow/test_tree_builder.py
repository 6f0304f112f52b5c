from __future__ import annotations

import logging
import random

from engine.layout.reflow.overlap_detector import OverlapPair
from engine.layout.reflow.reflow_models import ReflowTreeNode, WidgetSpace
from engine.layout.reflow.tree_builder import (
    build_reflow_tree,
    classify_overlap_pairs,
    collect_valid_spaces,
    generate_tree,
)


def test_widget_directly_above_another_is_linked_both_ways() -> None:
    tree = generate_tree(
        [
            WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
            WidgetSpace(id="B", left=0, right=4, top=2, bottom=4),
        ]
    )

    assert tree["A"] == ReflowTreeNode(aboves=frozenset(), belows=frozenset({"B"}), top_row=0, bottom_row=2)
    assert tree["B"] == ReflowTreeNode(aboves=frozenset({"A"}), belows=frozenset(), top_row=2, bottom_row=4)


def test_no_relation_without_horizontal_overlap() -> None:
    tree = generate_tree(
        [
            WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
            WidgetSpace(id="C", left=5, right=9, top=0, bottom=2),
        ]
    )
    assert tree["A"].aboves == tree["A"].belows == frozenset()
    assert tree["C"].aboves == tree["C"].belows == frozenset()


def test_two_widgets_above_one_shared_dependent() -> None:
    tree = generate_tree(
        [
            WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
            WidgetSpace(id="B", left=4, right=8, top=0, bottom=3),
            WidgetSpace(id="C", left=0, right=8, top=5, bottom=7),
        ]
    )
    assert tree["C"].aboves == {"A", "B"}
    assert tree["A"].belows == {"C"}
    assert tree["B"].belows == {"C"}
    assert "B" not in tree["A"].belows and "A" not in tree["B"].belows


def test_node_keeps_original_rows_regardless_of_input_order() -> None:
    spaces = [
        WidgetSpace(id="low", left=0, right=4, top=9, bottom=12),
        WidgetSpace(id="high", left=2, right=6, top=1, bottom=3),
    ]
    tree = generate_tree(spaces)
    assert (tree["low"].top_row, tree["low"].bottom_row) == (9, 12)
    assert (tree["high"].top_row, tree["high"].bottom_row) == (1, 3)
    assert tree["high"].belows == {"low"}
    assert tree["low"].aboves == {"high"}


def test_equal_tops_resolve_to_exactly_one_direction() -> None:
    tree = generate_tree(
        [
            WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
            WidgetSpace(id="B", left=2, right=6, top=0, bottom=5),
        ]
    )
    a_above_b = "B" in tree["A"].belows and "A" in tree["B"].aboves
    b_above_a = "A" in tree["B"].belows and "B" in tree["A"].aboves
    assert a_above_b != b_above_a


def test_relation_is_symmetric_and_never_self_referencing() -> None:
    rng = random.Random(21)
    spaces = []
    for index in range(60):
        left = rng.randint(0, 40)
        top = rng.randint(0, 100)
        spaces.append(
            WidgetSpace(id=f"w{index}", left=left, right=left + rng.randint(1, 10), top=top, bottom=top + rng.randint(0, 8))
        )

    tree = generate_tree(spaces)

    for widget_id, node in tree.items():
        assert widget_id not in node.aboves
        assert widget_id not in node.belows
        assert not (node.aboves & node.belows)
        for below_id in node.belows:
            assert widget_id in tree[below_id].aboves
        for above_id in node.aboves:
            assert widget_id in tree[above_id].belows


def test_mapping_input_is_accepted() -> None:
    tree = generate_tree(
        [
            {"id": "A", "left": 0, "right": 4, "top": 0, "bottom": 2},
            {"id": "B", "left": 0, "right": 4, "top": 2, "bottom": 4},
        ]
    )
    assert tree["A"].belows == {"B"}


def test_malformed_rectangles_are_skipped_and_logged(caplog) -> None:
    raw_spaces = [
        WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
        WidgetSpace(id="inverted", left=6, right=2, top=0, bottom=2),
        {"id": "missing", "left": 0, "right": 4, "top": 3},
        {"id": "float", "left": 0.5, "right": 4, "top": 3, "bottom": 4},
        {"id": "flag", "left": True, "right": 4, "top": 3, "bottom": 4},
        {"left": 0, "right": 4, "top": 3, "bottom": 4},
        WidgetSpace(id="upside_down", left=0, right=4, top=9, bottom=3),
        WidgetSpace(id="A", left=0, right=4, top=5, bottom=6),
        "not a rectangle",
        WidgetSpace(id="B", left=0, right=4, top=2, bottom=4),
    ]

    with caplog.at_level(logging.WARNING, logger="engine"):
        result = build_reflow_tree(raw_spaces)

    assert set(result.tree) == {"A", "B"}
    assert result.tree["A"].bottom_row == 2
    assert result.tree["A"].belows == {"B"}
    assert set(result.skipped_widget_ids) == {"inverted", "missing", "float", "flag", "upside_down", "A"}
    assert sum("跳过非法控件矩形" in record.getMessage() for record in caplog.records) == 8


def test_collect_valid_spaces_keeps_first_duplicate() -> None:
    first = WidgetSpace(id="A", left=0, right=4, top=0, bottom=2)
    second = WidgetSpace(id="A", left=0, right=4, top=8, bottom=9)
    valid, skipped = collect_valid_spaces([first, second])
    assert valid == [first]
    assert skipped == ["A"]


def test_classify_overlap_pairs_prefers_smaller_top_then_detection_order() -> None:
    top_by_id = {"A": 5, "B": 1, "C": 5}
    above_map, below_map = classify_overlap_pairs(
        [OverlapPair("A", "B"), OverlapPair("A", "C"), OverlapPair("C", "A"), OverlapPair("A", "A")],
        top_by_id,
    )
    assert below_map == {"B": {"A"}, "A": {"C"}}
    assert above_map == {"A": {"B"}, "C": {"A"}}


def test_aborted_detection_still_returns_every_valid_widget() -> None:
    result = build_reflow_tree(
        [
            WidgetSpace(id="A", left=0, right=4, top=0, bottom=2),
            WidgetSpace(id="B", left=0, right=4, top=2, bottom=4),
        ],
        max_widget_count=1,
    )
    assert result.detection_aborted is True
    assert set(result.tree) == {"A", "B"}
    assert all(not node.aboves and not node.belows for node in result.tree.values())
