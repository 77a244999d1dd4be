"""Tests for in-column item ordering."""

from datetime import datetime, timedelta, timezone

from serviceboard.board.index import SnapshotIndex
from serviceboard.board.sorting import sort_items
from serviceboard.board.types import WorkItem

S1 = "00000000-0000-4000-8000-000000000001"
S2 = "00000000-0000-4000-8000-000000000002"
BASE = datetime(2026, 10, 1, tzinfo=timezone.utc)


def _item(item_id, status=S1, delivery=None, updated=None, workflow_id="W1"):
    return WorkItem(
        id=item_id,
        order_id="O1",
        status=status,
        workflow_id=workflow_id,
        expected_delivery=delivery,
        last_updated=updated,
    )


def _ids(items):
    return [item.id for item in items]


def test_stage_order_first(clean_workflow):
    index = SnapshotIndex.build([clean_workflow], [])
    items = [_item("late", status=S2), _item("early", status=S1), _item("none", status="done")]
    assert _ids(sort_items(items, index)) == ["early", "late", "none"]


def test_delivery_ascending_missing_last(clean_workflow):
    index = SnapshotIndex.build([clean_workflow], [])
    items = [
        _item("nodate"),
        _item("later", delivery=BASE + timedelta(days=3)),
        _item("sooner", delivery=BASE + timedelta(days=1)),
    ]
    assert _ids(sort_items(items, index)) == ["sooner", "later", "nodate"]


def test_last_updated_descending_missing_last(clean_workflow):
    index = SnapshotIndex.build([clean_workflow], [])
    items = [
        _item("never"),
        _item("old", updated=BASE),
        _item("new", updated=BASE + timedelta(hours=5)),
    ]
    assert _ids(sort_items(items, index)) == ["new", "old", "never"]


def test_stable_for_equal_keys(clean_workflow):
    index = SnapshotIndex.build([clean_workflow], [])
    items = [_item(str(n)) for n in range(6)]
    assert _ids(sort_items(items, index)) == ["0", "1", "2", "3", "4", "5"]


def test_deterministic(clean_workflow):
    index = SnapshotIndex.build([clean_workflow], [])
    items = [
        _item("a", status=S2, delivery=BASE, updated=BASE),
        _item("b", status=S1, updated=BASE),
        _item("c", status="x", delivery=BASE),
        _item("d", status=S1, delivery=BASE),
    ]
    assert sort_items(items, index) == sort_items(list(items), index)
    assert _ids(sort_items(items, index)) == ["d", "b", "a", "c"]
