"""Tests for sequential service visibility."""

import pytest

from serviceboard.board.index import SnapshotIndex
from serviceboard.board.types import ServiceCatalogItem, WorkflowRef, WorkItem
from serviceboard.board.visibility import is_finished_item, visible_items

S2 = "00000000-0000-4000-8000-000000000002"
S3 = "00000000-0000-4000-8000-000000000003"
R1 = "00000000-0000-4000-8000-0000000000a1"


@pytest.fixture
def index(clean_workflow, repair_workflow, services):
    extra = ServiceCatalogItem(id="SV3", name="Đánh bóng", workflows=(WorkflowRef("W1", 1),))
    return SnapshotIndex.build([clean_workflow, repair_workflow], [*services, extra])


def _item(item_id, service_id, status, workflow_id, order_id="O1"):
    return WorkItem(id=item_id, order_id=order_id, service_id=service_id, status=status, workflow_id=workflow_id)


def _ids(items):
    return [item.id for item in items]


class TestIsFinishedItem:

    def test_finished_sentinel(self, index):
        assert is_finished_item(_item("a", "SV1", "done", "W1"), index)

    def test_done_like_stage_name(self, index):
        assert is_finished_item(_item("a", "SV1", S3, "W1"), index)

    def test_open_stage(self, index):
        assert not is_finished_item(_item("a", "SV1", S2, "W1"), index)

    def test_custom_keywords(self, index):
        assert is_finished_item(_item("a", "SV1", S2, "W1"), index, keywords=("xử lý",))


class TestVisibleItems:

    def test_only_first_unfinished_service_shown(self, index):
        first = _item("a", "SV1", S2, "W1")
        second = _item("b", "SV2", R1, "W2")
        assert _ids(visible_items((first, second), index)) == ["a"]

        finished = _item("a", "SV1", S3, "W1")
        assert _ids(visible_items((finished, second), index)) == ["b"]

    def test_three_services_middle_unfinished(self, index):
        items = (
            _item("a", "SV1", "done", "W1"),
            _item("b", "SV2", R1, "W2"),
            _item("c", "SV3", S2, "W1"),
        )
        assert _ids(visible_items(items, index)) == ["b"]

    def test_all_services_finished_hides_everything(self, index):
        items = (
            _item("a", "SV1", "done", "W1"),
            _item("b", "SV2", "cancel", "W2"),
        )
        assert visible_items(items, index) == ()

    def test_single_service_hides_finished_items(self, index):
        items = (
            _item("a", "SV1", S2, "W1"),
            _item("b", "SV1", S3, "W1"),
            _item("c", None, "", None),
        )
        assert _ids(visible_items(items, index)) == ["a", "c"]

    def test_orders_are_independent(self, index):
        items = (
            _item("a", "SV1", S2, "W1", order_id="O1"),
            _item("b", "SV2", R1, "W2", order_id="O2"),
        )
        assert _ids(visible_items(items, index)) == ["a", "b"]

    def test_items_without_service_hidden_in_multi_service_order(self, index):
        items = (
            _item("a", "SV1", S2, "W1"),
            _item("b", "SV2", R1, "W2"),
            _item("c", None, "", None),
        )
        assert _ids(visible_items(items, index)) == ["a"]

    def test_order_items_decide_current_service(self, index):
        # The W1 view only holds the SV3 item, but SV2 (in W2) is still open
        shown = (_item("c", "SV3", S2, "W1"),)
        order_items = (
            _item("a", "SV1", "done", "W1"),
            _item("b", "SV2", R1, "W2"),
            shown[0],
        )
        assert visible_items(shown, index, order_items=order_items) == ()
        assert _ids(visible_items(shown, index)) == ["c"]
