"""Tests for workflow resolution."""

from serviceboard.board.index import SnapshotIndex
from serviceboard.board.resolver import resolve_workflow_id, service_workflow_sequence
from serviceboard.board.types import (
    RawServiceItem,
    ServiceCatalogItem,
    StageHistoryEntry,
    WorkflowRef,
)

S2 = "00000000-0000-4000-8000-000000000002"
R1 = "00000000-0000-4000-8000-0000000000a1"
HISTORY = (StageHistoryEntry(stage_id=R1, stage_name="Kiểm tra"),)


def _index(*services, workflows=()):
    return SnapshotIndex.build(workflows, services)


class TestResolveWorkflowId:

    def test_explicit_workflow_wins(self, services):
        item = RawServiceItem(id="I1", service_id="SV1", workflow_id="W2")
        assert resolve_workflow_id(item, _index(*services)) == "W2"

    def test_explicit_dangling_workflow_kept(self, services):
        item = RawServiceItem(id="I1", service_id="SV1", workflow_id="gone")
        assert resolve_workflow_id(item, _index(*services)) == "gone"

    def test_service_default_is_lowest_order(self):
        service = ServiceCatalogItem(
            id="SV",
            name="Mixed",
            workflows=(WorkflowRef("W2", 2), WorkflowRef("W1", 1)),
        )
        item = RawServiceItem(id="I1", service_id="SV")
        assert resolve_workflow_id(item, _index(service)) == "W1"

    def test_history_picks_workflow_holding_status(self, clean_workflow, repair_workflow, services):
        # SV2 runs W2 then W1; the item already sits in a W1 stage
        index = _index(*services, workflows=(clean_workflow, repair_workflow))
        item = RawServiceItem(id="I1", service_id="SV2", status=S2, history=HISTORY)
        assert resolve_workflow_id(item, index) == "W1"

    def test_status_without_history_uses_default(self, clean_workflow, repair_workflow, services):
        index = _index(*services, workflows=(clean_workflow, repair_workflow))
        item = RawServiceItem(id="I1", service_id="SV2", status=S2)
        assert resolve_workflow_id(item, index) == "W2"

    def test_history_with_unknown_status_uses_default(self, clean_workflow, repair_workflow, services):
        index = _index(*services, workflows=(clean_workflow, repair_workflow))
        item = RawServiceItem(id="I1", service_id="SV2", status="Đang xử lý", history=HISTORY)
        assert resolve_workflow_id(item, index) == "W2"

    def test_unknown_service(self, services):
        item = RawServiceItem(id="I1", service_id="nope")
        assert resolve_workflow_id(item, _index(*services)) is None

    def test_service_without_workflows(self):
        service = ServiceCatalogItem(id="SV", name="Bare")
        item = RawServiceItem(id="I1", service_id="SV")
        assert resolve_workflow_id(item, _index(service)) is None

    def test_no_service(self):
        assert resolve_workflow_id(RawServiceItem(id="I1"), _index()) is None


def test_service_workflow_sequence_sorted_and_stable():
    service = ServiceCatalogItem(
        id="SV",
        name="Seq",
        workflows=(WorkflowRef("C", 2), WorkflowRef("A", 1), WorkflowRef("B", 2)),
    )
    assert [ref.id for ref in service_workflow_sequence(service)] == ["A", "C", "B"]
