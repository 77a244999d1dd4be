"""Tests for column construction."""

from serviceboard.board.columns import build_columns, build_stage_columns, build_workflow_columns
from serviceboard.board.deriver import derive_work_items
from serviceboard.board.index import SnapshotIndex
from serviceboard.board.types import (
    ALL_WORKFLOWS,
    Order,
    RawServiceItem,
    ServiceCatalogItem,
    WorkflowDefinition,
    WorkflowRef,
    WorkflowStage,
    WorkItem,
)


def _ids(columns):
    return [column.id for column in columns]


class TestWorkflowColumns:
    """Matrix (ALL) view."""

    def test_two_orders_two_workflows(self):
        workflows = [WorkflowDefinition(id="W1", label="One"), WorkflowDefinition(id="W2", label="Two")]
        services = [
            ServiceCatalogItem(id="SA", name="A", workflows=(WorkflowRef("W1", 0),)),
            ServiceCatalogItem(id="SB", name="B", workflows=(WorkflowRef("W2", 0),)),
        ]
        orders = [
            Order(id="O1", items=(RawServiceItem(id="I1", service_id="SA"),)),
            Order(id="O2", items=(RawServiceItem(id="I2", service_id="SB"),)),
        ]
        index = SnapshotIndex.build(workflows, services)
        items = derive_work_items(orders, index=index)

        columns = build_columns(ALL_WORKFLOWS, items, index)

        assert _ids(columns) == ["W1", "W2"]
        assert [column.title for column in columns] == ["One", "Two"]
        assert all(column.kind == "workflow" for column in columns)

    def test_ordered_by_sequence_position(self, clean_workflow, repair_workflow, services):
        index = SnapshotIndex.build([clean_workflow, repair_workflow], services)
        # Only SV2 (W2 then W1) is referenced
        items = (WorkItem(id="I2", order_id="O2", service_id="SV2", workflow_id="W2"),)
        assert _ids(build_workflow_columns(items, index)) == ["W2", "W1"]

    def test_explicit_workflow_adds_column(self, clean_workflow, repair_workflow):
        index = SnapshotIndex.build([clean_workflow, repair_workflow], [])
        items = (WorkItem(id="I1", order_id="O1", workflow_id="W2"),)
        assert _ids(build_workflow_columns(items, index)) == ["W2"]

    def test_unknown_workflows_skipped(self, clean_workflow):
        services = [ServiceCatalogItem(id="SV", name="S", workflows=(WorkflowRef("gone", 0), WorkflowRef("W1", 1)))]
        index = SnapshotIndex.build([clean_workflow], services)
        items = (WorkItem(id="I1", order_id="O1", service_id="SV", workflow_id="gone"),)
        assert _ids(build_workflow_columns(items, index)) == ["W1"]

    def test_no_items_no_columns(self, clean_workflow):
        index = SnapshotIndex.build([clean_workflow], [])
        assert build_columns(ALL_WORKFLOWS, (), index) == ()


class TestStageColumns:
    """Stage view."""

    def test_stages_sorted_then_specials(self, clean_workflow):
        index = SnapshotIndex.build([clean_workflow], [])
        columns = build_columns("W1", (), index)
        assert _ids(columns) == [
            "00000000-0000-4000-8000-000000000001",
            "00000000-0000-4000-8000-000000000002",
            "00000000-0000-4000-8000-000000000003",
            "done",
            "cancel",
        ]
        assert [column.order for column in columns] == [0, 1, 2, 3, 4]
        assert columns[-2].title == "Completed"
        assert columns[-1].title == "Cancelled"
        assert columns[-1].is_special
        assert not columns[0].is_special

    def test_zero_stages_only_specials(self):
        index = SnapshotIndex.build([WorkflowDefinition(id="WE", label="Empty")], [])
        assert _ids(build_stage_columns("WE", index)) == ["done", "cancel"]

    def test_unknown_workflow_only_specials(self):
        index = SnapshotIndex.build([], [])
        assert _ids(build_stage_columns("missing", index)) == ["done", "cancel"]

    def test_equal_order_keeps_declaration_position(self):
        workflow = WorkflowDefinition(
            id="WT",
            label="Ties",
            stages=(
                WorkflowStage(id="b", name="B", order=1),
                WorkflowStage(id="a", name="A", order=1),
                WorkflowStage(id="z", name="Z", order=0),
            ),
        )
        index = SnapshotIndex.build([workflow], [])
        assert _ids(build_stage_columns("WT", index)) == ["z", "b", "a", "done", "cancel"]
