"""Column membership checks for derived work items."""

from __future__ import annotations

from .index import SnapshotIndex
from .types import ALL_WORKFLOWS, CANCEL_COLUMN_ID, DONE_COLUMN_ID, WorkItem

# Finished statuses written by the external write path, per special column
SPECIAL_COLUMN_STATUSES = {
    DONE_COLUMN_ID: frozenset({"done", "delivered", "hoan_thanh", "da_giao"}),
    CANCEL_COLUMN_ID: frozenset({"cancel", "huy"}),
}


def _fold(value: str | None) -> str:
    return (value or "").strip().casefold()


def matches_column(
    item: WorkItem,
    column_id: str,
    active_workflow: str,
    index: SnapshotIndex,
) -> bool:
    """
    Decide whether an item belongs in a column.

    Matrix view: the item's workflow is the column's workflow.

    Stage view, first hit wins:
    1. status equals the column id
    2. status equals the column id ignoring case and surrounding spaces
    3. the column is done or cancel and status is one of its finished
       statuses (delivered, huy, ...)
    4. the column is a known stage and status equals its id or its name
       (legacy statuses written without normalization)
    """
    if active_workflow == ALL_WORKFLOWS:
        return bool(item.workflow_id) and item.workflow_id == column_id

    status = item.status or ""
    if status == column_id:
        return True

    folded_status = _fold(status)
    if folded_status and folded_status == _fold(column_id):
        return True

    if folded_status in SPECIAL_COLUMN_STATUSES.get(column_id, ()):
        return True

    stage = index.stage(column_id)
    if stage is not None:
        if status == stage.id or folded_status == _fold(stage.id):
            return True
        if folded_status and folded_status == _fold(stage.name):
            return True

    return False


def items_for_column(
    items: tuple[WorkItem, ...],
    column_id: str,
    active_workflow: str,
    index: SnapshotIndex,
) -> tuple[WorkItem, ...]:
    """Filter items down to the members of one column, keeping input order."""
    return tuple(item for item in items if matches_column(item, column_id, active_workflow, index))
