"""Column construction for the matrix view and the stage view."""

from __future__ import annotations

from typing import Iterable

from serviceboard.logger import get_logger

from .index import SnapshotIndex
from .resolver import service_workflow_sequence
from .types import (
    ALL_WORKFLOWS,
    CANCEL_COLUMN_ID,
    DONE_COLUMN_ID,
    Column,
    WorkItem,
)

log = get_logger("COLUMNS")

SPECIAL_COLUMNS: tuple[tuple[str, str], ...] = (
    (DONE_COLUMN_ID, "Completed"),
    (CANCEL_COLUMN_ID, "Cancelled"),
)


def _special_columns(start: int) -> list[Column]:
    return [
        Column(id=column_id, title=title, order=start + offset, kind="special")
        for offset, (column_id, title) in enumerate(SPECIAL_COLUMNS)
    ]


def build_workflow_columns(items: Iterable[WorkItem], index: SnapshotIndex) -> tuple[Column, ...]:
    """
    Matrix view: one column per workflow referenced by the items.

    A workflow is referenced when it appears in the catalog sequence of an
    item's service, or is the item's own resolved workflow. Only known
    workflows produce columns. Columns are ordered by the earliest position
    the workflow takes in any service sequence, then by first appearance.
    """
    rank: dict[str, int] = {}
    first_seen: dict[str, int] = {}

    def _see(workflow_id: str, position: int) -> None:
        if index.workflow(workflow_id) is None:
            log.debug("Referenced workflow not found", workflow_id=workflow_id)
            return
        first_seen.setdefault(workflow_id, len(first_seen))
        if workflow_id not in rank or position < rank[workflow_id]:
            rank[workflow_id] = position

    for item in items:
        service = index.service(item.service_id)
        if service is not None:
            for position, ref in enumerate(service_workflow_sequence(service)):
                _see(ref.id, position)
        if item.workflow_id:
            # Explicit assignments rank after every catalog position
            _see(item.workflow_id, len(index.workflows) + 1)

    ordered = sorted(first_seen, key=lambda wf_id: (rank[wf_id], first_seen[wf_id]))
    return tuple(
        Column(id=wf_id, title=index.workflows[wf_id].label, order=position, kind="workflow")
        for position, wf_id in enumerate(ordered)
    )


def build_stage_columns(workflow_id: str, index: SnapshotIndex) -> tuple[Column, ...]:
    """
    Stage view: the workflow's stages by order, then done and cancel.

    The two special columns are always appended, also for an unknown
    workflow or one without stages.
    """
    workflow = index.workflow(workflow_id)
    columns: list[Column] = []
    if workflow is None:
        log.warning("Active workflow not found; only special columns", workflow_id=workflow_id)
    else:
        columns = [
            Column(id=stage.id, title=stage.name, order=position, kind="stage")
            for position, stage in enumerate(workflow.sorted_stages())
        ]
    columns.extend(_special_columns(len(columns)))
    return tuple(columns)


def build_columns(
    active_workflow: str,
    items: Iterable[WorkItem],
    index: SnapshotIndex,
) -> tuple[Column, ...]:
    """Build the ordered column set for the active view mode."""
    if active_workflow == ALL_WORKFLOWS:
        return build_workflow_columns(items, index)
    return build_stage_columns(active_workflow, index)
