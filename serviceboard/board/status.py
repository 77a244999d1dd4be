"""Status classification and normalization to canonical stage ids."""

from __future__ import annotations

from serviceboard.logger import get_logger

from .index import SnapshotIndex
from .types import (
    FINISHED_STATUSES,
    PENDING_STATUS,
    CanonicalStageRef,
    LegacyLabel,
    PendingSentinel,
    StatusValue,
    WorkflowDefinition,
    WorkflowStage,
    is_uuid,
)

log = get_logger("STATUS")


def classify_status(raw_status: object) -> StatusValue:
    """
    Classify a raw status value at the boundary.

    Missing, empty and non-string values become PendingSentinel; values in
    UUID format become CanonicalStageRef; everything else is a LegacyLabel
    (the pending sentinel string itself included).
    """
    if not isinstance(raw_status, str) or not raw_status.strip():
        return PendingSentinel()
    if raw_status == PENDING_STATUS:
        return PendingSentinel()
    if is_uuid(raw_status.strip()):
        return CanonicalStageRef(raw_status.strip())
    return LegacyLabel(raw_status)


def is_finished_sentinel(status: str | None) -> bool:
    """True for done/cancel-style statuses that live outside any workflow."""
    return (status or "").strip().lower() in FINISHED_STATUSES


def _fold(value: str | None) -> str:
    return (value or "").strip().casefold()


def match_stage_label(workflow: WorkflowDefinition, label: str) -> WorkflowStage | None:
    """
    Match a legacy label against a workflow's stages, case-insensitively.

    Stage ids are tried before stage names. When several stages share
    the label, the one with the lowest order wins and a data-quality
    warning is logged.
    """
    folded = _fold(label)
    if not folded:
        return None

    by_id = [stage for stage in workflow.stages if _fold(stage.id) == folded]
    if by_id:
        return by_id[0]

    by_name = [stage for stage in workflow.stages if _fold(stage.name) == folded]
    if not by_name:
        return None
    if len(by_name) > 1:
        log.warning(
            "Ambiguous stage name; using lowest order",
            workflow_id=workflow.id,
            label=label,
            stage_ids=[stage.id for stage in by_name],
        )
        by_name.sort(key=lambda stage: stage.order)
    return by_name[0]


def normalize_status(
    raw_status: object,
    workflow_id: str | None,
    index: SnapshotIndex,
) -> str:
    """
    Map a raw status to a stage id of the item's workflow.

    Priority:
    1. No workflow -> the raw status (pending sentinel when empty).
    2. Unknown workflow -> the raw status.
    3. Stage id of that workflow -> unchanged.
    4. Single case-insensitive id/name match -> that stage's id.
    5. Otherwise the workflow's entry stage (lowest order); a workflow
       with no stages returns the raw status.

    Finished sentinels (done, cancel, ...) are returned unchanged.
    Applying the function to its own output yields the same value.
    """
    value = classify_status(raw_status)
    current = value.raw

    if isinstance(value, LegacyLabel) and is_finished_sentinel(current):
        return current

    if not workflow_id:
        return current

    workflow = index.workflow(workflow_id)
    if workflow is None:
        log.debug("Workflow not found; status kept", workflow_id=workflow_id, status=current)
        return current

    if isinstance(value, CanonicalStageRef):
        if index.stage_in_workflow(workflow_id, value.stage_id) is not None:
            return value.stage_id

    matched = match_stage_label(workflow, current)
    if matched is not None:
        return matched.id

    entry = workflow.entry_stage()
    if entry is None:
        log.warning("Workflow has no stages; status kept", workflow_id=workflow_id, status=current)
        return current

    if not isinstance(value, PendingSentinel):
        log.debug(
            "Status matched no stage; using entry stage",
            workflow_id=workflow_id,
            status=current,
            stage_id=entry.id,
        )
    return entry.id
