"""Workflow resolution for service items."""

from __future__ import annotations

from .index import SnapshotIndex
from .types import RawServiceItem, ServiceCatalogItem, WorkflowRef


def service_workflow_sequence(service: ServiceCatalogItem) -> tuple[WorkflowRef, ...]:
    """Workflow refs of a service ordered by their order field (stable)."""
    return tuple(sorted(service.workflows, key=lambda ref: ref.order))


def resolve_workflow_id(item: RawServiceItem, index: SnapshotIndex) -> str | None:
    """
    Determine which workflow governs a service item.

    Priority:
    1. An explicit workflow_id, unchanged.
    2. For an item with history, the workflow of its service whose stages
       contain the current status (the item moved past the first workflow).
    3. The service's default workflow: lowest order in its sequence.
    4. None.

    The returned id may not exist in the workflow collection; status
    normalization treats a dangling id like no workflow.
    """
    if item.workflow_id:
        return item.workflow_id

    service = index.service(item.service_id)
    if service is None or not service.workflows:
        return None

    sequence = service_workflow_sequence(service)
    if item.history and item.status:
        for ref in sequence:
            if index.stage_in_workflow(ref.id, item.status.strip()) is not None:
                return ref.id

    return sequence[0].id or None
