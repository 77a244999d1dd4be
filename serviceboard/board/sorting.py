"""Deterministic display order for items within a column."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from .index import SnapshotIndex
from .types import WorkItem


def _timestamp(value: datetime | None) -> float | None:
    if value is None:
        return None
    try:
        return value.timestamp()
    except (OverflowError, OSError, ValueError):
        return None


def sort_key(item: WorkItem, index: SnapshotIndex) -> tuple:
    """
    Composite key: stage order asc, expected delivery asc, last update desc.

    Items without a resolvable stage, delivery date or update time sort
    after those that have one at that level.
    """
    stage = index.stage_in_workflow(item.workflow_id, item.status)
    stage_key = (0, stage.order) if stage is not None else (1, 0)

    delivery = _timestamp(item.expected_delivery)
    delivery_key = (0, delivery) if delivery is not None else (1, 0.0)

    updated = _timestamp(item.last_updated)
    updated_key = (0, -updated) if updated is not None else (1, 0.0)

    return (stage_key, delivery_key, updated_key)


def sort_items(items: Iterable[WorkItem], index: SnapshotIndex) -> tuple[WorkItem, ...]:
    """Stable sort; items with equal keys keep their input order."""
    return tuple(sorted(items, key=lambda item: sort_key(item, index)))
