"""Sequential service visibility for the stage view."""

from __future__ import annotations

from typing import Iterable

from .index import SnapshotIndex
from .status import is_finished_sentinel
from .types import WorkItem

DONE_STAGE_KEYWORDS: tuple[str, ...] = ("done", "hoàn thành", "completed", "finish")


def is_finished_item(
    item: WorkItem,
    index: SnapshotIndex,
    keywords: Iterable[str] = DONE_STAGE_KEYWORDS,
) -> bool:
    """An item is finished when its status is a finished sentinel or a done-like stage."""
    if is_finished_sentinel(item.status):
        return True
    stage = index.stage_in_workflow(item.workflow_id, item.status)
    if stage is None:
        return False
    name = stage.name.casefold()
    return any(keyword.casefold() in name for keyword in keywords)


def visible_items(
    items: Iterable[WorkItem],
    index: SnapshotIndex,
    keywords: Iterable[str] = DONE_STAGE_KEYWORDS,
    order_items: Iterable[WorkItem] | None = None,
) -> tuple[WorkItem, ...]:
    """
    Keep only items of the service an order is currently working on.

    Services are ranked per order by first appearance in order_items (all
    items of the orders, any workflow; defaults to items). For an order
    with several services only items of the first unfinished service stay
    visible, so finished services and later ones are hidden, and so are
    items without a service. An order with at most one service shows its
    unfinished items.
    """
    keywords = tuple(keywords)
    items = tuple(items)
    order_items = items if order_items is None else tuple(order_items)

    services_by_order: dict[str, list[str]] = {}
    unfinished: set[tuple[str, str]] = set()
    for item in order_items:
        if not item.service_id:
            continue
        order_services = services_by_order.setdefault(item.order_id, [])
        if item.service_id not in order_services:
            order_services.append(item.service_id)
        if not is_finished_item(item, index, keywords):
            unfinished.add((item.order_id, item.service_id))

    current: dict[str, str | None] = {}
    for order_id, service_ids in services_by_order.items():
        current[order_id] = next(
            (service_id for service_id in service_ids if (order_id, service_id) in unfinished),
            None,
        )

    def _visible(item: WorkItem) -> bool:
        if len(services_by_order.get(item.order_id, ())) <= 1:
            return not is_finished_item(item, index, keywords)
        active = current[item.order_id]
        return active is not None and item.service_id == active

    return tuple(item for item in items if _visible(item))
