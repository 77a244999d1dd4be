"""Flatten orders into normalized board work items."""

from __future__ import annotations

from typing import Iterable

from serviceboard.logger import get_logger

from .index import SnapshotIndex
from .resolver import resolve_workflow_id
from .status import normalize_status
from .types import (
    Order,
    RawServiceItem,
    ServiceCatalogItem,
    WorkflowDefinition,
    WorkItem,
)

log = get_logger("DERIVER")


def derive_item(order: Order, item: RawServiceItem, index: SnapshotIndex) -> WorkItem:
    """Build one WorkItem from a non-product service item of an order."""
    workflow_id = resolve_workflow_id(item, index)
    status = normalize_status(item.status, workflow_id, index)

    return WorkItem(
        id=item.id,
        order_id=order.id,
        name=item.name,
        customer_name=order.customer_name,
        expected_delivery=order.expected_delivery,
        status=status,
        raw_status=item.status,
        service_id=item.service_id,
        workflow_id=workflow_id,
        is_product=False,
        history=item.history,
        price=item.price,
        quantity=item.quantity,
        last_updated=item.last_updated,
    )


def derive_work_items(
    orders: Iterable[Order],
    workflows: Iterable[WorkflowDefinition] = (),
    services: Iterable[ServiceCatalogItem] = (),
    index: SnapshotIndex | None = None,
) -> tuple[WorkItem, ...]:
    """
    Flatten orders into the board's work item sequence.

    Products are dropped. Every other item gets its workflow resolved,
    its status normalized, and the order's id, customer name and expected
    delivery copied onto it. Output keeps input order and is a pure
    function of the three collections.

    Args:
        orders: Order snapshot
        workflows: Workflow definitions (ignored when index is given)
        services: Service catalog (ignored when index is given)
        index: Prebuilt lookups for this snapshot

    Returns:
        Tuple of derived WorkItems
    """
    if index is None:
        index = SnapshotIndex.build(workflows, services)

    derived: list[WorkItem] = []
    products = 0
    unresolved = 0
    for order in orders:
        for item in order.items:
            if item.is_product:
                products += 1
                continue
            work_item = derive_item(order, item, index)
            if index.workflow(work_item.workflow_id) is None:
                unresolved += 1
            derived.append(work_item)

    log.debug(
        "Derived work items",
        item_count=len(derived),
        product_count=products,
        unresolved_count=unresolved,
    )
    return tuple(derived)
