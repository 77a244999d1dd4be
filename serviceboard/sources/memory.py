"""In-memory source for tests and for embedding the engine in another process."""

from typing import Iterable

from serviceboard.board.types import Order, ServiceCatalogItem, WorkflowDefinition

from .base import SnapshotSource


class InMemorySource(SnapshotSource):
    """
    Serves orders, workflows and services held in memory.

    Example:
        source = InMemorySource(orders=[...], workflows=[...], services=[...])
        engine = BoardEngine(source, source, source)
        engine.start()
        source.replace_orders(new_orders)   # engine recomputes
    """

    name = "memory"

    def __init__(
        self,
        orders: Iterable[Order] = (),
        workflows: Iterable[WorkflowDefinition] = (),
        services: Iterable[ServiceCatalogItem] = (),
    ):
        super().__init__()
        self._orders = list(orders)
        self._workflows = list(workflows)
        self._services = list(services)

    def replace_orders(self, orders: Iterable[Order]) -> bool:
        """Swap the order collection; True when subscribers were notified."""
        return bool(self._store(orders=list(orders)))

    def replace_workflows(self, workflows: Iterable[WorkflowDefinition]) -> bool:
        return bool(self._store(workflows=list(workflows)))

    def replace_services(self, services: Iterable[ServiceCatalogItem]) -> bool:
        return bool(self._store(services=list(services)))

    def touch(self, topic: str) -> None:
        """Publish a change for a topic without altering data (duplicate notification)."""
        self._feed.publish(topic)
