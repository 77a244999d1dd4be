"""Shared change-notification plumbing for snapshot sources."""

from typing import Dict, List

from serviceboard.board.types import Order, ServiceCatalogItem, WorkflowDefinition
from serviceboard.logger import get_logger

from .protocol import ChangeCallback, Unsubscribe

log = get_logger("SOURCES")

ORDERS = "orders"
WORKFLOWS = "workflows"
SERVICES = "services"
TOPICS = (ORDERS, WORKFLOWS, SERVICES)


class ChangeFeed:
    """Per-topic callback registry."""

    def __init__(self):
        self._callbacks: Dict[str, List[ChangeCallback]] = {topic: [] for topic in TOPICS}

    def subscribe(self, topic: str, callback: ChangeCallback) -> Unsubscribe:
        """Register a callback for a topic.

        Args:
            topic: One of orders, workflows, services
            callback: Zero-argument callable

        Returns:
            Callable removing the subscription (safe to call twice)

        Raises:
            ValueError: If topic is unknown
        """
        if topic not in self._callbacks:
            raise ValueError(f"Unknown topic '{topic}'. Expected one of: {list(TOPICS)}")
        self._callbacks[topic].append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks[topic]:
                self._callbacks[topic].remove(callback)

        return unsubscribe

    def publish(self, topic: str) -> None:
        """Invoke every callback of a topic in registration order."""
        for callback in list(self._callbacks.get(topic, [])):
            callback()

    def subscriber_count(self, topic: str) -> int:
        return len(self._callbacks.get(topic, []))


class SnapshotSource:
    """
    Base for sources that serve all three collections from a held snapshot.

    Subclasses fill the held lists and call _store(), which publishes a
    change for every collection whose content differs from what was held.
    """

    name = "snapshot"

    def __init__(self):
        self._feed = ChangeFeed()
        self._orders: list[Order] = []
        self._workflows: list[WorkflowDefinition] = []
        self._services: list[ServiceCatalogItem] = []

    # --- Reads ---

    def list_orders(self) -> list[Order]:
        return list(self._orders)

    def list_workflows(self) -> list[WorkflowDefinition]:
        return list(self._workflows)

    def list_services(self) -> list[ServiceCatalogItem]:
        return list(self._services)

    # --- Subscriptions ---

    def on_orders_changed(self, callback: ChangeCallback) -> Unsubscribe:
        return self._feed.subscribe(ORDERS, callback)

    def on_workflows_changed(self, callback: ChangeCallback) -> Unsubscribe:
        return self._feed.subscribe(WORKFLOWS, callback)

    def on_services_changed(self, callback: ChangeCallback) -> Unsubscribe:
        return self._feed.subscribe(SERVICES, callback)

    # --- Updates ---

    def _store(
        self,
        orders: list[Order] | None = None,
        workflows: list[WorkflowDefinition] | None = None,
        services: list[ServiceCatalogItem] | None = None,
    ) -> list[str]:
        """Replace held collections; return and publish the changed topics."""
        changed: list[str] = []
        if orders is not None and list(orders) != self._orders:
            self._orders = list(orders)
            changed.append(ORDERS)
        if workflows is not None and list(workflows) != self._workflows:
            self._workflows = list(workflows)
            changed.append(WORKFLOWS)
        if services is not None and list(services) != self._services:
            self._services = list(services)
            changed.append(SERVICES)

        if changed:
            log.debug("Source collections changed", source=self.name, topics=changed)
        for topic in changed:
            self._feed.publish(topic)
        return changed
