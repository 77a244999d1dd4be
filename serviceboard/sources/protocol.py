"""
Board Source Protocols.

Defines the interfaces that order, workflow and service catalog sources
must implement. Uses Python's Protocol for structural typing - sources
don't need to explicitly inherit from these classes.
"""

from typing import Callable, Protocol, runtime_checkable

from serviceboard.board.types import Order, ServiceCatalogItem, WorkflowDefinition

ChangeCallback = Callable[[], None]
Unsubscribe = Callable[[], None]


class SourceError(RuntimeError):
    """Raised when a source cannot produce its collection."""


@runtime_checkable
class OrderSource(Protocol):
    """
    Provides orders with their nested service items.

    Implementations include:
    - InMemorySource (tests and embedding)
    - YamlSnapshotSource (fixture files)
    - RestSnapshotSource (PostgREST-style HTTP)
    """

    def list_orders(self) -> list[Order]:
        """
        Fetch the full order collection.

        Returns:
            List of orders (may be empty)

        Raises:
            SourceError: If the collection cannot be read
        """
        ...

    def on_orders_changed(self, callback: ChangeCallback) -> Unsubscribe:
        """
        Register a callback fired after any order or service item change.

        Args:
            callback: Zero-argument callable

        Returns:
            Callable that removes the subscription
        """
        ...


@runtime_checkable
class WorkflowSource(Protocol):
    """Provides workflow definitions with stages and tasks attached."""

    def list_workflows(self) -> list[WorkflowDefinition]:
        """Fetch all workflow definitions."""
        ...

    def on_workflows_changed(self, callback: ChangeCallback) -> Unsubscribe:
        """Register a callback fired after any workflow or stage change."""
        ...


@runtime_checkable
class ServiceSource(Protocol):
    """Provides the service catalog."""

    def list_services(self) -> list[ServiceCatalogItem]:
        """Fetch all catalog services."""
        ...

    def on_services_changed(self, callback: ChangeCallback) -> Unsubscribe:
        """Register a callback fired after any catalog change."""
        ...
