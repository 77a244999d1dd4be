"""
Board Sources Package

Collaborator interfaces for orders, workflows and the service catalog,
plus in-memory, YAML and PostgREST implementations.
"""

from serviceboard.sources.protocol import (
    ChangeCallback,
    OrderSource,
    ServiceSource,
    SourceError,
    Unsubscribe,
    WorkflowSource,
)
from serviceboard.sources.base import ChangeFeed, SnapshotSource
from serviceboard.sources.memory import InMemorySource


def create_source(name: str, config: dict) -> SnapshotSource:
    """
    Create a source instance by name.

    Args:
        name: "memory", "yaml" or "rest"
        config: Full board config dict (uses config["sources"][name])

    Raises:
        ValueError: If the source name is unknown
    """
    source_config = (config.get("sources", {}) or {}).get(name, {}) or {}

    if name == "memory":
        return InMemorySource()

    if name == "yaml":
        from serviceboard.sources.yaml_source import YamlSnapshotSource
        return YamlSnapshotSource(source_config)

    if name == "rest":
        from serviceboard.sources.rest import RestSnapshotSource
        return RestSnapshotSource(source_config)

    raise ValueError(f"Unknown source: {name}")


__all__ = [
    "ChangeCallback",
    "ChangeFeed",
    "InMemorySource",
    "OrderSource",
    "ServiceSource",
    "SnapshotSource",
    "SourceError",
    "Unsubscribe",
    "WorkflowSource",
    "create_source",
]
