"""
YAML Snapshot Source.

Serves orders, workflows and services from a single YAML fixture file.
"""

from pathlib import Path
from typing import Any

import yaml

from serviceboard.logger import get_logger

from .base import SnapshotSource
from .mapping import order_from_record, service_from_record, workflow_from_record
from .protocol import SourceError

log = get_logger("YAML_SOURCE")


def _records(data: dict[str, Any], key: str, path: Path) -> list[dict[str, Any]]:
    rows = data.get(key) or []
    if not isinstance(rows, list):
        raise SourceError(f"'{key}' must be a list in {path}")
    return [row for row in rows if isinstance(row, dict)]


class YamlSnapshotSource(SnapshotSource):
    """
    Snapshot source backed by a YAML file.

    Expected layout:
        orders:    [ {id, customer_name, expected_delivery, items: [...]}, ... ]
        workflows: [ {id, label, stages: [...]}, ... ]
        services:  [ {id, name, workflows: [{id, order}, ...]}, ... ]

    Legacy column names (ma_don_hang, danh_sach_dich_vu, ...) are accepted.
    The file is read on construction; reload() re-reads it and notifies
    subscribers of each collection whose content changed.
    """

    name = "yaml"

    def __init__(self, config: dict | None = None, path: str | Path | None = None):
        """
        Args:
            config: Source config dict with a "path" key
            path: Explicit file path (overrides config)
        """
        super().__init__()
        config = config or {}
        if path is None:
            path = config.get("path")
        if not path:
            raise ValueError("YAML source requires a 'path'")
        self._path = Path(path)
        self.reload()

    @property
    def path(self) -> Path:
        return self._path

    def reload(self) -> list[str]:
        """
        Re-read the file.

        Returns:
            Topics whose content changed

        Raises:
            SourceError: If the file is missing or malformed
        """
        if not self._path.exists():
            raise SourceError(f"Snapshot file not found: {self._path}")

        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise SourceError(f"Malformed snapshot file {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise SourceError(f"Snapshot file must be a mapping: {self._path}")

        orders = [order_from_record(row) for row in _records(data, "orders", self._path)]
        workflows = [workflow_from_record(row) for row in _records(data, "workflows", self._path)]
        services = [service_from_record(row) for row in _records(data, "services", self._path)]

        changed = self._store(orders=orders, workflows=workflows, services=services)
        log.info(
            "Snapshot file loaded",
            path=str(self._path),
            order_count=len(orders),
            workflow_count=len(workflows),
            service_count=len(services),
            changed=changed,
        )
        return changed
