"""Board data export for the rendering layer."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable
import json

from .types import ALL_WORKFLOWS

if TYPE_CHECKING:
    from .pipeline import BoardSnapshot


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_board_data(
    snapshot: "BoardSnapshot",
    active_workflow: str = ALL_WORKFLOWS,
    selected_order_ids: Iterable[str] | None = None,
) -> dict[str, Any]:
    """Build canonical, JSON-serializable board data for one view."""
    selection = sorted(set(selected_order_ids)) if selected_order_ids else []
    columns = snapshot.columns(active_workflow, selection)

    column_rows: list[dict[str, Any]] = []
    for column in columns:
        items = snapshot.column_items(column.id, active_workflow, selection)
        row = column.to_dict()
        row["count"] = len(items)
        row["items"] = [item.to_dict() for item in items]
        column_rows.append(row)

    workflow_tabs = [
        {
            "id": workflow.id,
            "label": workflow.label,
            "count": snapshot.count_items(workflow.id, selection),
        }
        for workflow in snapshot.index.workflows.values()
    ]

    return {
        "generated_at": _utc_now(),
        "active_workflow": active_workflow,
        "selected_order_ids": selection,
        "total_items": snapshot.count_items(ALL_WORKFLOWS, selection),
        "workflows": workflow_tabs,
        "columns": column_rows,
        "unclassified": [
            item.id for item in snapshot.unclassified_items(active_workflow, selection)
        ],
    }


def write_board_data(path: Path, data: dict[str, Any]) -> Path:
    """Write board JSON atomically and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp_path.replace(path)
    return path
