"""Snapshot-keyed board pipeline and the engine that keeps it current."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable

from serviceboard.logger import get_logger

from .columns import build_columns
from .deriver import derive_work_items
from .export import build_board_data, write_board_data
from .index import SnapshotIndex
from .membership import items_for_column, matches_column
from .sorting import sort_items
from .types import ALL_WORKFLOWS, BoardSnapshotData, Column, WorkItem
from .visibility import DONE_STAGE_KEYWORDS, visible_items

if TYPE_CHECKING:
    from serviceboard.config import BoardSettings
    from serviceboard.sources.protocol import OrderSource, ServiceSource, WorkflowSource

log = get_logger("ENGINE")

Selection = frozenset[str] | None


def _selection(selected_order_ids: Iterable[str] | None) -> Selection:
    if selected_order_ids is None:
        return None
    selection = frozenset(selected_order_ids)
    return selection or None


class BoardSnapshot:
    """
    Fully derived board for one (orders, workflows, services) snapshot.

    Items and the index are computed on construction. Column sets and
    per-column item lists are computed on first request and memoized by
    (active workflow, order selection); the snapshot is never mutated
    otherwise, so a newer snapshot simply replaces it.
    """

    def __init__(
        self,
        data: BoardSnapshotData,
        sequential_services: bool = False,
        done_stage_keywords: Iterable[str] = DONE_STAGE_KEYWORDS,
    ):
        self.data = data
        self.sequential_services = sequential_services
        self.done_stage_keywords = tuple(done_stage_keywords)
        self.index = SnapshotIndex.build(data.workflows, data.services)
        self.items: tuple[WorkItem, ...] = derive_work_items(data.orders, index=self.index)
        self._memo: dict[tuple[Any, ...], Any] = {}

    def _cached(self, key: tuple[Any, ...], compute: Callable[[], Any]) -> Any:
        if key not in self._memo:
            self._memo[key] = compute()
        return self._memo[key]

    def selected_items(self, selected_order_ids: Iterable[str] | None = None) -> tuple[WorkItem, ...]:
        """Items of the selected orders (all items when nothing is selected)."""
        selection = _selection(selected_order_ids)
        if selection is None:
            return self.items
        return self._cached(
            ("selected", selection),
            lambda: tuple(item for item in self.items if item.order_id in selection),
        )

    def _candidate_items(self, active_workflow: str, selection: Selection) -> tuple[WorkItem, ...]:
        """Items offered to the columns of a view: stage views see only their workflow."""
        items = self.selected_items(selection)
        if active_workflow == ALL_WORKFLOWS:
            return items

        def compute() -> tuple[WorkItem, ...]:
            own = tuple(item for item in items if item.workflow_id == active_workflow)
            if not self.sequential_services:
                return own
            return visible_items(own, self.index, self.done_stage_keywords, order_items=items)

        return self._cached(("candidates", active_workflow, selection), compute)

    def columns(
        self,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> tuple[Column, ...]:
        selection = _selection(selected_order_ids)
        return self._cached(
            ("columns", active_workflow, selection),
            lambda: build_columns(active_workflow, self.selected_items(selection), self.index),
        )

    def column_items(
        self,
        column_id: str,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> tuple[WorkItem, ...]:
        selection = _selection(selected_order_ids)

        def compute() -> tuple[WorkItem, ...]:
            candidates = self._candidate_items(active_workflow, selection)
            members = items_for_column(candidates, column_id, active_workflow, self.index)
            return sort_items(members, self.index)

        return self._cached(("column", column_id, active_workflow, selection), compute)

    def count_items(
        self,
        workflow_id: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> int:
        """Number of selected items in a workflow (all selected items for ALL)."""
        items = self.selected_items(selected_order_ids)
        if workflow_id == ALL_WORKFLOWS:
            return len(items)
        return sum(1 for item in items if item.workflow_id == workflow_id)

    def unclassified_items(
        self,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> tuple[WorkItem, ...]:
        """
        Items that land in no column of the view.

        In stage view only items of the active workflow are considered.
        """
        selection = _selection(selected_order_ids)

        def compute() -> tuple[WorkItem, ...]:
            column_ids = [column.id for column in self.columns(active_workflow, selection)]
            candidates = self._candidate_items(active_workflow, selection)
            return tuple(
                item
                for item in candidates
                if not any(matches_column(item, column_id, active_workflow, self.index) for column_id in column_ids)
            )

        return self._cached(("unclassified", active_workflow, selection), compute)


class BoardEngine:
    """
    Keeps a BoardSnapshot in step with its three sources.

    Every change notification triggers a full refresh from the current
    source contents. A refresh whose content equals the held snapshot
    keeps it (duplicate notifications are no-ops); a failed source read
    keeps the previous snapshot.

    Example:
        source = YamlSnapshotSource(path="config/snapshot.yaml")
        engine = BoardEngine(source, source, source)
        engine.start()
        for column in engine.get_columns("ALL"):
            items = engine.get_items_for_column(column.id, "ALL")
    """

    def __init__(
        self,
        order_source: "OrderSource",
        workflow_source: "WorkflowSource",
        service_source: "ServiceSource",
        sequential_services: bool = False,
        done_stage_keywords: Iterable[str] = DONE_STAGE_KEYWORDS,
        export_path: str | Path | None = None,
    ):
        self._order_source = order_source
        self._workflow_source = workflow_source
        self._service_source = service_source
        self._sequential_services = sequential_services
        self._done_stage_keywords = tuple(done_stage_keywords)
        self._export_path = Path(export_path) if export_path else None
        self._snapshot = BoardSnapshot(
            BoardSnapshotData(),
            sequential_services=sequential_services,
            done_stage_keywords=self._done_stage_keywords,
        )
        self._unsubscribers: list[Callable[[], None]] = []
        self._listeners: list[Callable[[BoardSnapshot], None]] = []
        self.refresh_count = 0

    @classmethod
    def from_settings(
        cls,
        settings: "BoardSettings",
        order_source: "OrderSource",
        workflow_source: "WorkflowSource | None" = None,
        service_source: "ServiceSource | None" = None,
    ) -> "BoardEngine":
        """Create an engine from BoardSettings; one source may serve all three roles."""
        return cls(
            order_source,
            workflow_source or order_source,  # type: ignore[arg-type]
            service_source or order_source,  # type: ignore[arg-type]
            sequential_services=settings.sequential_services,
            done_stage_keywords=settings.done_stage_keywords,
            export_path=settings.export_path,
        )

    @property
    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    @property
    def items(self) -> tuple[WorkItem, ...]:
        return self._snapshot.items

    # --- Lifecycle ---

    def start(self) -> BoardSnapshot:
        """Subscribe to all sources and compute the first snapshot."""
        if not self._unsubscribers:
            self._unsubscribers = [
                self._order_source.on_orders_changed(self.refresh),
                self._workflow_source.on_workflows_changed(self.refresh),
                self._service_source.on_services_changed(self.refresh),
            ]
        self.refresh()
        return self._snapshot

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def on_board_changed(self, callback: Callable[[BoardSnapshot], None]) -> Callable[[], None]:
        """Register a listener called with each new snapshot."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def refresh(self) -> bool:
        """
        Recompute from the current contents of all three sources.

        Returns:
            True if a new snapshot replaced the held one
        """
        from serviceboard.sources.protocol import SourceError

        try:
            data = BoardSnapshotData(
                orders=tuple(self._order_source.list_orders()),
                workflows=tuple(self._workflow_source.list_workflows()),
                services=tuple(self._service_source.list_services()),
            )
        except SourceError as e:
            log.error("Source read failed; keeping previous board", error=str(e))
            return False

        if data == self._snapshot.data and self.refresh_count > 0:
            log.debug("Snapshot unchanged; refresh skipped")
            return False

        self._snapshot = BoardSnapshot(
            data,
            sequential_services=self._sequential_services,
            done_stage_keywords=self._done_stage_keywords,
        )
        self.refresh_count += 1
        log.info(
            "Board recomputed",
            order_count=len(data.orders),
            workflow_count=len(data.workflows),
            service_count=len(data.services),
            item_count=len(self._snapshot.items),
        )
        for listener in list(self._listeners):
            listener(self._snapshot)
        return True

    # --- Rendering interface ---

    def get_columns(
        self,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> tuple[Column, ...]:
        return self._snapshot.columns(active_workflow, selected_order_ids)

    def get_items_for_column(
        self,
        column_id: str,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> tuple[WorkItem, ...]:
        return self._snapshot.column_items(column_id, active_workflow, selected_order_ids)

    def count_items(
        self,
        workflow_id: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> int:
        return self._snapshot.count_items(workflow_id, selected_order_ids)

    def unclassified_items(
        self,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> tuple[WorkItem, ...]:
        """Items of the view that match no column; logged as a diagnostic."""
        items = self._snapshot.unclassified_items(active_workflow, selected_order_ids)
        if items:
            log.warning(
                "Items not placed in any column",
                active_workflow=active_workflow,
                item_ids=[item.id for item in items],
            )
        return items

    def board_data(
        self,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        return build_board_data(self._snapshot, active_workflow, selected_order_ids)

    def write_board_data(
        self,
        path: str | Path | None = None,
        active_workflow: str = ALL_WORKFLOWS,
        selected_order_ids: Iterable[str] | None = None,
    ) -> Path:
        """
        Write board JSON for the rendering layer.

        Raises:
            ValueError: If no path is given and no export_path is configured
        """
        target = Path(path) if path else self._export_path
        if target is None:
            raise ValueError("No export path given or configured")
        return write_board_data(target, self.board_data(active_workflow, selected_order_ids))
