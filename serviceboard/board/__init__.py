"""Board derivation engine: items, workflows, statuses, columns and ordering."""

from .types import (
    ALL_WORKFLOWS,
    CANCEL_COLUMN_ID,
    DONE_COLUMN_ID,
    FINISHED_STATUSES,
    PENDING_STATUS,
    BoardSnapshotData,
    CanonicalStageRef,
    Column,
    LegacyLabel,
    Order,
    PendingSentinel,
    RawServiceItem,
    ServiceCatalogItem,
    StageHistoryEntry,
    StageTask,
    StatusValue,
    WorkflowDefinition,
    WorkflowRef,
    WorkflowStage,
    WorkItem,
    is_uuid,
)
from .index import SnapshotIndex
from .status import classify_status, is_finished_sentinel, match_stage_label, normalize_status
from .resolver import resolve_workflow_id, service_workflow_sequence
from .deriver import derive_item, derive_work_items
from .columns import SPECIAL_COLUMNS, build_columns, build_stage_columns, build_workflow_columns
from .membership import items_for_column, matches_column
from .sorting import sort_items, sort_key
from .visibility import DONE_STAGE_KEYWORDS, is_finished_item, visible_items
from .export import build_board_data, write_board_data
from .pipeline import BoardEngine, BoardSnapshot

__all__ = [
    "ALL_WORKFLOWS",
    "BoardEngine",
    "BoardSnapshot",
    "BoardSnapshotData",
    "CANCEL_COLUMN_ID",
    "CanonicalStageRef",
    "Column",
    "DONE_COLUMN_ID",
    "DONE_STAGE_KEYWORDS",
    "FINISHED_STATUSES",
    "LegacyLabel",
    "Order",
    "PENDING_STATUS",
    "PendingSentinel",
    "RawServiceItem",
    "SPECIAL_COLUMNS",
    "ServiceCatalogItem",
    "SnapshotIndex",
    "StageHistoryEntry",
    "StageTask",
    "StatusValue",
    "WorkItem",
    "WorkflowDefinition",
    "WorkflowRef",
    "WorkflowStage",
    "build_board_data",
    "build_columns",
    "build_stage_columns",
    "build_workflow_columns",
    "classify_status",
    "derive_item",
    "derive_work_items",
    "is_finished_item",
    "is_finished_sentinel",
    "is_uuid",
    "items_for_column",
    "match_stage_label",
    "matches_column",
    "normalize_status",
    "resolve_workflow_id",
    "service_workflow_sequence",
    "sort_items",
    "sort_key",
    "visible_items",
    "write_board_data",
]
