"""
Board types and data structures.

Provider-agnostic data classes for orders, workflows, the service catalog
and the derived board (work items and columns). Every value here is frozen:
a recomputation builds new values, it never mutates old ones.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Union
import re

ALL_WORKFLOWS = "ALL"
PENDING_STATUS = "cho_xu_ly"
DONE_COLUMN_ID = "done"
CANCEL_COLUMN_ID = "cancel"

# Statuses written by the external write path once an item leaves its
# last workflow. They are not stages and are never normalized.
FINISHED_STATUSES = frozenset({"done", "cancel", "delivered", "hoan_thanh", "da_giao", "huy"})

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid(value: str) -> bool:
    """Check if a string has the canonical UUID format."""
    return bool(_UUID_RE.match(value or ""))


# --- Status tagged union ---


@dataclass(frozen=True)
class CanonicalStageRef:
    """Status already expressed as a stage identifier."""

    stage_id: str

    @property
    def raw(self) -> str:
        return self.stage_id


@dataclass(frozen=True)
class LegacyLabel:
    """Free-text status predating stage identifiers (e.g. "Đang xử lý")."""

    label: str

    @property
    def raw(self) -> str:
        return self.label


@dataclass(frozen=True)
class PendingSentinel:
    """Missing or empty status; stands for the pending value."""

    value: str = PENDING_STATUS

    @property
    def raw(self) -> str:
        return self.value


StatusValue = Union[CanonicalStageRef, LegacyLabel, PendingSentinel]


# --- Workflow definitions ---


@dataclass(frozen=True)
class StageTask:
    """Checklist entry attached to a workflow stage."""

    id: str
    title: str
    required: bool = False


@dataclass(frozen=True)
class WorkflowStage:
    """
    One step of a workflow.

    Attributes:
        id: Stage identifier, globally unique across workflows
        name: Display name (also the legacy status label)
        order: Display rank; lowest order is the entry stage
        tasks: Optional checklist
        members: Assigned member identifiers
    """

    id: str
    name: str
    order: int = 0
    tasks: tuple[StageTask, ...] = ()
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Ordered template of stages a service item progresses through.

    Attributes:
        id: Workflow identifier
        label: Display label (matrix column title)
        department: Owning department, if any
        types: Service-type tags the workflow applies to
        stages: Stages in declaration order (not necessarily sorted)
        members: Assigned member identifiers
    """

    id: str
    label: str
    department: str | None = None
    types: tuple[str, ...] = ()
    stages: tuple[WorkflowStage, ...] = ()
    members: tuple[str, ...] = ()

    def sorted_stages(self) -> tuple[WorkflowStage, ...]:
        """Stages ascending by order; declaration position breaks ties."""
        return tuple(sorted(self.stages, key=lambda stage: stage.order))

    def entry_stage(self) -> WorkflowStage | None:
        """Stage with the smallest order, or None for an empty workflow."""
        ordered = self.sorted_stages()
        return ordered[0] if ordered else None


# --- Service catalog ---


@dataclass(frozen=True)
class WorkflowRef:
    """Position of a workflow in a service's workflow sequence."""

    id: str
    order: int = 0


@dataclass(frozen=True)
class ServiceCatalogItem:
    """Catalog service; workflows[0] is the default workflow."""

    id: str
    name: str
    workflows: tuple[WorkflowRef, ...] = ()


# --- Orders ---


@dataclass(frozen=True)
class StageHistoryEntry:
    """Past stage transition of a service item."""

    stage_id: str
    stage_name: str = ""
    entered_at: datetime | None = None
    left_at: datetime | None = None
    performed_by: str | None = None


@dataclass(frozen=True)
class RawServiceItem:
    """
    Service item as stored on an order.

    The status is kept exactly as stored: a stage id, a legacy label,
    the pending sentinel, a finished sentinel, or empty.
    """

    id: str
    name: str = ""
    is_product: bool = False
    status: str = ""
    service_id: str | None = None
    workflow_id: str | None = None
    history: tuple[StageHistoryEntry, ...] = ()
    price: float = 0.0
    quantity: int = 1
    last_updated: datetime | None = None


@dataclass(frozen=True)
class Order:
    """Customer order with its nested service items."""

    id: str
    customer_name: str = ""
    expected_delivery: datetime | None = None
    items: tuple[RawServiceItem, ...] = ()


# --- Derived board ---


@dataclass(frozen=True)
class WorkItem:
    """
    Service item placed on the board.

    Carries the raw item fields plus order-level context, the resolved
    workflow and the normalized status. When workflow_id resolves to a
    known workflow with stages, status is one of its stage ids (finished
    sentinels excepted); otherwise status is the raw value.
    """

    id: str
    order_id: str
    name: str = ""
    customer_name: str = ""
    expected_delivery: datetime | None = None
    status: str = PENDING_STATUS
    raw_status: str = ""
    service_id: str | None = None
    workflow_id: str | None = None
    is_product: bool = False
    history: tuple[StageHistoryEntry, ...] = ()
    price: float = 0.0
    quantity: int = 1
    last_updated: datetime | None = None

    def with_status(self, status: str) -> "WorkItem":
        """Return a copy carrying a different status."""
        return replace(self, status=status)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "order_id": self.order_id,
            "name": self.name,
            "customer_name": self.customer_name,
            "expected_delivery": self.expected_delivery.isoformat() if self.expected_delivery else None,
            "status": self.status,
            "raw_status": self.raw_status,
            "service_id": self.service_id,
            "workflow_id": self.workflow_id,
            "price": self.price,
            "quantity": self.quantity,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "history": [
                {
                    "stage_id": entry.stage_id,
                    "stage_name": entry.stage_name,
                    "entered_at": entry.entered_at.isoformat() if entry.entered_at else None,
                    "left_at": entry.left_at.isoformat() if entry.left_at else None,
                    "performed_by": entry.performed_by,
                }
                for entry in self.history
            ],
        }


@dataclass(frozen=True)
class Column:
    """
    Board column.

    Attributes:
        id: Workflow id (matrix view), stage id (stage view), or a sentinel
        title: Display title
        order: Position of the column on the board
        kind: "workflow", "stage" or "special"
    """

    id: str
    title: str
    order: int = 0
    kind: str = "stage"

    @property
    def is_special(self) -> bool:
        return self.kind == "special"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "order": self.order, "kind": self.kind}


@dataclass(frozen=True)
class BoardSnapshotData:
    """The three source collections captured at one point in time."""

    orders: tuple[Order, ...] = ()
    workflows: tuple[WorkflowDefinition, ...] = ()
    services: tuple[ServiceCatalogItem, ...] = ()
