"""
Record mapping from storage rows to board types.

Storage rows come in two shapes: the legacy Vietnamese column names of the
original schema (ma_don_hang, danh_sach_dich_vu, trang_thai, ...) and the
English field names used by newer writers. Every mapper accepts both and
coerces malformed values to defaults instead of raising.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable
import json

from serviceboard.board.types import (
    Order,
    RawServiceItem,
    ServiceCatalogItem,
    StageHistoryEntry,
    StageTask,
    WorkflowDefinition,
    WorkflowRef,
    WorkflowStage,
)
from serviceboard.logger import get_logger

log = get_logger("MAPPING")


def _pick(record: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-empty value among keys."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return default


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _optional_text(value: Any) -> str | None:
    text = _text(value).strip()
    return text or None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "t"}
    return bool(value)


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_list(value: Any) -> list[Any]:
    """Accept a list, a JSON-encoded list (JSONB columns), or nothing."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            log.warning("Unparseable JSON list column", value=value[:80])
            return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _str_tuple(value: Any) -> tuple[str, ...]:
    return tuple(_text(entry) for entry in _as_list(value) if _text(entry).strip())


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse ISO strings, dates and epoch numbers to an aware UTC datetime.

    Epoch values above 10^11 are treated as milliseconds. Naive values are
    taken as UTC. Anything unparseable yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if abs(value) > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            if text.lstrip("-").isdigit():
                return parse_datetime(int(text))
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def history_from_records(value: Any) -> tuple[StageHistoryEntry, ...]:
    entries: list[StageHistoryEntry] = []
    for record in _as_list(value):
        if not isinstance(record, dict):
            continue
        stage_id = _text(_pick(record, "stageId", "stage_id", "id_buoc"))
        if not stage_id:
            continue
        entries.append(
            StageHistoryEntry(
                stage_id=stage_id,
                stage_name=_text(_pick(record, "stageName", "stage_name", "ten_buoc")),
                entered_at=parse_datetime(_pick(record, "enteredAt", "entered_at")),
                left_at=parse_datetime(_pick(record, "leftAt", "left_at")),
                performed_by=_optional_text(_pick(record, "performedBy", "performed_by")),
            )
        )
    return tuple(entries)


def service_item_from_record(record: dict[str, Any]) -> RawServiceItem:
    """Map a service item row (danh_sach_dich_vu entry) to RawServiceItem."""
    return RawServiceItem(
        id=_text(_pick(record, "ma_item", "id")),
        name=_text(_pick(record, "ten_hang_muc", "ten", "name")),
        is_product=_as_bool(_pick(record, "la_san_pham", "isProduct", "is_product", default=False)),
        status=_text(_pick(record, "trang_thai", "status")),
        service_id=_optional_text(_pick(record, "id_dich_vu_goc", "serviceId", "service_id")),
        workflow_id=_optional_text(_pick(record, "id_quy_trinh", "workflowId", "workflow_id")),
        history=history_from_records(_pick(record, "lich_su_thuc_hien", "history")),
        price=_as_float(_pick(record, "don_gia", "gia", "price", default=0)),
        quantity=_as_int(_pick(record, "so_luong", "quantity", default=1), default=1),
        last_updated=parse_datetime(_pick(record, "cap_nhat_cuoi", "lastUpdated", "last_updated")),
    )


def order_from_record(
    record: dict[str, Any],
    items: Iterable[dict[str, Any]] | None = None,
) -> Order:
    """
    Map an order row to Order.

    Args:
        record: Order row
        items: Service item rows fetched separately; when None the nested
               danh_sach_dich_vu / items list of the record is used
    """
    if items is None:
        items = _as_list(_pick(record, "danh_sach_dich_vu", "items"))

    return Order(
        id=_text(_pick(record, "ma_don_hang", "id")),
        customer_name=_text(_pick(record, "ten_khach_hang", "customerName", "customer_name")),
        expected_delivery=parse_datetime(
            _pick(record, "ngay_du_kien_giao", "expectedDelivery", "expected_delivery")
        ),
        items=tuple(service_item_from_record(item) for item in items if isinstance(item, dict)),
    )


def orders_from_rows(
    order_rows: Iterable[dict[str, Any]],
    item_rows: Iterable[dict[str, Any]],
) -> list[Order]:
    """Attach separately fetched item rows to their orders via id_don_hang."""
    items_by_order: dict[str, list[dict[str, Any]]] = {}
    for row in item_rows:
        order_id = _text(_pick(row, "id_don_hang", "orderId", "order_id"))
        if order_id:
            items_by_order.setdefault(order_id, []).append(row)

    orders: list[Order] = []
    for row in order_rows:
        order_id = _text(_pick(row, "ma_don_hang", "id"))
        orders.append(order_from_record(row, items=items_by_order.get(order_id, [])))
    return orders


def stage_from_record(record: dict[str, Any]) -> WorkflowStage:
    tasks = tuple(
        StageTask(
            id=_text(_pick(task, "id")),
            title=_text(_pick(task, "tieu_de", "title")),
            required=_as_bool(_pick(task, "bat_buoc", "required", default=False)),
        )
        for task in _as_list(_pick(record, "cac_task_quy_trinh", "tasks", "todos"))
        if isinstance(task, dict)
    )
    return WorkflowStage(
        id=_text(_pick(record, "id")),
        name=_text(_pick(record, "ten_buoc", "name")),
        order=_as_int(_pick(record, "thu_tu", "order", default=0)),
        tasks=tasks,
        members=_str_tuple(_pick(record, "nhan_vien_duoc_giao", "assignedMembers", "members")),
    )


def workflow_from_record(record: dict[str, Any]) -> WorkflowDefinition:
    """Map a workflow row with its joined cac_buoc_quy_trinh stages."""
    stages = tuple(
        stage_from_record(stage)
        for stage in _as_list(_pick(record, "cac_buoc_quy_trinh", "stages"))
        if isinstance(stage, dict) and _pick(stage, "id") is not None
    )
    types = _pick(record, "loai_ap_dung", "loai_dich_vu", "types")
    if isinstance(types, str) and not types.lstrip().startswith("["):
        types = [types]
    return WorkflowDefinition(
        id=_text(_pick(record, "id")),
        label=_text(_pick(record, "ten_quy_trinh", "label"), default="Quy trình"),
        department=_optional_text(_pick(record, "phong_ban_phu_trach", "bo_phan", "department")),
        types=_str_tuple(types),
        stages=stages,
        members=_str_tuple(_pick(record, "nhan_vien_duoc_giao", "assignedMembers", "members")),
    )


def _workflow_refs(record: dict[str, Any]) -> tuple[WorkflowRef, ...]:
    raw = _pick(record, "workflows")
    if raw is None:
        raw = _pick(record, "cac_buoc_quy_trinh")

    refs: list[WorkflowRef] = []
    for position, entry in enumerate(_as_list(raw)):
        if isinstance(entry, str):
            workflow_id, order = entry, position + 1
        elif isinstance(entry, dict):
            workflow_id = _text(_pick(entry, "id", "id_quy_trinh"))
            order = _as_int(_pick(entry, "order", "thu_tu", default=position + 1), default=position + 1)
        else:
            continue
        if workflow_id:
            refs.append(WorkflowRef(id=workflow_id, order=order))

    if not refs:
        single = _optional_text(_pick(record, "id_quy_trinh", "workflowId", "workflow_id"))
        if single:
            refs.append(WorkflowRef(id=single, order=1))
    return tuple(refs)


def service_from_record(record: dict[str, Any]) -> ServiceCatalogItem:
    """Map a catalog service row; the workflow sequence keeps stored order."""
    return ServiceCatalogItem(
        id=_text(_pick(record, "id", "ma_dich_vu")),
        name=_text(_pick(record, "ten_dich_vu", "name", "ten")),
        workflows=_workflow_refs(record),
    )
