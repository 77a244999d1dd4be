"""Pytest configuration for service board tests."""
import sys
from pathlib import Path

import pytest

# Add project root to path so 'serviceboard' and 'tools' can be imported
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from serviceboard.board.types import (
    Order,
    RawServiceItem,
    ServiceCatalogItem,
    WorkflowDefinition,
    WorkflowRef,
    WorkflowStage,
)

# Stage ids in UUID format
S1 = "00000000-0000-4000-8000-000000000001"
S2 = "00000000-0000-4000-8000-000000000002"
S3 = "00000000-0000-4000-8000-000000000003"
R1 = "00000000-0000-4000-8000-0000000000a1"
R2 = "00000000-0000-4000-8000-0000000000a2"


@pytest.fixture
def clean_workflow():
    """Three-stage workflow declared out of order."""
    return WorkflowDefinition(
        id="W1",
        label="Vệ sinh",
        stages=(
            WorkflowStage(id=S2, name="Đang xử lý", order=2),
            WorkflowStage(id=S1, name="Tiếp nhận", order=1),
            WorkflowStage(id=S3, name="Hoàn thành", order=3),
        ),
    )


@pytest.fixture
def repair_workflow():
    return WorkflowDefinition(
        id="W2",
        label="Sửa chữa",
        stages=(
            WorkflowStage(id=R1, name="Kiểm tra", order=1),
            WorkflowStage(id=R2, name="Sửa", order=2),
        ),
    )


@pytest.fixture
def services():
    return [
        ServiceCatalogItem(id="SV1", name="Vệ sinh", workflows=(WorkflowRef("W1", 1),)),
        ServiceCatalogItem(
            id="SV2",
            name="Phục hồi",
            workflows=(WorkflowRef("W2", 1), WorkflowRef("W1", 2)),
        ),
    ]


@pytest.fixture
def orders():
    return [
        Order(
            id="O1",
            customer_name="An",
            items=(
                RawServiceItem(id="I1", name="Giày", service_id="SV1", status="Đang xử lý"),
                RawServiceItem(id="P1", name="Hộp", is_product=True),
            ),
        ),
        Order(
            id="O2",
            customer_name="Bình",
            items=(RawServiceItem(id="I2", name="Túi", service_id="SV2", status=""),),
        ),
    ]
