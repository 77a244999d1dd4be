"""Tests for status classification and normalization."""

import logging

import pytest

from serviceboard.board.index import SnapshotIndex
from serviceboard.board.status import (
    classify_status,
    is_finished_sentinel,
    match_stage_label,
    normalize_status,
)
from serviceboard.board.types import (
    PENDING_STATUS,
    CanonicalStageRef,
    LegacyLabel,
    PendingSentinel,
    WorkflowDefinition,
    WorkflowStage,
)

S1 = "00000000-0000-4000-8000-000000000001"
S2 = "00000000-0000-4000-8000-000000000002"
S3 = "00000000-0000-4000-8000-000000000003"
R1 = "00000000-0000-4000-8000-0000000000a1"


@pytest.fixture
def index(clean_workflow, repair_workflow):
    legacy = WorkflowDefinition(
        id="WL",
        label="Legacy",
        stages=(
            WorkflowStage(id="ST1", name="Tiếp nhận", order=0),
            WorkflowStage(id="ST2", name="đang xử lý", order=1),
        ),
    )
    empty = WorkflowDefinition(id="WE", label="Empty")
    return SnapshotIndex.build([clean_workflow, repair_workflow, legacy, empty], [])


class TestClassifyStatus:
    """Boundary classification into the status union."""

    @pytest.mark.parametrize("raw", [None, "", "   ", 42, PENDING_STATUS])
    def test_pending_values(self, raw):
        assert isinstance(classify_status(raw), PendingSentinel)

    def test_uuid_is_canonical(self):
        value = classify_status(f"  {S1} ")
        assert value == CanonicalStageRef(S1)
        assert value.raw == S1

    def test_free_text_is_legacy(self):
        assert classify_status("Đang xử lý") == LegacyLabel("Đang xử lý")

    def test_pending_raw_value(self):
        assert classify_status(None).raw == PENDING_STATUS


class TestNormalizeStatus:
    """Priority rules of normalize_status."""

    def test_no_workflow_returns_pending(self, index):
        assert normalize_status("", None, index) == PENDING_STATUS
        assert normalize_status(None, None, index) == PENDING_STATUS

    def test_no_workflow_keeps_raw(self, index):
        assert normalize_status("Đang xử lý", None, index) == "Đang xử lý"

    def test_unknown_workflow_keeps_raw(self, index):
        assert normalize_status("whatever", "missing", index) == "whatever"

    def test_canonical_stage_of_workflow_unchanged(self, index):
        assert normalize_status(S2, "W1", index) == S2

    def test_canonical_stage_of_other_workflow_falls_back(self, index):
        assert normalize_status(R1, "W1", index) == S1

    def test_stage_name_case_insensitive(self, index):
        assert normalize_status("Đang xử lý", "WL", index) == "ST2"
        assert normalize_status("  TIẾP NHẬN ", "W1", index) == S1

    def test_stage_id_case_insensitive(self, index):
        assert normalize_status("st2", "WL", index) == "ST2"

    def test_unmatched_falls_back_to_entry_stage(self, index):
        # W1 declares its stages out of order; S1 has the lowest order
        assert normalize_status("unknown label", "W1", index) == S1

    def test_pending_resolves_to_entry_stage(self, index):
        assert normalize_status("", "WL", index) == "ST1"
        assert normalize_status(PENDING_STATUS, "W1", index) == S1

    def test_empty_workflow_keeps_raw(self, index):
        assert normalize_status("Đang xử lý", "WE", index) == "Đang xử lý"
        assert normalize_status("", "WE", index) == PENDING_STATUS

    @pytest.mark.parametrize("status", ["done", "cancel", "Done", "hoan_thanh", "da_giao"])
    def test_finished_sentinels_not_normalized(self, index, status):
        assert normalize_status(status, "W1", index) == status

    @pytest.mark.parametrize(
        "raw,workflow_id",
        [
            ("", "W1"),
            ("Đang xử lý", "WL"),
            ("nonsense", "WL"),
            (S3, "W1"),
            (R1, "W1"),
            ("done", "W1"),
            ("label", None),
            ("label", "missing"),
            ("", "WE"),
        ],
    )
    def test_idempotent(self, index, raw, workflow_id):
        once = normalize_status(raw, workflow_id, index)
        assert normalize_status(once, workflow_id, index) == once


class TestMatchStageLabel:
    """Legacy label matching."""

    def test_ambiguous_name_uses_lowest_order(self, caplog):
        workflow = WorkflowDefinition(
            id="WA",
            label="Ambiguous",
            stages=(
                WorkflowStage(id="late", name="Sửa", order=5),
                WorkflowStage(id="early", name="sửa", order=2),
            ),
        )
        with caplog.at_level(logging.WARNING, logger="ServiceBoard"):
            stage = match_stage_label(workflow, "SỬA")
        assert stage.id == "early"
        assert any("Ambiguous stage name" in record.getMessage() for record in caplog.records)

    def test_id_match_wins_over_name(self):
        workflow = WorkflowDefinition(
            id="WB",
            label="B",
            stages=(
                WorkflowStage(id="a", name="b", order=1),
                WorkflowStage(id="b", name="other", order=2),
            ),
        )
        assert match_stage_label(workflow, "b").id == "b"

    def test_empty_label(self, clean_workflow):
        assert match_stage_label(clean_workflow, "  ") is None


def test_is_finished_sentinel():
    assert is_finished_sentinel("DONE")
    assert is_finished_sentinel(" huy ")
    assert not is_finished_sentinel(None)
    assert not is_finished_sentinel("Hoàn thành")
