"""Unit tests for the pull-request reference gate."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tracegate.artifacts.refs import (
    EventPayloadError,
    append_step_summary,
    check_references,
    extract_references,
    pr_body_from_event,
    render_reference_summary,
)
from tracegate.artifacts.types import ArtifactKind, ArtifactRecord


@pytest.mark.unit
def test_extract_references_supports_short_and_dated_ids() -> None:
    """Both SPEC-10 and dated slug ids are recognized, deduplicated and sorted."""
    body = (
        "Implements TASK-20250101-login and PLAN-10.\n"
        "Refs SPEC-10, SPEC-10 again. Spec-driven work, not SPEC-x."
    )

    assert extract_references(body) == ("PLAN-10", "SPEC-10", "TASK-20250101-login")


@pytest.mark.unit
def test_check_references_reports_unknown_ids() -> None:
    """References without a matching record are reported individually."""
    records = [
        ArtifactRecord(
            id="SPEC-10",
            kind=ArtifactKind.SPEC,
            issue=10,
            source_path=Path("specs/spec-10.md"),
        )
    ]

    missing = check_references(("PLAN-10", "SPEC-10"), records)

    assert [diag.artifact_id for diag in missing] == ["PLAN-10"]
    assert missing[0].code == "reference_missing"


@pytest.mark.unit
def test_pr_body_from_event_reads_pull_request_body(tmp_path: Path) -> None:
    """The PR body is read from the event payload; other events are empty."""
    pr_event = tmp_path / "pr.json"
    pr_event.write_text(json.dumps({"pull_request": {"body": "SPEC-1"}}), "utf-8")
    push_event = tmp_path / "push.json"
    push_event.write_text(json.dumps({"ref": "refs/heads/main"}), "utf-8")

    assert pr_body_from_event(pr_event) == "SPEC-1"
    assert pr_body_from_event(push_event) == ""


@pytest.mark.unit
def test_pr_body_from_event_rejects_invalid_json(tmp_path: Path) -> None:
    """Undecodable payloads raise a dedicated error."""
    event = tmp_path / "event.json"
    event.write_text("{not-json", encoding="utf-8")

    with pytest.raises(EventPayloadError, match="Invalid event payload"):
        pr_body_from_event(event)


@pytest.mark.unit
def test_reference_summary_is_appended(tmp_path: Path) -> None:
    """The Markdown summary lists each reference and appends to the file."""
    target = tmp_path / "summary.md"
    target.write_text("existing\n", encoding="utf-8")

    append_step_summary(render_reference_summary(("SPEC-1", "PLAN-1")), target)

    content = target.read_text(encoding="utf-8")
    assert content.startswith("existing\n## Spec Traceability\n")
    assert "- `SPEC-1`\n- `PLAN-1`\n" in content


@pytest.mark.unit
def test_pr_body_from_event_treats_missing_payload_as_empty(tmp_path: Path) -> None:
    """A configured but absent event file means no body, not a failure."""
    assert pr_body_from_event(tmp_path / "absent.json") == ""
