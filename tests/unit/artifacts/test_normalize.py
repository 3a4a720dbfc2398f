"""Unit tests for header normalization into artifact records."""

from __future__ import annotations

from pathlib import Path

import pytest

from tracegate.artifacts.normalize import normalize_header
from tracegate.artifacts.types import ArtifactKind, DiagnosticCategory

_PATH = Path("plans/example.md")


@pytest.mark.unit
def test_normalize_builds_record_with_coerced_issue() -> None:
    """Text issue values with leading zeros should coerce to integers."""
    # Arrange - plan header as the parser would emit it
    header = {"id": "PLAN-42", "issue": "042", "parentId": "SPEC-42"}

    # Act - normalize
    outcome = normalize_header(ArtifactKind.PLAN, header, _PATH)

    # Assert - typed record, no diagnostics
    assert outcome.diagnostics == ()
    assert outcome.record is not None
    assert outcome.record.issue == 42
    assert outcome.record.parent_id == "SPEC-42"
    assert outcome.record.source_path == _PATH
    assert outcome.claim is not None and outcome.claim.id == "PLAN-42"


@pytest.mark.unit
def test_normalize_rejects_non_numeric_issue() -> None:
    """A word issue value should be a field error, not a silent default."""
    outcome = normalize_header(
        ArtifactKind.SPEC, {"id": "SPEC-4", "issue": "four"}, _PATH
    )

    assert outcome.record is None
    assert [diag.code for diag in outcome.diagnostics] == ["invalid_issue"]
    assert "'four'" in outcome.diagnostics[0].message


@pytest.mark.unit
@pytest.mark.parametrize(
    ("kind", "artifact_id", "expected", "found"),
    [
        (ArtifactKind.PLAN, "SPEC-20", "PLAN-", "SPEC-"),
        (ArtifactKind.SPEC, "TASK-3", "SPEC-", "TASK-"),
        (ArtifactKind.TASK, "PLAN-9", "TASK-", "PLAN-"),
    ],
    ids=["plan_with_spec_id", "spec_with_task_id", "task_with_plan_id"],
)
def test_normalize_wrong_prefix_is_exactly_one_error(
    kind: ArtifactKind, artifact_id: str, expected: str, found: str
) -> None:
    """A wrong id prefix yields one field error naming both prefixes."""
    parent = "" if kind == ArtifactKind.SPEC else "PARENT-1"
    header = {"id": artifact_id, "issue": "3", "parentId": parent}

    outcome = normalize_header(kind, header, _PATH)

    assert len(outcome.diagnostics) == 1
    diag = outcome.diagnostics[0]
    assert diag.category == DiagnosticCategory.FIELD
    assert diag.code == "prefix_mismatch"
    assert f"'{expected}'" in diag.message
    assert f"'{found}'" in diag.message
    assert outcome.claim is not None and outcome.claim.id == artifact_id


@pytest.mark.unit
def test_normalize_spec_must_not_declare_parent() -> None:
    """Specs are roots; a parent is an error and empty normalizes to ''."""
    with_parent = normalize_header(
        ArtifactKind.SPEC,
        {"id": "SPEC-1", "issue": "1", "parentId": "SPEC-0"},
        _PATH,
    )
    without_parent = normalize_header(
        ArtifactKind.SPEC, {"id": "SPEC-1", "issue": "1"}, _PATH
    )

    assert [diag.code for diag in with_parent.diagnostics] == ["parent_forbidden"]
    assert without_parent.record is not None
    assert without_parent.record.parent_id == ""


@pytest.mark.unit
@pytest.mark.parametrize("kind", [ArtifactKind.PLAN, ArtifactKind.TASK])
def test_normalize_plan_and_task_require_parent(kind: ArtifactKind) -> None:
    """Plans and tasks without parentId are rejected."""
    header = {"id": f"{kind.prefix}1", "issue": "1", "parentId": ""}

    outcome = normalize_header(kind, header, _PATH)

    assert [diag.code for diag in outcome.diagnostics] == ["parent_required"]


@pytest.mark.unit
def test_normalize_kind_field_is_lenient_when_missing_strict_when_wrong() -> None:
    """A missing type is accepted; a conflicting type is an error."""
    base = {"id": "TASK-1", "issue": "1", "parentId": "PLAN-1"}

    missing = normalize_header(ArtifactKind.TASK, base, _PATH)
    matching = normalize_header(ArtifactKind.TASK, {**base, "type": "Task"}, _PATH)
    wrong = normalize_header(ArtifactKind.TASK, {**base, "type": "plan"}, _PATH)

    assert missing.record is not None
    assert matching.record is not None
    assert [diag.code for diag in wrong.diagnostics] == ["kind_mismatch"]


@pytest.mark.unit
def test_normalize_collects_every_field_error_and_ignores_unknown_fields() -> None:
    """All problems in one document are reported together."""
    header = {"owner": "@team", "status": "draft", "parentId": ""}

    outcome = normalize_header(ArtifactKind.PLAN, header, _PATH)

    assert [diag.code for diag in outcome.diagnostics] == [
        "missing_field",
        "missing_field",
        "parent_required",
    ]
    assert outcome.claim is None


@pytest.mark.unit
def test_normalize_carries_links() -> None:
    """Optional links are normalized to a tuple."""
    header = {
        "id": "SPEC-5",
        "issue": "5",
        "links": ("https://example.invalid/5", ""),
    }

    outcome = normalize_header(ArtifactKind.SPEC, header, _PATH)

    assert outcome.record is not None
    assert outcome.record.links == ("https://example.invalid/5",)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("7", 7),
        ("007", 7),
        ("7.0", 7),
        ("1_000", None),
        ("1e3", None),
        ("٣", None),
        ("7.5", None),
        ("0", None),
        ("-3", None),
    ],
    ids=[
        "plain",
        "leading_zeros",
        "integral_decimal",
        "underscore",
        "exponent",
        "non_ascii_digit",
        "fraction",
        "zero",
        "negative",
    ],
)
def test_normalize_issue_accepts_only_base_ten_whole_numbers(
    raw: str, expected: int | None
) -> None:
    """Only plain ASCII digits, optionally with a zero fraction, are issues."""
    header = {"id": "SPEC-7", "issue": raw}

    outcome = normalize_header(ArtifactKind.SPEC, header, _PATH)

    if expected is None:
        assert [diag.code for diag in outcome.diagnostics] == ["invalid_issue"]
    else:
        assert outcome.record is not None
        assert outcome.record.issue == expected


@pytest.mark.unit
def test_normalize_ignores_unknown_structured_fields() -> None:
    """Nested metadata the validator does not read never rejects a record."""
    header = {"id": "SPEC-8", "issue": "8"}

    outcome = normalize_header(
        ArtifactKind.SPEC, header, _PATH, structured_keys=("reviewers",)
    )

    assert outcome.diagnostics == ()
    assert outcome.record is not None


@pytest.mark.unit
def test_normalize_reports_structured_known_fields_once() -> None:
    """A nested value in a read field is one field error, not also 'missing'."""
    # Arrange - issue and parentId arrived as nested structures
    header = {"id": "PLAN-8"}

    # Act - normalize with those keys flagged
    outcome = normalize_header(
        ArtifactKind.PLAN, header, _PATH, structured_keys=("issue", "parentId")
    )

    # Assert - one invalid_field per key and nothing else
    assert outcome.record is None
    assert [diag.code for diag in outcome.diagnostics] == [
        "invalid_field",
        "invalid_field",
    ]
    assert "'issue'" in outcome.diagnostics[0].message
    assert "'parentId'" in outcome.diagnostics[1].message
