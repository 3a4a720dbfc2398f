"""Coercion of string-only headers into canonical artifact records."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from tracegate.artifacts.frontmatter import HeaderValue
from tracegate.artifacts.types import (
    ArtifactKind,
    ArtifactRecord,
    DiagnosticCategory,
    IdClaim,
    TraceDiagnostic,
)

_KIND_FIELDS = ("type", "kind")
_PARENT_FIELDS = ("parentId", "parent_id")
_READ_FIELDS = ("id", *_KIND_FIELDS, "issue", *_PARENT_FIELDS, "links")
_ISSUE_PATTERN = re.compile(r"([0-9]+)(?:\.0+)?", re.ASCII)


class NormalizedDocument(BaseModel):
    """Normalizer outcome for one document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    record: ArtifactRecord | None = None
    claim: IdClaim | None = None
    diagnostics: tuple[TraceDiagnostic, ...] = ()


def _text(header: dict[str, HeaderValue], *keys: str) -> str | None:
    """Return the first present key as stripped text.

    Lists are joined so a misplaced list still reports its content.
    """
    for key in keys:
        if key in header:
            value = header[key]
            if isinstance(value, tuple):
                return ", ".join(value).strip()
            return value.strip()
    return None


def _found_prefix(artifact_id: str) -> str:
    head, sep, _ = artifact_id.partition("-")
    return f"{head}{sep}" if sep else artifact_id


def _parse_issue(raw: str) -> int | None:
    """Parse an issue number from header text.

    Args:
        raw: Raw issue text, e.g. ``"42"`` or ``"042"``.

    Returns:
        Positive integer, or ``None`` when the text is not a plain base-10
        whole number such as ``42`` or ``42.0``.
    """
    match = _ISSUE_PATTERN.fullmatch(raw)
    if match is None:
        return None
    issue = int(match.group(1))
    return issue if issue > 0 else None


def _links(header: dict[str, HeaderValue]) -> tuple[str, ...]:
    value = header.get("links")
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    return tuple(item for item in value if item)


def normalize_header(
    kind: ArtifactKind,
    header: dict[str, HeaderValue],
    path: Path,
    structured_keys: Iterable[str] = (),
) -> NormalizedDocument:
    """Validate and coerce one parsed header.

    Every rule is evaluated so a document reports all of its field problems
    at once. The expected kind always comes from the collection, never from
    the document itself.

    Args:
        kind: Kind implied by the collection the document was found in.
        header: String-only header fields.
        path: Document path used for diagnostics.
        structured_keys: Header keys whose values were nested structures.
            Unknown ones are ignored; known ones are field errors.

    Returns:
        A record when every field is valid, plus the id claim and any
        field diagnostics.
    """
    errors: list[tuple[str, str]] = []
    structured = set(structured_keys)
    for key in _READ_FIELDS:
        if key in structured:
            errors.append(
                ("invalid_field", f"Field '{key}' must be text or a list of text.")
            )

    artifact_id = _text(header, "id") or ""
    claim: IdClaim | None = None
    if not artifact_id:
        if "id" not in structured:
            errors.append(("missing_field", "Missing required field 'id'."))
    else:
        claim = IdClaim(id=artifact_id, kind=kind, path=path)
        if not artifact_id.startswith(kind.prefix):
            errors.append(
                (
                    "prefix_mismatch",
                    f"id '{artifact_id}' must start with '{kind.prefix}' for "
                    f"{kind.collection} (found prefix '{_found_prefix(artifact_id)}').",
                )
            )

    declared_kind = _text(header, *_KIND_FIELDS)
    if declared_kind and declared_kind.lower() != kind.value:
        errors.append(
            (
                "kind_mismatch",
                f"Expected type '{kind.value}', got '{declared_kind}'.",
            )
        )

    issue: int | None = None
    raw_issue = _text(header, "issue")
    if not raw_issue:
        if "issue" not in structured:
            errors.append(("missing_field", "Missing required field 'issue'."))
    else:
        issue = _parse_issue(raw_issue)
        if issue is None:
            errors.append(
                (
                    "invalid_issue",
                    f"issue must be a positive integer, got '{raw_issue}'.",
                )
            )

    parent_id = _text(header, *_PARENT_FIELDS) or ""
    match kind:
        case ArtifactKind.SPEC:
            if parent_id:
                errors.append(
                    (
                        "parent_forbidden",
                        f"Specs must not declare a parent, got parentId '{parent_id}'.",
                    )
                )
        case ArtifactKind.PLAN | ArtifactKind.TASK:
            if not parent_id and structured.isdisjoint(_PARENT_FIELDS):
                errors.append(
                    ("parent_required", f"{kind.value} must have parentId.")
                )

    diagnostics = tuple(
        TraceDiagnostic(
            category=DiagnosticCategory.FIELD,
            code=code,
            message=message,
            path=path,
            artifact_id=artifact_id or None,
        )
        for code, message in errors
    )
    if diagnostics:
        return NormalizedDocument(claim=claim, diagnostics=diagnostics)

    assert issue is not None  # Narrowed by the error checks above.
    record = ArtifactRecord(
        id=artifact_id,
        kind=kind,
        issue=issue,
        parent_id=parent_id,
        source_path=path,
        links=_links(header),
    )
    return NormalizedDocument(record=record, claim=claim)
