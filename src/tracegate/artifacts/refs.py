"""Pull-request reference gate for spec/plan/task ids."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from pathlib import Path

from tracegate.artifacts.types import (
    ArtifactRecord,
    DiagnosticCategory,
    TraceDiagnostic,
)
from tracegate.config.settings import DEFAULT_REFERENCE_PATTERN


class EventPayloadError(RuntimeError):
    """Raised when a CI event payload cannot be decoded."""


def extract_references(
    text: str, pattern: str = DEFAULT_REFERENCE_PATTERN
) -> tuple[str, ...]:
    """Return sorted, unique artifact references mentioned in text.

    Args:
        text: Free text such as a pull request body.
        pattern: Regex matching one artifact id.

    Returns:
        Sorted unique references.
    """
    return tuple(sorted({match.group(0) for match in re.finditer(pattern, text)}))


def check_references(
    references: Iterable[str], records: Iterable[ArtifactRecord]
) -> tuple[TraceDiagnostic, ...]:
    """Report references that do not name a known artifact.

    Args:
        references: Referenced artifact ids.
        records: Records loaded for the repository.

    Returns:
        One diagnostic per unknown reference.
    """
    known = {record.id for record in records}
    return tuple(
        TraceDiagnostic(
            category=DiagnosticCategory.GRAPH,
            code="reference_missing",
            message=f"Referenced artifact {ref} not found in any collection",
            artifact_id=ref,
        )
        for ref in references
        if ref not in known
    )


def pr_body_from_event(path: Path) -> str:
    """Read the pull request body from a GitHub event payload.

    Args:
        path: Event JSON file (``$GITHUB_EVENT_PATH``).

    Returns:
        Pull request body, or an empty string for non-PR events and for a
        payload file that does not exist.

    Raises:
        EventPayloadError: If the payload cannot be read or decoded.
    """
    if not path.is_file():
        return ""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise EventPayloadError(f"Invalid event payload {path}: {exc}") from exc
    if not isinstance(payload, dict):
        return ""
    pull_request = payload.get("pull_request")
    if not isinstance(pull_request, dict):
        return ""
    body = pull_request.get("body")
    return body if isinstance(body, str) else ""


def render_reference_summary(references: Iterable[str]) -> str:
    """Build the Markdown summary listing referenced artifacts.

    Args:
        references: Referenced artifact ids.

    Returns:
        Markdown block suitable for a CI step summary.
    """
    lines = [
        "## Spec Traceability",
        "This PR references the following artifacts:",
    ]
    lines.extend(f"- `{ref}`" for ref in references)
    return "\n".join(lines) + "\n"


def append_step_summary(summary: str, target: Path) -> None:
    """Append a summary block to the CI step summary file."""
    with target.open("a", encoding="utf-8") as handle:
        handle.write(summary)
