"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

WriteArtifact = Callable[..., Path]


def render_document(
    *,
    artifact_id: str | None,
    issue: str | None,
    parent_id: str | None = None,
    artifact_type: str | None = None,
    extra: str = "",
) -> str:
    """Render a planning document with a header block.

    Args:
        artifact_id: Value for ``id``; omitted when ``None``.
        issue: Raw value for ``issue``; omitted when ``None``.
        parent_id: Raw value for ``parentId``; omitted when ``None``.
        artifact_type: Value for ``type``; omitted when ``None``.
        extra: Additional raw header lines.

    Returns:
        Document text.
    """
    lines = ["---"]
    if artifact_id is not None:
        lines.append(f"id: {artifact_id}")
    if artifact_type is not None:
        lines.append(f"type: {artifact_type}")
    if issue is not None:
        lines.append(f"issue: {issue}")
    if parent_id is not None:
        lines.append(f"parentId: {parent_id}")
    if extra:
        lines.append(extra.rstrip("\n"))
    lines.extend(["---", "", "# Body", ""])
    return "\n".join(lines)


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Temporary repository root holding specs/, plans/ and tasks/."""
    return tmp_path


@pytest.fixture
def write_artifact(repo_root: Path) -> WriteArtifact:
    """Return a helper writing one document into a collection."""

    def _write(collection: str, name: str, **fields: Any) -> Path:
        path = repo_root / collection / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_document(**fields), encoding="utf-8")
        return path

    return _write
