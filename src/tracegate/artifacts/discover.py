"""Document discovery for the specs/plans/tasks collections."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from tracegate.artifacts.types import (
    ArtifactKind,
    DiagnosticCategory,
    SourceDocument,
    TraceDiagnostic,
)

DOCUMENT_SUFFIX = ".md"
EXCLUDED_NAMES = ("README.md",)

_LOGGER = logging.getLogger(__name__)


def _candidate_paths(
    root: Path, suffix: str, excluded_names: Iterable[str]
) -> tuple[list[Path], list[OSError]]:
    """Return sorted document paths below ``root`` and listing failures.

    Args:
        root: Collection root directory.
        suffix: Document filename suffix.
        excluded_names: Filenames skipped in every directory.

    Returns:
        Lexically sorted document paths, and one error per directory that
        could not be listed.
    """
    excluded = set(excluded_names)
    failures: list[OSError] = []
    paths: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=failures.append):
        base = Path(dirpath)
        paths.extend(
            base / name
            for name in filenames
            if name.endswith(suffix)
            and name not in excluded
            and (base / name).is_file()
        )
    failures.sort(key=lambda exc: str(exc.filename))
    return sorted(paths), failures


def discover_documents(
    root: Path,
    kind: ArtifactKind,
    *,
    suffix: str = DOCUMENT_SUFFIX,
    excluded_names: Iterable[str] = EXCLUDED_NAMES,
) -> tuple[tuple[SourceDocument, ...], tuple[TraceDiagnostic, ...]]:
    """Read every document in one collection root.

    A missing root yields no documents and no diagnostics; a repository may
    legitimately have no plans or tasks yet.

    Args:
        root: Collection root directory to scan recursively.
        kind: Artifact kind implied by the collection.
        suffix: Document filename suffix.
        excluded_names: Filenames that are never documents (index files).

    Returns:
        A tuple of readable documents and read diagnostics.
    """
    if not root.exists():
        _LOGGER.debug("Collection root %s missing for %s", root, kind.collection)
        return (), ()
    if not root.is_dir():
        return (), (
            TraceDiagnostic(
                category=DiagnosticCategory.READ,
                code="root_unreadable",
                message=f"Collection root for {kind.collection} is not a directory.",
                path=root,
            ),
        )

    paths, failures = _candidate_paths(root, suffix, excluded_names)
    documents: list[SourceDocument] = []
    diagnostics: list[TraceDiagnostic] = []
    for exc in failures:
        failed = Path(exc.filename) if exc.filename else root
        if failed == root:
            return (), (
                TraceDiagnostic(
                    category=DiagnosticCategory.READ,
                    code="root_unreadable",
                    message=f"Failed listing {kind.collection}: {exc}",
                    path=root,
                ),
            )
        diagnostics.append(
            TraceDiagnostic(
                category=DiagnosticCategory.READ,
                code="read_failed",
                message=f"Failed listing directory: {exc}",
                path=failed,
            ),
        )

    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            diagnostics.append(
                TraceDiagnostic(
                    category=DiagnosticCategory.READ,
                    code="read_failed",
                    message=f"Failed reading document: {exc}",
                    path=path,
                ),
            )
            continue
        documents.append(SourceDocument(kind=kind, path=path, text=text))

    _LOGGER.debug(
        "Discovered %d %s document(s) under %s", len(documents), kind.value, root
    )
    return tuple(documents), tuple(diagnostics)
