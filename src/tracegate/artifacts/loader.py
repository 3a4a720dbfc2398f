"""Traceability validation pipeline."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from tracegate.artifacts.checker import check_trace_graph, dedupe_diagnostics
from tracegate.artifacts.discover import (
    DOCUMENT_SUFFIX,
    EXCLUDED_NAMES,
    discover_documents,
)
from tracegate.artifacts.frontmatter import HeaderStatus, parse_header
from tracegate.artifacts.graph import TraceGraph, build_trace_graph
from tracegate.artifacts.normalize import NormalizedDocument, normalize_header
from tracegate.artifacts.types import (
    ArtifactKind,
    ArtifactRecord,
    DiagnosticCategory,
    IdClaim,
    SourceDocument,
    TraceDiagnostic,
    TraceReport,
)
from tracegate.config import TraceConfig

_LOGGER = logging.getLogger(__name__)


class TraceRootsError(RuntimeError):
    """Raised when the run itself cannot proceed (no root is accessible)."""


class TraceRequest(BaseModel):
    """Inputs required to validate one repository."""

    model_config = ConfigDict(extra="forbid")

    specs_dir: Path
    plans_dir: Path
    tasks_dir: Path
    document_suffix: str = DOCUMENT_SUFFIX
    excluded_names: tuple[str, ...] = EXCLUDED_NAMES
    allow_multiple_specs_per_issue: bool = True

    @classmethod
    def from_config(cls, repo_root: Path, config: TraceConfig) -> TraceRequest:
        """Build a request from a loaded config.

        Args:
            repo_root: Repository root the collection dirs are relative to.
            config: Loaded validator config.

        Returns:
            Request with resolved collection roots.

        Raises:
            TraceRootsError: If the repository root does not exist.
        """
        if not repo_root.is_dir():
            raise TraceRootsError(f"Repository root is not a directory: {repo_root}")
        specs_dir, plans_dir, tasks_dir = config.resolve_roots(repo_root)
        return cls(
            specs_dir=specs_dir,
            plans_dir=plans_dir,
            tasks_dir=tasks_dir,
            document_suffix=config.document_suffix,
            excluded_names=config.excluded_names,
            allow_multiple_specs_per_issue=config.allow_multiple_specs_per_issue,
        )

    def roots(self) -> tuple[tuple[ArtifactKind, Path], ...]:
        """Return each collection root paired with its kind."""
        return (
            (ArtifactKind.SPEC, self.specs_dir),
            (ArtifactKind.PLAN, self.plans_dir),
            (ArtifactKind.TASK, self.tasks_dir),
        )


def _locate_all(
    request: TraceRequest,
) -> tuple[list[SourceDocument], list[TraceDiagnostic]]:
    """Read every collection, failing only when no existing root is usable.

    Args:
        request: Validation request with collection roots.

    Returns:
        All readable documents and read diagnostics.

    Raises:
        TraceRootsError: If roots exist but none of them can be listed.
    """
    documents: list[SourceDocument] = []
    diagnostics: list[TraceDiagnostic] = []
    existing = 0
    unusable = 0
    for kind, root in request.roots():
        if root.exists():
            existing += 1
        found, read_diags = discover_documents(
            root,
            kind,
            suffix=request.document_suffix,
            excluded_names=request.excluded_names,
        )
        if any(diag.code == "root_unreadable" for diag in read_diags):
            unusable += 1
        documents.extend(found)
        diagnostics.extend(read_diags)

    if existing and unusable == existing:
        reasons = "; ".join(diag.render() for diag in diagnostics)
        raise TraceRootsError(f"No collection root is accessible: {reasons}")
    return documents, diagnostics


def _normalize_document(document: SourceDocument) -> NormalizedDocument:
    """Parse and normalize one located document.

    Args:
        document: Located document with raw text.

    Returns:
        Normalizer outcome, carrying a parse diagnostic when the header is
        missing or malformed.
    """
    header = parse_header(document.text)
    if header.status == HeaderStatus.MISSING:
        return NormalizedDocument(
            diagnostics=(
                TraceDiagnostic(
                    category=DiagnosticCategory.PARSE,
                    code="missing_header",
                    message="Missing header block.",
                    path=document.path,
                ),
            )
        )
    if header.status == HeaderStatus.MALFORMED:
        return NormalizedDocument(
            diagnostics=(
                TraceDiagnostic(
                    category=DiagnosticCategory.PARSE,
                    code="malformed_header",
                    message=header.error or "Malformed header block.",
                    path=document.path,
                ),
            )
        )
    return normalize_header(
        document.kind, header.fields, document.path, header.structured_keys
    )


def build_trace_report(request: TraceRequest) -> TraceReport:
    """Validate every spec, plan and task document in one pass.

    All documents are located, parsed and normalized before the graph is
    built; no invariant is checked against a partially loaded record set.

    Args:
        request: Validation request.

    Returns:
        Report with counts, records and every collected diagnostic.
    """
    documents, diagnostics = _locate_all(request)

    records: list[ArtifactRecord] = []
    claims: list[IdClaim] = []
    for document in documents:
        outcome = _normalize_document(document)
        diagnostics.extend(outcome.diagnostics)
        if outcome.claim is not None:
            claims.append(outcome.claim)
        if outcome.record is not None:
            records.append(outcome.record)
    _LOGGER.debug("Normalized %d of %d document(s)", len(records), len(documents))

    graph: TraceGraph = build_trace_graph(records, claims)
    result = check_trace_graph(
        graph,
        allow_multiple_specs_per_issue=request.allow_multiple_specs_per_issue,
    )
    diagnostics.extend(result.diagnostics)

    return TraceReport(
        counts=graph.counts(),
        records=graph.records,
        diagnostics=dedupe_diagnostics(diagnostics),
    )

