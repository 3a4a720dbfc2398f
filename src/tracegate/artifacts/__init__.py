"""Planning artifacts package."""

from tracegate.artifacts.checker import check_trace_graph
from tracegate.artifacts.frontmatter import HeaderParse, HeaderStatus, parse_header
from tracegate.artifacts.graph import TraceGraph, build_trace_graph
from tracegate.artifacts.loader import TraceRequest, TraceRootsError, build_trace_report
from tracegate.artifacts.normalize import NormalizedDocument, normalize_header
from tracegate.artifacts.types import (
    ArtifactKind,
    ArtifactRecord,
    CheckResult,
    DiagnosticCategory,
    IdClaim,
    SourceDocument,
    TraceCounts,
    TraceDiagnostic,
    TraceReport,
)

__all__ = [
    "ArtifactKind",
    "ArtifactRecord",
    "CheckResult",
    "DiagnosticCategory",
    "HeaderParse",
    "HeaderStatus",
    "IdClaim",
    "NormalizedDocument",
    "SourceDocument",
    "TraceCounts",
    "TraceDiagnostic",
    "TraceGraph",
    "TraceReport",
    "TraceRequest",
    "TraceRootsError",
    "build_trace_graph",
    "build_trace_report",
    "check_trace_graph",
    "normalize_header",
    "parse_header",
]
