"""Traceability domain types."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ArtifactKind(StrEnum):
    """Closed set of planning artifact kinds."""

    SPEC = "spec"
    PLAN = "plan"
    TASK = "task"

    @property
    def prefix(self) -> str:
        """Identifier prefix mandated for this kind."""
        return f"{self.value.upper()}-"

    @property
    def collection(self) -> str:
        """Logical collection (directory) name holding this kind."""
        return f"{self.value}s"

    @property
    def parent_kind(self) -> ArtifactKind | None:
        """Kind a record of this kind must point at via ``parent_id``."""
        match self:
            case ArtifactKind.SPEC:
                return None
            case ArtifactKind.PLAN:
                return ArtifactKind.SPEC
            case ArtifactKind.TASK:
                return ArtifactKind.PLAN


class DiagnosticCategory(StrEnum):
    """Error taxonomy for validation diagnostics."""

    READ = "read"
    PARSE = "parse"
    FIELD = "field"
    GRAPH = "graph"


class TraceDiagnostic(BaseModel):
    """One collected validation problem."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    category: DiagnosticCategory
    code: str
    message: str
    path: Path | None = None
    artifact_id: str | None = None

    def render(self) -> str:
        """Return the single CI log line for this diagnostic.

        Returns:
            Message prefixed with the source path when one is known.
        """
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class SourceDocument(BaseModel):
    """Raw document located in one collection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ArtifactKind
    path: Path
    text: str


class ArtifactRecord(BaseModel):
    """Canonical, normalized representation of one planning document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    kind: ArtifactKind
    issue: int = Field(gt=0)
    parent_id: str = ""
    source_path: Path
    links: tuple[str, ...] = ()


class IdClaim(BaseModel):
    """Identifier declared by a document, valid or not."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    kind: ArtifactKind
    path: Path


class TraceCounts(BaseModel):
    """Summary counts printed with every report."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    specs: int = 0
    plans: int = 0
    tasks: int = 0
    issues: int = 0


class CheckResult(BaseModel):
    """Outcome of running every invariant over a record set."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    diagnostics: tuple[TraceDiagnostic, ...] = ()

    @property
    def is_valid(self) -> bool:
        """Whether no diagnostic was produced."""
        return not self.diagnostics

    @property
    def errors(self) -> tuple[str, ...]:
        """Rendered error lines in report order."""
        return tuple(diag.render() for diag in self.diagnostics)


class TraceReport(BaseModel):
    """Complete result of one validator invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    counts: TraceCounts
    records: tuple[ArtifactRecord, ...] = ()
    diagnostics: tuple[TraceDiagnostic, ...] = ()

    @property
    def is_valid(self) -> bool:
        """Whether every invariant held and every document was usable."""
        return not self.diagnostics

    @property
    def errors(self) -> tuple[str, ...]:
        """Rendered error lines in report order."""
        return tuple(diag.render() for diag in self.diagnostics)
