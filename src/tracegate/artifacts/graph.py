"""Traceability forest construction."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from tracegate.artifacts.types import (
    ArtifactKind,
    ArtifactRecord,
    DiagnosticCategory,
    IdClaim,
    TraceCounts,
    TraceDiagnostic,
)


class TraceGraph(BaseModel):
    """Indices over a complete, normalized record set."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    records: tuple[ArtifactRecord, ...]
    by_id: dict[str, ArtifactRecord]
    children_by_parent: dict[str, tuple[ArtifactRecord, ...]]
    by_issue: dict[int, dict[ArtifactKind, tuple[ArtifactRecord, ...]]]
    duplicates: tuple[TraceDiagnostic, ...] = ()

    def of_kind(self, kind: ArtifactKind) -> tuple[ArtifactRecord, ...]:
        """Return records of one kind in id order."""
        return tuple(record for record in self.records if record.kind == kind)

    def counts(self) -> TraceCounts:
        """Summarize record counts for reporting.

        Returns:
            Per-kind counts and the number of distinct issues.
        """
        return TraceCounts(
            specs=len(self.of_kind(ArtifactKind.SPEC)),
            plans=len(self.of_kind(ArtifactKind.PLAN)),
            tasks=len(self.of_kind(ArtifactKind.TASK)),
            issues=len(self.by_issue),
        )


def _duplicate_diagnostics(claims: Iterable[IdClaim]) -> tuple[TraceDiagnostic, ...]:
    """Report ids claimed by more than one document.

    Args:
        claims: Every id declared across all collections.

    Returns:
        One diagnostic per duplicated id, naming every source path.
    """
    by_id: dict[str, list[IdClaim]] = defaultdict(list)
    for claim in claims:
        by_id[claim.id].append(claim)

    diagnostics: list[TraceDiagnostic] = []
    for artifact_id in sorted(by_id):
        owners = sorted(by_id[artifact_id], key=lambda claim: str(claim.path))
        if len(owners) < 2:
            continue
        locations = "; ".join(
            f"{claim.kind.collection}:{claim.path}" for claim in owners
        )
        diagnostics.append(
            TraceDiagnostic(
                category=DiagnosticCategory.GRAPH,
                code="duplicate_id",
                message=f"Duplicate id {artifact_id} declared by: {locations}",
                artifact_id=artifact_id,
            ),
        )
    return tuple(diagnostics)


def build_trace_graph(
    records: Iterable[ArtifactRecord], claims: Iterable[IdClaim] = ()
) -> TraceGraph:
    """Assemble normalized records into id, parent and issue indices.

    Duplicates are detected over ``claims`` rather than ``records`` so that a
    collision involving a document that failed normalization is still
    reported. When no claims are given they are derived from the records.
    A duplicated id keeps the first record (by path) in ``by_id``.

    Args:
        records: Successfully normalized records.
        claims: Id claims from every document that declared an id.

    Returns:
        Graph indices plus duplicate-id diagnostics.
    """
    ordered = tuple(
        sorted(records, key=lambda record: (record.id, str(record.source_path)))
    )
    claim_list = list(claims) or [
        IdClaim(id=record.id, kind=record.kind, path=record.source_path)
        for record in ordered
    ]

    by_id: dict[str, ArtifactRecord] = {}
    children: dict[str, list[ArtifactRecord]] = defaultdict(list)
    by_issue: dict[int, dict[ArtifactKind, list[ArtifactRecord]]] = defaultdict(
        lambda: defaultdict(list)
    )
    for record in ordered:
        by_id.setdefault(record.id, record)
        if record.parent_id:
            children[record.parent_id].append(record)
        by_issue[record.issue][record.kind].append(record)

    return TraceGraph(
        records=ordered,
        by_id=by_id,
        children_by_parent={
            parent: tuple(kids) for parent, kids in sorted(children.items())
        },
        by_issue={
            issue: {kind: tuple(group) for kind, group in sorted(kinds.items())}
            for issue, kinds in sorted(by_issue.items())
        },
        duplicates=_duplicate_diagnostics(claim_list),
    )
