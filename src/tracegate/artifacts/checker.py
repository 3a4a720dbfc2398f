"""Invariant checks over a built traceability graph."""

from __future__ import annotations

from collections.abc import Iterable

from tracegate.artifacts.graph import TraceGraph
from tracegate.artifacts.types import (
    ArtifactKind,
    CheckResult,
    DiagnosticCategory,
    TraceDiagnostic,
)


def _graph_error(
    code: str, message: str, record_id: str | None = None
) -> TraceDiagnostic:
    return TraceDiagnostic(
        category=DiagnosticCategory.GRAPH,
        code=code,
        message=message,
        artifact_id=record_id,
    )


def _check_parents(graph: TraceGraph) -> list[TraceDiagnostic]:
    """Check that every plan/task parent exists and has the right kind.

    Args:
        graph: Built traceability graph.

    Returns:
        Missing-parent and wrong-kind-parent diagnostics.
    """
    diagnostics: list[TraceDiagnostic] = []
    for record in graph.records:
        expected = record.kind.parent_kind
        if expected is None:
            continue
        label = f"{record.kind.value.capitalize()} {record.id}"
        parent = graph.by_id.get(record.parent_id)
        if parent is None:
            diagnostics.append(
                _graph_error(
                    "parent_missing",
                    f"{label} references non-existent {expected.value}: "
                    f"{record.parent_id} ({record.source_path})",
                    record.id,
                )
            )
        elif parent.kind != expected:
            diagnostics.append(
                _graph_error(
                    "parent_wrong_kind",
                    f"{label} parent {parent.id} is a {parent.kind.value}, "
                    f"expected a {expected.value} ({record.source_path})",
                    record.id,
                )
            )
    return diagnostics


def _check_cycles(graph: TraceGraph) -> list[TraceDiagnostic]:
    """Walk every ancestor chain once and report each cycle found.

    Kind and prefix rules make cycles impossible for well-formed input, but a
    chain of wrong-kind parents can still loop, so each walk keeps a visited
    set and stops at the first repeat.

    Args:
        graph: Built traceability graph.

    Returns:
        One diagnostic per distinct cycle.
    """
    seen_cycles: set[frozenset[str]] = set()
    settled: set[str] = set()
    diagnostics: list[TraceDiagnostic] = []
    for record in graph.records:
        path: list[str] = []
        position: dict[str, int] = {}
        current: str | None = record.id
        while current is not None and current not in settled:
            if current in position:
                members = path[position[current] :]
                key = frozenset(members)
                if key not in seen_cycles:
                    seen_cycles.add(key)
                    start = min(members)
                    pivot = members.index(start)
                    ordered = [*members[pivot:], *members[:pivot], start]
                    diagnostics.append(
                        _graph_error(
                            "parent_cycle",
                            f"Parent cycle detected: {' -> '.join(ordered)}",
                            start,
                        )
                    )
                break
            position[current] = len(path)
            path.append(current)
            node = graph.by_id.get(current)
            current = node.parent_id if node is not None and node.parent_id else None
        settled.update(path)
    return diagnostics


def _check_issues(
    graph: TraceGraph,
    *,
    allow_multiple_specs_per_issue: bool,
    unresolved: frozenset[str] = frozenset(),
) -> list[TraceDiagnostic]:
    """Check that every issue with plans/tasks is governed by a spec.

    An orphan issue whose plans and tasks all already failed parent
    resolution is not reported again; the parent error names the missing
    spec.

    Args:
        graph: Built traceability graph.
        allow_multiple_specs_per_issue: When false, more than one spec per
            issue is reported as well.
        unresolved: Ids of records that already carry a parent error.

    Returns:
        Orphan-issue (and optionally multiple-spec) diagnostics.
    """
    diagnostics: list[TraceDiagnostic] = []
    for issue, kinds in graph.by_issue.items():
        specs = kinds.get(ArtifactKind.SPEC, ())
        work = [
            *kinds.get(ArtifactKind.PLAN, ()),
            *kinds.get(ArtifactKind.TASK, ()),
        ]
        if work and not specs and not all(r.id in unresolved for r in work):
            work_ids = ", ".join(record.id for record in work)
            diagnostics.append(
                _graph_error(
                    "orphan_issue",
                    f"Issue #{issue} has plans/tasks but no spec: {work_ids}",
                )
            )
        if len(specs) > 1 and not allow_multiple_specs_per_issue:
            spec_ids = ", ".join(record.id for record in specs)
            diagnostics.append(
                _graph_error(
                    "multiple_specs",
                    f"Issue #{issue} has multiple specs: {spec_ids}",
                )
            )
    return diagnostics


def dedupe_diagnostics(
    diagnostics: Iterable[TraceDiagnostic],
) -> tuple[TraceDiagnostic, ...]:
    """Drop repeated diagnostics while keeping first-seen order."""
    seen: set[str] = set()
    unique: list[TraceDiagnostic] = []
    for diag in diagnostics:
        line = diag.render()
        if line in seen:
            continue
        seen.add(line)
        unique.append(diag)
    return tuple(unique)


def check_trace_graph(
    graph: TraceGraph, *, allow_multiple_specs_per_issue: bool = True
) -> CheckResult:
    """Evaluate every graph invariant without stopping at the first failure.

    Args:
        graph: Built traceability graph.
        allow_multiple_specs_per_issue: Whether an issue may carry several
            specs (for example a superseding revision).

    Returns:
        Deduplicated diagnostics; the result is valid when there are none.
    """
    parent_diagnostics = _check_parents(graph)
    unresolved = frozenset(
        diag.artifact_id
        for diag in parent_diagnostics
        if diag.artifact_id is not None
    )
    diagnostics = [
        *graph.duplicates,
        *parent_diagnostics,
        *_check_cycles(graph),
        *_check_issues(
            graph,
            allow_multiple_specs_per_issue=allow_multiple_specs_per_issue,
            unresolved=unresolved,
        ),
    ]
    return CheckResult(diagnostics=dedupe_diagnostics(diagnostics))
