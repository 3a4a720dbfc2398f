"""Unit tests for the standalone traceability CI script."""

from __future__ import annotations

import importlib.util
from collections.abc import Callable
from pathlib import Path
from types import ModuleType

import pytest

_SCRIPT = Path(__file__).resolve().parents[3] / "scripts" / "validate_traceability.py"


def _load_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("validate_traceability", _SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.mark.unit
def test_script_reports_counts_and_errors(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    repo_root: Path,
    write_artifact: Callable[..., Path],
) -> None:
    """The script prints counts, every error, and returns 1 on failure."""
    # Arrange - a task whose plan does not exist
    write_artifact("specs", "spec-12.md", artifact_id="SPEC-12", issue="12")
    write_artifact(
        "tasks", "task-12.md", artifact_id="TASK-12", issue="12", parent_id="PLAN-12"
    )
    monkeypatch.setattr(
        "sys.argv", ["validate_traceability", "--repo-root", str(repo_root)]
    )

    # Act - run main
    exit_code = _load_script().main()

    # Assert - counts line and single error
    out = capsys.readouterr().out
    assert exit_code == 1
    assert "specs=1 plans=0 tasks=1 issues=1" in out
    assert "traceability validation failed:" in out
    assert out.count("\n- ") == 1


@pytest.mark.unit
def test_script_passes_on_empty_repository(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    repo_root: Path,
) -> None:
    """A repository without collections passes."""
    monkeypatch.setattr(
        "sys.argv", ["validate_traceability", "--repo-root", str(repo_root)]
    )

    exit_code = _load_script().main()

    assert exit_code == 0
    assert "traceability validation passed." in capsys.readouterr().out
