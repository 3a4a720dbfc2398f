"""Validate spec/plan/task traceability for CI gates."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from tracegate.artifacts.loader import TraceRequest, TraceRootsError, build_trace_report
from tracegate.config import TraceConfigError, default_config_file, load_trace_config


def _parse_args() -> argparse.Namespace:
    """Parse command-line options."""
    parser = argparse.ArgumentParser(
        description="Validate spec -> plan -> task traceability."
    )
    parser.add_argument(
        "--repo-root",
        type=Path,
        default=Path("."),
        help="Repository root path.",
    )
    parser.add_argument("--specs-dir", type=Path, help="Specs root override.")
    parser.add_argument("--plans-dir", type=Path, help="Plans root override.")
    parser.add_argument("--tasks-dir", type=Path, help="Tasks root override.")
    return parser.parse_args()


def main() -> int:
    """Run traceability validation and print deterministic diagnostics."""
    args = _parse_args()
    repo_root = args.repo_root.resolve()
    try:
        config = load_trace_config(default_config_file(repo_root))
        overrides = {
            name: value
            for name, value in (
                ("specs_dir", args.specs_dir),
                ("plans_dir", args.plans_dir),
                ("tasks_dir", args.tasks_dir),
            )
            if value is not None
        }
        request = TraceRequest.from_config(
            repo_root, config.model_copy(update=overrides)
        )
        report = build_trace_report(request)
    except (TraceConfigError, TraceRootsError) as exc:
        print(f"traceability validation aborted: {exc}")
        return 1

    counts = report.counts
    print(
        f"specs={counts.specs} plans={counts.plans} "
        f"tasks={counts.tasks} issues={counts.issues}"
    )
    if report.errors:
        print("traceability validation failed:")
        for error in report.errors:
            print(f"- {error}")
        return 1
    print("traceability validation passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
