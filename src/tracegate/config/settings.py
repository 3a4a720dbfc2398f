"""Validator config models and loading helpers."""

from __future__ import annotations

import json
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

CONFIG_FILENAMES = (".tracegate.yaml", ".tracegate.yml", ".tracegate.json")
DEFAULT_REFERENCE_PATTERN = r"\b(?:SPEC|PLAN|TASK)-[0-9]+(?:-[A-Za-z0-9_]+)*\b"


class TraceConfig(BaseModel):
    """Root traceability validator configuration."""

    model_config = ConfigDict(extra="forbid")

    specs_dir: Path = Path("specs")
    plans_dir: Path = Path("plans")
    tasks_dir: Path = Path("tasks")
    document_suffix: str = ".md"
    excluded_names: tuple[str, ...] = ("README.md",)
    allow_multiple_specs_per_issue: bool = True
    reference_pattern: str = DEFAULT_REFERENCE_PATTERN

    @field_validator("document_suffix")
    @classmethod
    def _suffix_has_dot(cls, value: str) -> str:
        if not value.startswith("."):
            raise ValueError("document_suffix must start with '.'")
        return value

    @field_validator("reference_pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"reference_pattern is not a valid regex: {exc}") from exc
        return value

    def resolve_roots(self, repo_root: Path) -> tuple[Path, Path, Path]:
        """Resolve collection roots against the repository root.

        Args:
            repo_root: Repository root path.

        Returns:
            Specs, plans and tasks roots, in that order.
        """
        return (
            repo_root / self.specs_dir,
            repo_root / self.plans_dir,
            repo_root / self.tasks_dir,
        )


class TraceConfigError(RuntimeError):
    """Raised when validator config cannot be decoded or validated."""


def _decode_config_payload(path: Path) -> dict[str, object]:
    """Decode config payload from JSON or YAML.

    Args:
        path: Config file path.

    Returns:
        Parsed mapping payload.

    Raises:
        TraceConfigError: If decode fails or payload is not an object.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TraceConfigError(f"Unreadable tracegate config: {exc}") from exc
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise TraceConfigError(f"Invalid tracegate config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise TraceConfigError(f"Invalid tracegate config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise TraceConfigError(
            "Invalid tracegate config payload: root must be an object"
        )
    return payload


def default_config_file(repo_root: Path) -> Path:
    """Return the config path used for a repository root.

    Args:
        repo_root: Repository root path.

    Returns:
        First existing config file, else the default YAML location.
    """
    for name in CONFIG_FILENAMES:
        candidate = repo_root / name
        if candidate.exists():
            return candidate
    return repo_root / CONFIG_FILENAMES[0]


def load_trace_config(path: Path) -> TraceConfig:
    """Load validator config from disk, defaulting when missing.

    Args:
        path: Config file path.

    Returns:
        Parsed config payload, or defaults when file does not exist.

    Raises:
        TraceConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return TraceConfig()
    payload = _decode_config_payload(path)
    try:
        return TraceConfig.model_validate(payload)
    except ValidationError as exc:
        raise TraceConfigError(f"Invalid tracegate config payload: {exc}") from exc
