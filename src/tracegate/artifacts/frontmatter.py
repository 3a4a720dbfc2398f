"""Header block (frontmatter) parsing for planning documents."""

from __future__ import annotations

from enum import StrEnum

import yaml
from pydantic import BaseModel, ConfigDict, Field

FRONTMATTER_DELIMITER = "---"

HeaderValue = str | tuple[str, ...]


class HeaderStatus(StrEnum):
    """Outcome of looking for a header block."""

    OK = "ok"
    MISSING = "missing"
    MALFORMED = "malformed"


class HeaderParse(BaseModel):
    """String-only view of a document header."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: HeaderStatus
    fields: dict[str, HeaderValue] = Field(default_factory=dict)
    structured_keys: tuple[str, ...] = ()
    error: str | None = None

    @classmethod
    def missing(cls) -> HeaderParse:
        """Construct the no-header outcome."""
        return cls(status=HeaderStatus.MISSING)

    @classmethod
    def malformed(cls, error: str) -> HeaderParse:
        """Construct a malformed-header outcome.

        Args:
            error: Human-readable reason.

        Returns:
            Malformed header outcome.
        """
        return cls(status=HeaderStatus.MALFORMED, error=error)


def _extract_header_text(raw: str) -> tuple[str | None, str | None]:
    """Split out the text between the leading delimiters.

    Args:
        raw: Entire document content.

    Returns:
        A tuple of optional header text and optional error string.
    """
    lines = raw.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return None, None

    for idx in range(1, len(lines)):
        if lines[idx].strip() == FRONTMATTER_DELIMITER:
            return "\n".join(lines[1:idx]), None
    return None, "Header start delimiter found, but closing delimiter is missing."


def _coerce_value(value: object) -> HeaderValue | None:
    """Keep a header value as text, or a flat list of text.

    Returns ``None`` for nested mappings or lists.
    """
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return tuple(item.strip() for item in value)
    return None


def parse_header(raw: str) -> HeaderParse:
    """Parse the leading header block of a document into strings.

    Values are loaded with PyYAML's ``BaseLoader`` so no implicit typing
    happens: quotes of either style are removed, surrounding whitespace is
    dropped, and numbers such as ``042`` stay text for the normalizer. Nested
    mappings or lists are left out of ``fields``; only their keys are kept so
    extra metadata never rejects a document.

    Args:
        raw: Entire document content.

    Returns:
        Parsed header, or an explicit missing/malformed outcome.
    """
    header_text, error = _extract_header_text(raw)
    if error is not None:
        return HeaderParse.malformed(error)
    if header_text is None:
        return HeaderParse.missing()

    try:
        loaded = yaml.load(header_text, Loader=yaml.BaseLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        return HeaderParse.malformed(f"Malformed header YAML: {exc}")
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        return HeaderParse.malformed("Header must be a key/value mapping.")

    fields: dict[str, HeaderValue] = {}
    structured: list[str] = []
    for key, value in loaded.items():
        name = str(key).strip()
        coerced = _coerce_value(value)
        if coerced is None:
            structured.append(name)
        else:
            fields[name] = coerced
    return HeaderParse(
        status=HeaderStatus.OK, fields=fields, structured_keys=tuple(structured)
    )
