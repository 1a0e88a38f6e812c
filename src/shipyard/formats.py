"""Serialization format detection and parsing for fetched documents."""

from __future__ import annotations

import json
import tomllib
from typing import Any

import yaml

from shipyard.errors import ParseError
from shipyard.models.config import ConfigFormat

_EXTENSIONS: dict[str, ConfigFormat] = {
    ".yaml": ConfigFormat.YAML,
    ".yml": ConfigFormat.YAML,
    ".json": ConfigFormat.JSON,
    ".toml": ConfigFormat.TOML,
}


def _format_from_extension(hint: str) -> ConfigFormat | None:
    lowered = hint.lower()
    for ext, fmt in _EXTENSIONS.items():
        if lowered.endswith(ext):
            return fmt
    return None


def detect(source_hint: str, content: str) -> ConfigFormat:
    """Infer the format of *content* fetched from *source_hint*.

    Decision order:
      1. Extension of the hint. A trailing ``@ref`` (no ``/`` after the
         ``@``) is ignored, so ``github:o/r/base.toml@v2`` is TOML.
      2. Trimmed content starting with ``{`` is JSON.
      3. YAML.

    Never fails; malformed documents surface later as ParseError.
    """
    fmt = _format_from_extension(source_hint)
    if fmt is None and "@" in source_hint:
        head, _, tail = source_hint.rpartition("@")
        if "/" not in tail:
            fmt = _format_from_extension(head)
    if fmt is not None:
        return fmt

    if content.strip().startswith("{"):
        return ConfigFormat.JSON

    return ConfigFormat.YAML


def parse_document(content: str, fmt: ConfigFormat, source: str = "<string>") -> dict[str, Any]:
    """Parse *content* into a mapping. Raises ParseError on malformed input."""
    try:
        if fmt is ConfigFormat.JSON:
            data = json.loads(content)
        elif fmt is ConfigFormat.TOML:
            data = tomllib.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ParseError(source, fmt, str(exc)) from exc

    # An empty YAML document is an empty config, not an error
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(
            source, fmt, f"top-level document must be a mapping, got {type(data).__name__}"
        )
    return data
