"""Config inheritance: overlay a local document on its ``extends`` base.

The merge is shallow. Every top-level key present locally replaces the base
value wholesale; nested mappings and lists (change types, packages) are never
combined. Remote bases must be abstract: no packages and no ``extends`` of
their own. A local base file is overlaid as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from shipyard.models.config import ResolvedConfig
from shipyard.validation import to_project_config, validate_base

if TYPE_CHECKING:
    from shipyard.models.config import ProjectConfig
    from shipyard.resolver import Resolver

log = structlog.get_logger()


def overlay(base: dict[str, Any], local: dict[str, Any]) -> dict[str, Any]:
    """Return *base* with every top-level key of *local* replacing it."""
    merged = dict(base)
    merged.update(local)
    return merged


def merge_documents(base: dict[str, Any], local: dict[str, Any], base_source: str) -> ProjectConfig:
    """Overlay *local* on *base* and build the typed config."""
    overridden = sorted(key for key in local if key in base)
    log.debug("config_merged", base=base_source, overridden_keys=overridden)
    return to_project_config(overlay(base, local))


def merge_with_base(
    local: ResolvedConfig | dict[str, Any],
    extends_ref: str,
    resolver: Resolver,
    *,
    force_fresh: bool = False,
) -> ProjectConfig:
    """Resolve *extends_ref* and overlay *local* on it.

    Raises whatever the resolver raises, plus ConfigValidationError when the
    remote document is not a valid base.
    """
    local_document = local.document if isinstance(local, ResolvedConfig) else local
    remote = resolver.resolve(extends_ref, force_fresh=force_fresh)
    validate_base(remote.document)
    return merge_documents(remote.document, local_document, extends_ref)
