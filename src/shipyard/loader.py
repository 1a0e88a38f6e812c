"""Configuration loading entry points used by the rest of the CLI.

- load_remote_config:   fetch a remote base config on its own (inspection).
- load_remote_template: fetch a remote changelog template as text.
- load_project_config:  read the local project config, follow ``extends``
                        (remote or local file), validate the result.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shipyard.classifier import is_remote_reference, resolve_relative_reference
from shipyard.errors import ConfigNotFoundError, ConfigValidationError
from shipyard.formats import detect, parse_document
from shipyard.inheritance import merge_documents, merge_with_base
from shipyard.models.config import ResolvedConfig
from shipyard.validation import to_project_config, validate_base, validate_project

if TYPE_CHECKING:
    from shipyard.models.config import ProjectConfig
    from shipyard.resolver import Resolver

log = structlog.get_logger()

DEFAULT_CONFIG_PATH = Path(".shipyard") / "config.yaml"


def load_remote_config(
    reference: str,
    resolver: Resolver,
    *,
    force_fresh: bool = False,
) -> ProjectConfig:
    """Fetch the config at *reference* and validate it as a base config."""
    resolved = resolver.resolve(reference, force_fresh=force_fresh)
    validate_base(resolved.document, require_type=True)
    return to_project_config(resolved.document)


def load_remote_template(
    reference: str,
    resolver: Resolver,
    *,
    force_fresh: bool = False,
) -> str:
    return resolver.fetch_template(reference, force_fresh=force_fresh)


def read_local_document(path: Path) -> ResolvedConfig:
    """Read and parse a local config file; the format comes from its extension."""
    if not path.is_file():
        raise ConfigNotFoundError(str(path))
    content = path.read_text(encoding="utf-8")
    fmt = detect(str(path), content)
    return ResolvedConfig(
        source=str(path),
        format=fmt,
        document=parse_document(content, fmt, source=str(path)),
    )


def load_project_config(
    resolver: Resolver,
    path: str | Path = DEFAULT_CONFIG_PATH,
    *,
    force_fresh: bool = False,
) -> ProjectConfig:
    """Load the project config at *path*, applying its ``extends`` base if any.

    A relative changelog template path is resolved against the document that
    declared it: the base when the changelog section is inherited, the local
    file otherwise.
    """
    config_path = Path(path)
    local = read_local_document(config_path)
    extends = local.document.get("extends")
    template_base = str(config_path)

    if extends is None or extends == "":
        config = to_project_config(local.document)
    elif not isinstance(extends, str):
        raise ConfigValidationError("extends", "must be a single reference string")
    elif is_remote_reference(extends):
        config = merge_with_base(local, extends, resolver, force_fresh=force_fresh)
        if "changelog" not in local.document:
            template_base = extends
    else:
        base_path = Path(extends)
        if not base_path.is_absolute():
            base_path = config_path.parent / base_path
        base = read_local_document(base_path)
        config = merge_documents(base.document, local.document, str(base_path))
        if "changelog" not in local.document:
            template_base = str(base_path)

    config.changelog.template = resolve_relative_reference(
        config.changelog.template, template_base
    )
    validate_project(config)
    log.debug("project_config_loaded", path=str(config_path), extends=extends)
    return config
