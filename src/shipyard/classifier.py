"""Remote reference classification.

Pure string handling. Turns a user-supplied reference into a RemoteReference
with an ordered list of concrete endpoints. No I/O happens here; whether a
ref or file actually exists is discovered later by the transports.

Supported forms:
  https://host/path/to/config.yaml
  github:owner/repo/path/to/config.yaml[@ref]
  git+https://host/owner/repo.git/path/to/config.yaml[@ref]
  git+ssh://git@host/owner/repo.git/path/to/config.yaml[@ref]
  git+git@host:owner/repo.git/path/to/config.yaml[@ref]
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from urllib.parse import urljoin

from shipyard.errors import ClassificationError
from shipyard.models.reference import DEFAULT_REF, ReferenceScheme, RemoteReference

_HTTP_PREFIXES = ("http://", "https://")
_GITHUB_PREFIX = "github:"
_GIT_PREFIX = "git+"
_GITHUB_HOST = "github.com"


def is_remote_reference(raw: str) -> bool:
    """Return True if *raw* looks like a remote reference rather than a local path."""
    return raw.startswith((*_HTTP_PREFIXES, _GITHUB_PREFIX, _GIT_PREFIX))


def classify(raw: str) -> RemoteReference:
    """Parse *raw* into a RemoteReference.

    Raises ClassificationError for empty input, unknown prefixes, and
    malformed shorthand or git references.
    """
    if not raw or not raw.strip():
        raise ClassificationError("remote reference cannot be empty")

    if raw.startswith(_HTTP_PREFIXES):
        return RemoteReference(raw=raw, scheme=ReferenceScheme.HTTP, url=raw)
    if raw.startswith(_GITHUB_PREFIX):
        return _classify_github(raw)
    if raw.startswith(_GIT_PREFIX):
        return _classify_git(raw)

    raise ClassificationError(f"unsupported remote reference format: {raw}")


def _split_ref(raw: str, value: str) -> tuple[str, str]:
    """Split an optional trailing ``@ref`` off *value* (last ``@`` wins)."""
    if "@" not in value:
        return value, DEFAULT_REF
    head, _, ref = value.rpartition("@")
    if not ref:
        raise ClassificationError(f"empty ref after '@' in reference: {raw}")
    return head, ref


def _classify_github(raw: str) -> RemoteReference:
    body, ref = _split_ref(raw, raw.removeprefix(_GITHUB_PREFIX))

    segments = body.split("/")
    file_path = "/".join(segments[2:])
    if len(segments) < 3 or not segments[0] or not segments[1] or not file_path.strip("/"):
        raise ClassificationError(
            f"invalid GitHub reference {raw!r}, "
            "expected github:owner/repo/path/to/file[@ref]"
        )

    owner, repo = segments[0], segments[1]
    return RemoteReference(
        raw=raw,
        scheme=ReferenceScheme.GIT_SHORTHAND,
        # Tried in this order
        candidate_repo_urls=(
            f"git@{_GITHUB_HOST}:{owner}/{repo}.git",
            f"https://{_GITHUB_HOST}/{owner}/{repo}.git",
        ),
        file_path=file_path,
        ref=ref,
        owner=owner,
        repo=repo,
    )


def _classify_git(raw: str) -> RemoteReference:
    body = raw.removeprefix(_GIT_PREFIX)

    if body.startswith("git@"):
        # scp-like SSH: git@host:owner/repo.git/path/to/file
        repo_part, sep, rest = body.partition(".git/")
        if not sep:
            raise ClassificationError(
                f"invalid SSH git reference {raw!r}, "
                "expected git+git@host:owner/repo.git/path/to/file[@ref]"
            )
        repo_url = repo_part + ".git"
    else:
        repo_url, rest = _split_url_repo(raw, body)

    file_path, ref = _split_ref(raw, rest)
    if not file_path.strip("/"):
        raise ClassificationError(f"missing file path after the repository in: {raw}")

    return RemoteReference(
        raw=raw,
        scheme=ReferenceScheme.GIT_EXPLICIT,
        candidate_repo_urls=(repo_url,),
        file_path=file_path,
        ref=ref,
    )


def _split_url_repo(raw: str, body: str) -> tuple[str, str]:
    """Split ``scheme://host/owner/repo.git/path`` at the first ``.git`` segment."""
    parts = body.split("/")
    if "://" not in body or len(parts) < 4:
        raise ClassificationError(f"invalid git reference format: {raw}")

    # parts[0] is "scheme:", parts[1] is empty, parts[2] is the host
    for i in range(3, len(parts)):
        if parts[i].endswith(".git"):
            return "/".join(parts[: i + 1]), "/".join(parts[i + 1 :])

    raise ClassificationError(f"could not parse repository URL from: {raw}")


# ---------------------------------------------------------------------------
# Relative references
# ---------------------------------------------------------------------------


def resolve_relative_reference(path: str, base: str) -> str:
    """Resolve *path* (e.g. a changelog template) relative to the config at *base*.

    Remote references, absolute paths and bare names (builtin template names
    such as ``keepachangelog``) are returned unchanged.
    """
    if is_remote_reference(path):
        return path
    if Path(path).is_absolute() or "/" not in path:
        return path

    if not is_remote_reference(base):
        return str(Path(base).parent / path)

    if base.startswith(_HTTP_PREFIXES):
        return urljoin(base, path)

    reference = classify(base)
    joined = posixpath.normpath(posixpath.join(posixpath.dirname(reference.file_path), path))
    ref_suffix = f"@{reference.ref}" if base.endswith(f"@{reference.ref}") else ""

    if reference.scheme is ReferenceScheme.GIT_SHORTHAND:
        return f"{_GITHUB_PREFIX}{reference.owner}/{reference.repo}/{joined}{ref_suffix}"
    return f"{_GIT_PREFIX}{reference.candidate_repo_urls[0]}/{joined}{ref_suffix}"
