from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

DEFAULT_REF = "main"


class ReferenceScheme(StrEnum):
    HTTP = "http"
    GIT_SHORTHAND = "git-shorthand"
    GIT_EXPLICIT = "git-explicit"


class RemoteReference(BaseModel):
    """Parsed form of a user-supplied remote reference string."""

    model_config = ConfigDict(frozen=True)

    raw: str
    scheme: ReferenceScheme
    url: str | None = None  # Direct URL, http scheme only
    candidate_repo_urls: tuple[str, ...] = ()  # Tried in order, git schemes only
    file_path: str = ""  # Path inside the repository
    ref: str | None = None  # Branch or tag, git schemes only
    owner: str | None = None  # Shorthand form only
    repo: str | None = None  # Shorthand form only

    @property
    def is_git(self) -> bool:
        return self.scheme is not ReferenceScheme.HTTP
