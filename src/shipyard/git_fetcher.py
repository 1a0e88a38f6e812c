"""Git transport: read one file out of a remote repository.

Each fetch is a shallow (depth 1), single-branch, bare clone of the requested
ref into a throwaway temporary directory. Bare means no working tree is ever
checked out; the only thing read is the one blob the caller asked for, and
the clone is deleted before returning.

Authentication is never configured here. Whatever the environment already
provides (SSH agent, ~/.ssh keys, git credential helpers) is picked up by the
git executable that GitPython drives. Interactive prompts are disabled by
default so an unreachable SSH endpoint fails instead of hanging, letting the
resolver move on to the next candidate.
"""

from __future__ import annotations

import os
import tempfile
from typing import TYPE_CHECKING

import git
import structlog
from git import exc as git_exc
from git.objects import Blob

from shipyard.errors import GitCloneError, GitFileNotFoundError, GitRefNotFoundError

if TYPE_CHECKING:
    from shipyard.config import GitSettings

log = structlog.get_logger()

# Lowercased stderr fragments git prints when --branch names a missing ref
_REF_NOT_FOUND_MARKERS = (
    "not found in upstream",
    "could not find remote branch",
)


def _clean_stderr(error: git_exc.GitCommandError) -> str:
    """Extract git's own message from GitPython's decorated stderr."""
    stderr = (error.stderr or "").strip()
    stderr = stderr.removeprefix("stderr:").strip().strip("'").strip()
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    fatal = [line for line in lines if line.startswith("fatal:")]
    return (fatal or lines or [str(error)])[-1]


class GitFetcher:
    """Shallow-clone transport implementing GitFetcherProtocol."""

    def __init__(self, settings: GitSettings) -> None:
        self._settings = settings

    def _clone_env(self) -> dict[str, str] | None:
        if not self._settings.disable_prompts:
            return None
        env = {"GIT_TERMINAL_PROMPT": "0"}
        if "GIT_SSH_COMMAND" not in os.environ:
            env["GIT_SSH_COMMAND"] = "ssh -o BatchMode=yes"
        return env

    def fetch_file(self, repo_url: str, file_path: str, ref: str) -> bytes:
        """Return the content of *file_path* at *ref* in *repo_url*.

        Raises GitCloneError, GitRefNotFoundError or GitFileNotFoundError
        depending on which stage failed.
        """
        log.debug("git_clone_start", repo_url=repo_url, ref=ref, depth=self._settings.depth)

        with tempfile.TemporaryDirectory(prefix="shipyard-git-") as tmp_dir:
            try:
                repo = git.Repo.clone_from(
                    repo_url,
                    tmp_dir,
                    env=self._clone_env(),
                    bare=True,
                    depth=self._settings.depth,
                    single_branch=True,
                    branch=ref,
                )
            except git_exc.GitCommandError as exc:
                stderr = (exc.stderr or "").lower()
                if any(marker in stderr for marker in _REF_NOT_FOUND_MARKERS):
                    raise GitRefNotFoundError(repo_url, ref) from exc
                raise GitCloneError(repo_url, _clean_stderr(exc)) from exc
            except git_exc.GitError as exc:
                raise GitCloneError(repo_url, str(exc)) from exc

            try:
                content = self._read_blob(repo, repo_url, file_path, ref)
            finally:
                repo.close()

        log.debug(
            "git_fetch_complete",
            repo_url=repo_url,
            ref=ref,
            file_path=file_path,
            content_length=len(content),
        )
        return content

    @staticmethod
    def _read_blob(repo: git.Repo, repo_url: str, file_path: str, ref: str) -> bytes:
        # HEAD -> commit -> tree -> blob
        try:
            commit = repo.head.commit
        except ValueError as exc:
            raise GitRefNotFoundError(repo_url, ref) from exc

        try:
            obj = commit.tree / file_path.strip("/")
        except KeyError as exc:
            raise GitFileNotFoundError(repo_url, file_path, ref) from exc

        if not isinstance(obj, Blob):
            # Directories and submodules cannot be fetched as a document
            raise GitFileNotFoundError(repo_url, file_path, ref)

        return obj.data_stream.read()
