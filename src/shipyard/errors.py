from __future__ import annotations

from enum import StrEnum

SUPPORTED_REFERENCE_FORMS: tuple[str, ...] = (
    "HTTP/HTTPS: https://example.com/config.yaml",
    "GitHub: github:owner/repo/path/to/config.yaml[@ref]",
    "Git (HTTPS): git+https://github.com/owner/repo.git/path/to/config.yaml[@ref]",
    "Git (SSH): git+git@github.com:owner/repo.git/path/to/config.yaml[@ref]",
)


class ErrorCode(StrEnum):
    INVALID_REFERENCE = "INVALID_REFERENCE"
    HTTP_STATUS = "HTTP_STATUS"
    NETWORK_ERROR = "NETWORK_ERROR"
    GIT_CLONE_FAILED = "GIT_CLONE_FAILED"
    GIT_REF_NOT_FOUND = "GIT_REF_NOT_FOUND"
    GIT_FILE_NOT_FOUND = "GIT_FILE_NOT_FOUND"
    FETCH_FAILED = "FETCH_FAILED"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"


class ShipyardError(Exception):
    """Base class for every expected failure of the resolution engine.

    Caught by cli.py and rendered as a message plus suggestion. Business
    logic lets these propagate; only the resolver inspects transport errors
    to decide whether another candidate URL should be tried.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str = "",
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class ClassificationError(ShipyardError):
    """The reference string does not match any supported form."""

    def __init__(self, message: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_REFERENCE,
            message=message,
            suggestion="Supported formats:\n  - " + "\n  - ".join(SUPPORTED_REFERENCE_FORMS),
            recoverable=False,
        )


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------


class TransportError(ShipyardError):
    """A single fetch attempt against one endpoint failed."""


class HttpStatusError(TransportError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(
            code=ErrorCode.HTTP_STATUS,
            message=f"failed to fetch {url}: HTTP {status_code}",
            suggestion=(
                "Check that the URL is correct and publicly reachable."
                if status_code == 404
                else "The remote server may be temporarily unavailable."
            ),
            recoverable=status_code >= 500,
        )
        self.url = url
        self.status_code = status_code


class HttpNetworkError(TransportError):
    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(
            code=ErrorCode.NETWORK_ERROR,
            message=f"network error fetching {url}: {cause}",
            suggestion="Check your network connection and try again with --fresh.",
            recoverable=True,
        )
        self.url = url


class GitError(TransportError):
    """Base for the git transport failure stages."""

    def __init__(
        self,
        code: ErrorCode,
        repo_url: str,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(code, message, suggestion, recoverable)
        self.repo_url = repo_url


class GitCloneError(GitError):
    def __init__(self, repo_url: str, detail: str) -> None:
        super().__init__(
            ErrorCode.GIT_CLONE_FAILED,
            repo_url,
            f"failed to clone repository {repo_url}: {detail}",
            "Check repository access (SSH agent, credential helper or token).",
            recoverable=True,
        )


class GitRefNotFoundError(GitError):
    def __init__(self, repo_url: str, ref: str) -> None:
        super().__init__(
            ErrorCode.GIT_REF_NOT_FOUND,
            repo_url,
            f"ref {ref!r} not found in repository {repo_url}",
            "Check the branch or tag after '@' in the reference.",
        )
        self.ref = ref


class GitFileNotFoundError(GitError):
    def __init__(self, repo_url: str, file_path: str, ref: str) -> None:
        super().__init__(
            ErrorCode.GIT_FILE_NOT_FOUND,
            repo_url,
            f"failed to find file {file_path} in repository {repo_url} at {ref}",
            "Check the file path inside the repository.",
        )
        self.file_path = file_path
        self.ref = ref


class FetchError(TransportError):
    """Every candidate endpoint for a reference failed.

    The message names the last candidate's error; ``attempts`` keeps every
    ``(url, error)`` pair for diagnostics.
    """

    def __init__(self, reference: str, attempts: list[tuple[str, TransportError]]) -> None:
        last = attempts[-1][1]
        super().__init__(
            code=ErrorCode.FETCH_FAILED,
            message=(
                f"failed to fetch {reference} from any repository URL, last error: {last.message}"
            ),
            suggestion=last.suggestion,
            recoverable=last.recoverable,
        )
        self.reference = reference
        self.attempts = attempts
        self.last_error = last


# ---------------------------------------------------------------------------
# Content errors
# ---------------------------------------------------------------------------


class ParseError(ShipyardError):
    def __init__(self, source: str, fmt: str, detail: str) -> None:
        super().__init__(
            code=ErrorCode.PARSE_ERROR,
            message=f"failed to parse {fmt} content from {source}: {detail}",
            suggestion=f"Make sure the document is valid {fmt.upper()}.",
        )
        self.source = source
        self.format = fmt


class ConfigValidationError(ShipyardError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=f"{field}: {message}",
            suggestion="Fix the configuration document and try again.",
        )
        self.field = field


class ConfigNotFoundError(ShipyardError):
    def __init__(self, path: str) -> None:
        super().__init__(
            code=ErrorCode.CONFIG_NOT_FOUND,
            message=f"config file does not exist: {path}",
            suggestion="Run the command from the project root or pass --config.",
        )
        self.path = path
