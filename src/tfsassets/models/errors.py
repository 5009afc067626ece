"""Extraction error taxonomy."""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for every error raised while extracting assets."""


class RetrievalError(ExtractionError):
    """A tree, listing or revision lookup call failed."""

    def __init__(self, message: str, *, path: str | None = None, revision: str | None = None) -> None:
        self.path = path
        self.revision = revision
        super().__init__(message)


class BranchNotFoundError(RetrievalError):
    """A named branch could not be resolved to a commit."""

    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(f"Branch '{branch}' not found", revision=branch)


class DownloadError(ExtractionError):
    """A single file's content could not be downloaded."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Error downloading '{path}'")


class MalformedContentError(ExtractionError):
    """Stored text is not valid JSON (always recovered by the unifier)."""


class UnsupportedConfigurationError(ExtractionError):
    """A configuration value has no matching implementation."""

    def __init__(self, option: str, value: str, available: list[str]) -> None:
        self.option = option
        self.value = value
        self.available = available
        super().__init__(
            f"Unsupported {option} '{value}'. Available: {', '.join(available)}"
        )
