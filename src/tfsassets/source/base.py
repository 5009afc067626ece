"""Capability interfaces implemented by every source-control backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

from tfsassets.models.files import FetchedFile, FileDescriptor, ResolvedRevision

if TYPE_CHECKING:
    from tfsassets.settings import Settings
    from tfsassets.source.connection import ConnectionFactory


class TreeRetriever(ABC):
    """Lists the artifact files of a repository at a revision."""

    @property
    @abstractmethod
    def root_prefix(self) -> str:
        """Normalized prefix scoping the scanned subtree."""

    @abstractmethod
    async def resolve_revision(self, revision: str) -> ResolvedRevision:
        """Resolve a commit id, branch name or changeset number."""

    @abstractmethod
    async def list_files(self, revision: ResolvedRevision) -> list[FileDescriptor]:
        """Return every classified artifact file under the root prefix."""


class ContentFetcher(ABC):
    @abstractmethod
    async def fetch(self, file: FileDescriptor, revision: ResolvedRevision) -> FetchedFile:
        """Download one file's text.  Raises :class:`DownloadError` on failure."""


class ChangeDetector(ABC):
    @abstractmethod
    async def has_changes(self, revisions: Sequence[str]) -> bool:
        """Return True if any of the given commits/changesets touch an artifact file."""


class SourceBackend(TreeRetriever, ContentFetcher, ChangeDetector):
    """A complete backend: one per source-control flavour."""

    name: ClassVar[str]

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings, connection: ConnectionFactory) -> SourceBackend:
        """Build the backend from configuration and a shared connection."""
