"""Tree-based backend for TFS / Azure DevOps git repositories.

A revision resolves to a root tree in two calls (branch → commit → tree),
the whole tree is listed with one recursive call and filtered client-side.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence

import httpx

from tfsassets.classifier import is_valid_file
from tfsassets.models.errors import BranchNotFoundError, DownloadError, RetrievalError
from tfsassets.models.files import FetchedFile, FileDescriptor, ResolvedRevision
from tfsassets.settings import Settings, normalize_prefix
from tfsassets.source.base import SourceBackend
from tfsassets.source.connection import ConnectionFactory
from tfsassets.source.registry import SourceRegistry

logger = logging.getLogger("tfsassets.source.git")

_COMMIT_ID = re.compile(r"^[0-9a-f]{40}$", re.IGNORECASE)
_BLOB_TYPES = ("blob", 3)


def _repositories_path(project: str) -> str:
    return f"{project}/_apis/git/repositories" if project else "_apis/git/repositories"


async def get_repository_id(connection: ConnectionFactory, name: str, project: str = "") -> str | None:
    """Return the id of the repository called *name*, or ``None``."""
    try:
        data = await connection.get_json(_repositories_path(project))
    except httpx.HTTPError as exc:
        raise RetrievalError(f"Cannot list repositories: {exc}") from exc
    for repository in data.get("value") or []:
        if repository.get("name") == name and repository.get("id"):
            return repository["id"]
    return None


@SourceRegistry.register
class GitSource(SourceBackend):
    """Git backend: one recursive tree listing per revision."""

    name = "git"

    def __init__(
        self,
        connection: ConnectionFactory,
        repository: str,
        *,
        project: str = "",
        root_prefix: str = "",
    ) -> None:
        self._connection = connection
        self._repository = repository
        self._base = f"{_repositories_path(project)}/{repository}"
        self._root_prefix = normalize_prefix(root_prefix)

    @classmethod
    def from_settings(cls, settings: Settings, connection: ConnectionFactory) -> GitSource:
        return cls(
            connection,
            settings.repository,
            project=settings.tfs_project,
            root_prefix=settings.base_dir,
        )

    @property
    def root_prefix(self) -> str:
        return self._root_prefix

    # -- revisions -----------------------------------------------------------

    async def _commit_id(self, revision: str) -> str:
        if _COMMIT_ID.match(revision):
            return revision
        try:
            data = await self._connection.get_json(
                f"{self._base}/stats/branches", {"name": revision}
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                logger.error("Branch '%s' not found", revision)
                raise BranchNotFoundError(revision) from exc
            raise RetrievalError(f"Cannot resolve branch '{revision}': {exc}", revision=revision) from exc
        except httpx.HTTPError as exc:
            raise RetrievalError(f"Cannot resolve branch '{revision}': {exc}", revision=revision) from exc

        commit_id = ((data or {}).get("commit") or {}).get("commitId")
        if not commit_id:
            logger.error("Branch '%s' not found", revision)
            raise BranchNotFoundError(revision)
        return commit_id

    async def resolve_revision(self, revision: str) -> ResolvedRevision:
        commit_id = await self._commit_id(revision)
        try:
            commit = await self._connection.get_json(f"{self._base}/commits/{commit_id}")
        except httpx.HTTPError as exc:
            raise RetrievalError(f"Cannot read commit '{commit_id}': {exc}", revision=revision) from exc
        tree_id = commit.get("treeId")
        if not tree_id:
            raise RetrievalError(f"Commit '{commit_id}' has no tree", revision=revision)
        return ResolvedRevision(requested=revision, commit_id=commit_id, tree_id=tree_id)

    # -- tree ----------------------------------------------------------------

    async def list_files(self, revision: ResolvedRevision) -> list[FileDescriptor]:
        try:
            data = await self._connection.get_json(
                f"{self._base}/trees/{revision.tree_id}", {"recursive": "true"}
            )
        except httpx.HTTPError as exc:
            raise RetrievalError(
                f"Cannot list tree '{revision.tree_id}': {exc}", revision=revision.requested
            ) from exc

        return [
            FileDescriptor(
                path=entry["relativePath"],
                content_id=entry["objectId"],
                size=entry.get("size"),
            )
            for entry in data.get("treeEntries") or []
            if entry.get("gitObjectType") in _BLOB_TYPES
            and is_valid_file(entry["relativePath"], self._root_prefix)
        ]

    # -- content -------------------------------------------------------------

    async def fetch(self, file: FileDescriptor, revision: ResolvedRevision) -> FetchedFile:
        try:
            contents = await self._connection.get_text(
                f"{self._base}/blobs/{file.content_id}",
                {"$format": "octetstream", "download": "true"},
            )
        except httpx.HTTPError as exc:
            logger.error("Error downloading '%s': %s", file.path, exc)
            raise DownloadError(file.path) from exc
        return FetchedFile(path=file.path, contents=contents)

    # -- change detection ----------------------------------------------------

    async def _changed_paths(self, commit_id: str) -> list[str]:
        try:
            data = await self._connection.get_json(f"{self._base}/commits/{commit_id}/changes")
        except httpx.HTTPError as exc:
            raise RetrievalError(
                f"Cannot list changes of commit '{commit_id}': {exc}", revision=commit_id
            ) from exc
        return [change["item"]["path"] for change in data.get("changes") or [] if change.get("item")]

    async def has_changes(self, revisions: Sequence[str]) -> bool:
        changed = await asyncio.gather(*(self._changed_paths(commit) for commit in revisions))
        paths = {path.lstrip("/") for paths in changed for path in paths}
        return any(is_valid_file(path, self._root_prefix) for path in paths)
