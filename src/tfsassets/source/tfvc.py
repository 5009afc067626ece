"""Path-enumerated backend for TFS version control (TFVC).

TFVC has no recursive tree primitive, so every category directory is listed
one level deep, and ``database-connections`` takes one extra listing per
connection sub-folder.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from tfsassets.classifier import FLAT_DIRECTORIES, is_valid_file
from tfsassets.constants import DATABASE_CONNECTIONS_DIRECTORY
from tfsassets.models.errors import DownloadError, RetrievalError
from tfsassets.models.files import FetchedFile, FileDescriptor, ResolvedRevision
from tfsassets.settings import Settings, normalize_prefix
from tfsassets.source.base import SourceBackend
from tfsassets.source.connection import ConnectionFactory
from tfsassets.source.registry import SourceRegistry

logger = logging.getLogger("tfsassets.source.tfvc")

_ITEMS = "_apis/tfvc/items"


def _version_params(revision: ResolvedRevision) -> dict[str, Any]:
    if revision.version is None:
        return {}
    return {"version": str(revision.version)}


@SourceRegistry.register
class TfvcSource(SourceBackend):
    """TFVC backend: fan-out listing over the known category directories."""

    name = "tfvc"

    def __init__(self, connection: ConnectionFactory, *, root_prefix: str = "") -> None:
        self._connection = connection
        self._root_prefix = normalize_prefix(root_prefix)

    @classmethod
    def from_settings(cls, settings: Settings, connection: ConnectionFactory) -> TfvcSource:
        return cls(connection, root_prefix=settings.tfs_path)

    @property
    def root_prefix(self) -> str:
        return self._root_prefix

    def _scope(self, directory: str) -> str:
        return f"{self._root_prefix}{directory}"

    async def resolve_revision(self, revision: str) -> ResolvedRevision:
        """Changeset numbers pin a version; anything else reads the latest."""
        version = int(revision) if revision and revision.isdigit() else None
        return ResolvedRevision(requested=revision, version=version)

    # -- tree ----------------------------------------------------------------

    async def _list_items(self, scope_path: str, revision: ResolvedRevision) -> list[dict[str, Any]]:
        params = {"scopePath": scope_path, "recursionLevel": "OneLevel", **_version_params(revision)}
        try:
            data = await self._connection.get_json(_ITEMS, params)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                return []
            raise RetrievalError(
                f"Cannot list '{scope_path}': {exc}", path=scope_path, revision=revision.requested
            ) from exc
        except httpx.HTTPError as exc:
            raise RetrievalError(
                f"Cannot list '{scope_path}': {exc}", path=scope_path, revision=revision.requested
            ) from exc
        return (data or {}).get("value") or []

    def _files(self, items: list[dict[str, Any]]) -> list[FileDescriptor]:
        return [
            FileDescriptor(path=item["path"], content_id=item["path"], size=item.get("size"))
            for item in items
            if not item.get("isFolder")
            and item.get("size")
            and is_valid_file(item["path"], self._root_prefix)
        ]

    async def _list_directory(self, directory: str, revision: ResolvedRevision) -> list[FileDescriptor]:
        return self._files(await self._list_items(self._scope(directory), revision))

    async def _list_database_connections(self, revision: ResolvedRevision) -> list[FileDescriptor]:
        scope = self._scope(DATABASE_CONNECTIONS_DIRECTORY)
        subdirs = [
            item["path"]
            for item in await self._list_items(scope, revision)
            if item.get("isFolder") and item["path"].rstrip("/") != scope
        ]
        listings = await asyncio.gather(*(self._list_items(path, revision) for path in subdirs))
        return [file for items in listings for file in self._files(items)]

    async def list_files(self, revision: ResolvedRevision) -> list[FileDescriptor]:
        listings = await asyncio.gather(
            *(self._list_directory(directory, revision) for directory in FLAT_DIRECTORIES),
            self._list_database_connections(revision),
        )
        unique = {file.path: file for files in listings for file in files}
        return [unique[path] for path in sorted(unique)]

    # -- content -------------------------------------------------------------

    async def fetch(self, file: FileDescriptor, revision: ResolvedRevision) -> FetchedFile:
        params = {"path": file.content_id, "download": "true", **_version_params(revision)}
        try:
            contents = await self._connection.get_text(_ITEMS, params)
        except httpx.HTTPError as exc:
            logger.error("Error downloading '%s': %s", file.path, exc)
            raise DownloadError(file.path) from exc
        return FetchedFile(path=file.path, contents=contents)

    # -- change detection ----------------------------------------------------

    async def _changed_paths(self, changeset_id: str) -> list[str]:
        try:
            data = await self._connection.get_json(f"_apis/tfvc/changesets/{changeset_id}/changes")
        except httpx.HTTPError as exc:
            raise RetrievalError(
                f"Cannot list changes of changeset '{changeset_id}': {exc}", revision=changeset_id
            ) from exc
        return [change["item"]["path"] for change in data.get("value") or [] if change.get("item")]

    async def has_changes(self, revisions: Sequence[str]) -> bool:
        changed = await asyncio.gather(*(self._changed_paths(changeset) for changeset in revisions))
        paths = {path for paths in changed for path in paths}
        return any(is_valid_file(path, self._root_prefix) for path in paths)
