"""Orchestrates extraction: Revision → Tree → {Group → Fetch → Unify} → Document."""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import Any

from tfsassets.constants import DEFAULT_DOWNLOAD_CONCURRENCY
from tfsassets.fetcher import BatchFetcher
from tfsassets.grouper import group
from tfsassets.models.assets import CanonicalAssetDocument
from tfsassets.models.files import Category, FileDescriptor, ResolvedRevision
from tfsassets.settings import Settings
from tfsassets.source.base import ContentFetcher, SourceBackend, TreeRetriever
from tfsassets.unify import unify

logger = logging.getLogger("tfsassets.pipeline")


class ExtractionState(StrEnum):
    IDLE = "idle"
    RESOLVING_REVISION = "resolving_revision"
    LISTING_TREE = "listing_tree"
    EXTRACTING = "extracting"
    ASSEMBLED = "assembled"
    FAILED = "failed"


class CategoryState(StrEnum):
    GROUPING = "grouping"
    FETCHING = "fetching"
    UNIFYING = "unifying"
    DONE = "done"


_IN_PROGRESS = frozenset(
    {
        ExtractionState.RESOLVING_REVISION,
        ExtractionState.LISTING_TREE,
        ExtractionState.EXTRACTING,
    }
)


class ExtractionPipeline:
    """Extracts a :class:`CanonicalAssetDocument` from a repository revision.

    Categories are extracted concurrently; the first category failure rejects
    the whole extraction with the original exception and no partial document.
    Siblings still in flight are left to finish and their results discarded.

    One pipeline runs one extraction at a time: ``state``, ``category_states``,
    ``error`` and ``revision`` describe the current (or last) run, and starting
    a second run while one is in progress raises :class:`RuntimeError`.  Use
    one pipeline per concurrent extraction.
    """

    def __init__(
        self,
        retriever: TreeRetriever,
        fetcher: ContentFetcher,
        *,
        concurrency: int = DEFAULT_DOWNLOAD_CONCURRENCY,
    ) -> None:
        self._retriever = retriever
        self._batch = BatchFetcher(fetcher, concurrency)
        self.state = ExtractionState.IDLE
        self.category_states: dict[Category, CategoryState] = {}
        self.error: BaseException | None = None
        self.revision: ResolvedRevision | None = None

    @classmethod
    def from_backend(cls, backend: SourceBackend, settings: Settings) -> ExtractionPipeline:
        return cls(backend, backend, concurrency=settings.download_concurrency)

    def _transition(self, state: ExtractionState) -> None:
        logger.debug("Extraction %s -> %s", self.state, state)
        self.state = state

    async def _extract_category(
        self,
        category: Category,
        files: list[FileDescriptor],
        revision: ResolvedRevision,
    ) -> list[Any]:
        self.category_states[category] = CategoryState.GROUPING
        records = group(files, category, self._retriever.root_prefix)

        self.category_states[category] = CategoryState.FETCHING
        await self._batch.populate(records, revision)

        self.category_states[category] = CategoryState.UNIFYING
        unified = unify(records.values(), category)

        self.category_states[category] = CategoryState.DONE
        return unified

    @staticmethod
    def _assemble(results: list[list[Any]]) -> CanonicalAssetDocument:
        assets: dict[str, Any] = dict(zip(Category, results, strict=True))
        providers = assets.pop(Category.EMAIL_PROVIDER)
        assets[Category.EMAIL_PROVIDER] = providers[0] if providers else None
        return CanonicalAssetDocument.model_validate(
            {str(category): value for category, value in assets.items()}
        )

    async def extract(self, revision: str) -> CanonicalAssetDocument:
        """Run one extraction for *revision* (commit id, branch or changeset)."""
        if self.state in _IN_PROGRESS:
            raise RuntimeError(f"Extraction already in progress ({self.state})")
        self.error = None
        self.revision = None
        self.category_states = {}
        try:
            self._transition(ExtractionState.RESOLVING_REVISION)
            resolved = await self._retriever.resolve_revision(revision)
            self.revision = resolved
            logger.debug("Revision '%s' resolved to %s", revision, resolved)

            self._transition(ExtractionState.LISTING_TREE)
            files = await self._retriever.list_files(resolved)
            logger.debug("Files in tree: %d", len(files))

            self._transition(ExtractionState.EXTRACTING)
            results = await asyncio.gather(
                *(self._extract_category(category, files, resolved) for category in Category)
            )
            document = self._assemble(results)
        except (Exception, asyncio.CancelledError) as exc:
            self.error = exc
            self._transition(ExtractionState.FAILED)
            raise

        self._transition(ExtractionState.ASSEMBLED)
        return document
