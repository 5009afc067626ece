"""Bounded-concurrency downloads that populate grouped records."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence

from tfsassets.constants import DEFAULT_DOWNLOAD_CONCURRENCY
from tfsassets.models.files import FileDescriptor, ResolvedRevision
from tfsassets.models.records import (
    ArtifactRecord,
    ConfigurableRecord,
    DatabaseRecord,
    RuleRecord,
    TemplateRecord,
)
from tfsassets.source.base import ContentFetcher


def fill_record(record: ArtifactRecord, contents: Mapping[str, str]) -> None:
    """Copy downloaded text into *record* from a ``path → contents`` map."""

    def text(file: FileDescriptor | None) -> str | None:
        return contents[file.path] if file is not None else None

    if isinstance(record, RuleRecord):
        record.script = text(record.script_file)
        record.metadata = text(record.metadata_file)
    elif isinstance(record, DatabaseRecord):
        record.scripts = {stage: contents[f.path] for stage, f in record.script_files.items()}
        record.settings = text(record.settings_file)
    elif isinstance(record, TemplateRecord):
        record.html = text(record.html_file)
        record.metadata = text(record.metadata_file)
    elif isinstance(record, ConfigurableRecord):
        record.config = text(record.config_file)
        record.metadata = text(record.metadata_file)
    else:
        raise TypeError(f"Unsupported record type {type(record).__name__}")


class BatchFetcher:
    """Downloads one category's files with at most ``concurrency`` requests in flight.

    A failed download fails the whole batch: the original error propagates
    and no record of the batch is populated.
    """

    def __init__(
        self, fetcher: ContentFetcher, concurrency: int = DEFAULT_DOWNLOAD_CONCURRENCY
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self._fetcher = fetcher
        self.concurrency = concurrency

    async def fetch_batch(
        self, files: Sequence[FileDescriptor], revision: ResolvedRevision
    ) -> dict[str, str]:
        """Download *files*; return ``path → contents``."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def download(file: FileDescriptor) -> str:
            async with semaphore:
                fetched = await self._fetcher.fetch(file, revision)
            return fetched.contents

        results = await asyncio.gather(*(download(file) for file in files))
        return {file.path: contents for file, contents in zip(files, results, strict=True)}

    async def populate(
        self, records: Mapping[str, ArtifactRecord], revision: ResolvedRevision
    ) -> None:
        """Download every file referenced by *records* as one batch and fill them in."""
        files = [file for record in records.values() for file in record.files()]
        contents = await self.fetch_batch(files, revision)
        for record in records.values():
            fill_record(record, contents)
