"""Command-line entry point: extract the asset document or check for changes."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from tfsassets import __version__
from tfsassets.models.errors import ExtractionError
from tfsassets.pipeline import ExtractionPipeline
from tfsassets.settings import Settings
from tfsassets.source import ConnectionFactory, SourceRegistry
from tfsassets.source.git import get_repository_id

logger = logging.getLogger("tfsassets.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tfs-assets",
        description="Extract tenant configuration assets from a TFS / Azure DevOps repository",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", help="Print the canonical asset document as JSON")
    extract.add_argument("--revision", help="Commit id, branch or changeset (default: TFS_BRANCH)")
    extract.add_argument("--repository", help="Git repository name, looked up to its id")
    extract.add_argument("--indent", type=int, default=2, help="JSON indentation")

    changes = sub.add_parser("has-changes", help="Report whether commits touch any artifact")
    changes.add_argument("revisions", nargs="+", help="Commit ids or changeset numbers")
    return parser


async def _extract(settings: Settings, args: argparse.Namespace, connection: ConnectionFactory) -> str:
    if args.repository:
        repository_id = await get_repository_id(connection, args.repository, settings.tfs_project)
        if repository_id is None:
            raise ExtractionError(f"Repository '{args.repository}' not found")
        settings = settings.model_copy(update={"tfs_repository": repository_id})

    backend = SourceRegistry.create(settings, connection)
    pipeline = ExtractionPipeline.from_backend(backend, settings)
    document = await pipeline.extract(args.revision or settings.tfs_branch)
    return json.dumps(document.to_assets(), indent=args.indent)


async def _has_changes(settings: Settings, args: argparse.Namespace, connection: ConnectionFactory) -> str:
    backend = SourceRegistry.create(settings, connection)
    return json.dumps(await backend.has_changes(args.revisions))


async def run(settings: Settings, args: argparse.Namespace, connection: ConnectionFactory | None = None) -> str:
    """Execute the parsed command and return its output."""
    if connection is None:
        connection = ConnectionFactory.from_settings(settings)
    async with connection:
        if args.command == "extract":
            return await _extract(settings, args, connection)
        return await _has_changes(settings, args, connection)


def main(argv: list[str] | None = None) -> None:
    """Run the CLI using settings from environment / .env file."""
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"Error: invalid configuration\n{exc}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(level=settings.log_level.upper())
    logger.info("TFS Assets v%s (%s backend)", __version__, settings.tfs_type)

    try:
        output = asyncio.run(run(settings, args))
    except ExtractionError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(output)


if __name__ == "__main__":
    main()
