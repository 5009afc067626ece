"""Repository file descriptors, categories and revision handles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Category(StrEnum):
    """Artifact categories, in the order they appear in the asset document."""

    RULES = "rules"
    DATABASES = "databases"
    PAGES = "pages"
    EMAIL_TEMPLATES = "emailTemplates"
    EMAIL_PROVIDER = "emailProvider"
    CLIENTS = "clients"
    CLIENT_GRANTS = "clientGrants"
    CONNECTIONS = "connections"
    RESOURCE_SERVERS = "resourceServers"
    RULES_CONFIGS = "rulesConfigs"


CONFIGURABLE_CATEGORIES: tuple[Category, ...] = (
    Category.CLIENTS,
    Category.CLIENT_GRANTS,
    Category.CONNECTIONS,
    Category.RESOURCE_SERVERS,
    Category.RULES_CONFIGS,
)

TEMPLATE_CATEGORIES: tuple[Category, ...] = (Category.PAGES, Category.EMAIL_TEMPLATES)


@dataclass(frozen=True)
class FileDescriptor:
    """A single file at a specific revision.

    ``content_id`` is opaque: a blob object id for git, the server path for
    tfvc.  ``size`` is only reported by some listing endpoints.
    """

    path: str
    content_id: str
    size: int | None = None

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class Classification:
    """Result of classifying a repository path."""

    category: Category
    relative_path: str
    database: str | None = None  # databases only
    name: str | None = None  # databases only: stage name or "settings"


@dataclass(frozen=True)
class ResolvedRevision:
    """A revision resolved to a concrete fetchable point.

    Git fills ``commit_id`` and ``tree_id``; tfvc fills ``version`` (``None``
    means the latest changeset).
    """

    requested: str
    commit_id: str | None = None
    tree_id: str | None = None
    version: int | None = None


@dataclass(frozen=True)
class FetchedFile:
    """Downloaded text content of a file."""

    path: str
    contents: str
