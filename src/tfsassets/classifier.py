"""Path classification — decide which repository files are configuration artifacts.

Every backend feeds repository paths through :func:`classify` together with
the configured root prefix, so the same file is classified identically no
matter how it was enumerated.
"""

from __future__ import annotations

import posixpath
import re

from tfsassets.constants import (
    CLIENTS_DIRECTORY,
    CLIENTS_GRANTS_DIRECTORY,
    CONNECTIONS_DIRECTORY,
    DATABASE_CONNECTIONS_DIRECTORY,
    DATABASE_SCRIPTS,
    DATABASE_SETTINGS_NAME,
    EMAIL_PROVIDER_FILE,
    EMAIL_TEMPLATES_DIRECTORY,
    EMAIL_TEMPLATES_NAMES,
    PAGE_NAMES,
    PAGES_DIRECTORY,
    RESOURCE_SERVERS_DIRECTORY,
    RULES_CONFIGS_DIRECTORY,
    RULES_DIRECTORY,
)
from tfsassets.models.files import Category, Classification
from tfsassets.settings import normalize_prefix

_SCRIPT_OR_JSON = re.compile(r"\.(js|json)$", re.IGNORECASE)

CONFIGURABLE_DIRECTORIES: dict[Category, str] = {
    Category.CLIENTS: CLIENTS_DIRECTORY,
    Category.CLIENT_GRANTS: CLIENTS_GRANTS_DIRECTORY,
    Category.CONNECTIONS: CONNECTIONS_DIRECTORY,
    Category.RESOURCE_SERVERS: RESOURCE_SERVERS_DIRECTORY,
    Category.RULES_CONFIGS: RULES_CONFIGS_DIRECTORY,
}

# Directories listed one level deep by backends without recursive listing.
FLAT_DIRECTORIES: tuple[str, ...] = (
    RULES_DIRECTORY,
    EMAIL_TEMPLATES_DIRECTORY,
    PAGES_DIRECTORY,
    *CONFIGURABLE_DIRECTORIES.values(),
)


def _in_directory(relative_path: str, directory: str) -> bool:
    return relative_path.startswith(f"{directory}/")


def relative_to_root(path: str, root_prefix: str) -> str | None:
    """Strip *root_prefix* from *path*; ``None`` if the path lies outside it."""
    path = path.lstrip("/")
    prefix = normalize_prefix(root_prefix)
    if not path.startswith(prefix):
        return None
    return path[len(prefix):]


def database_file_details(relative_path: str) -> tuple[str, str] | None:
    """Return ``(database, name)`` for a database script or settings file.

    Only ``database-connections/<db>/<stage>.js`` with a recognized stage
    name, or ``database-connections/<db>/settings.json``, qualify.
    """
    parts = relative_path.split("/")
    if len(parts) != 3 or parts[0] != DATABASE_CONNECTIONS_DIRECTORY or not parts[1]:
        return None
    stem, ext = posixpath.splitext(parts[2])
    if ext.lower() == ".js" and stem in DATABASE_SCRIPTS:
        return parts[1], stem
    if ext.lower() == ".json" and stem == DATABASE_SETTINGS_NAME:
        return parts[1], stem
    return None


def classify(path: str, root_prefix: str = "") -> Classification | None:
    """Classify a repository path, or return ``None`` if it is not an artifact."""
    relative = relative_to_root(path, root_prefix)
    if not relative:
        return None
    filename = relative.rsplit("/", 1)[-1]

    if _in_directory(relative, PAGES_DIRECTORY):
        if filename in PAGE_NAMES:
            return Classification(Category.PAGES, relative)
        return None

    if _in_directory(relative, EMAIL_TEMPLATES_DIRECTORY):
        if filename in EMAIL_TEMPLATES_NAMES:
            return Classification(Category.EMAIL_TEMPLATES, relative)
        if relative == f"{EMAIL_TEMPLATES_DIRECTORY}/{EMAIL_PROVIDER_FILE}":
            return Classification(Category.EMAIL_PROVIDER, relative)
        return None

    if _in_directory(relative, RULES_DIRECTORY):
        if _SCRIPT_OR_JSON.search(filename):
            return Classification(Category.RULES, relative)
        return None

    for category, directory in CONFIGURABLE_DIRECTORIES.items():
        if _in_directory(relative, directory):
            if _SCRIPT_OR_JSON.search(filename):
                return Classification(category, relative)
            return None

    if _in_directory(relative, DATABASE_CONNECTIONS_DIRECTORY):
        details = database_file_details(relative)
        if details is None:
            return None
        database, name = details
        return Classification(Category.DATABASES, relative, database=database, name=name)

    return None


def is_valid_file(path: str, root_prefix: str = "") -> bool:
    """Return True when *path* is a recognized configuration artifact."""
    return classify(path, root_prefix) is not None
