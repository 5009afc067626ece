"""Group classified files into one record per logical artifact.

A record pairs the primary file (script, HTML body, JSON config) with its
optional metadata sidecar.  Grouping is order-independent: records are
returned sorted by logical name, and when two files compete for the same
slot the one with the lexicographically smaller path wins.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable

from tfsassets.classifier import classify
from tfsassets.constants import DATABASE_SCRIPTS, DATABASE_SETTINGS_NAME
from tfsassets.models.files import (
    CONFIGURABLE_CATEGORIES,
    TEMPLATE_CATEGORIES,
    Category,
    FileDescriptor,
)
from tfsassets.models.records import (
    ArtifactRecord,
    ConfigurableRecord,
    DatabaseRecord,
    RuleRecord,
    TemplateRecord,
)

EMAIL_PROVIDER_NAME = "emailProvider"
_META_SUFFIX = ".meta"


def _pick(current: FileDescriptor | None, candidate: FileDescriptor) -> FileDescriptor:
    if current is None or candidate.path < current.path:
        return candidate
    return current


def _split(file: FileDescriptor) -> tuple[str, str]:
    stem, ext = posixpath.splitext(file.filename)
    return stem, ext.lower()


def _files_in(
    files: Iterable[FileDescriptor], category: Category, root_prefix: str
) -> list[FileDescriptor]:
    matched = []
    for file in files:
        classification = classify(file.path, root_prefix)
        if classification is not None and classification.category == category:
            matched.append(file)
    return matched


def group_rules(files: Iterable[FileDescriptor]) -> dict[str, RuleRecord]:
    rules: dict[str, RuleRecord] = {}
    for file in files:
        name, ext = _split(file)
        rule = rules.setdefault(name, RuleRecord(name=name))
        if ext == ".js":
            rule.script_file = _pick(rule.script_file, file)
        elif ext == ".json":
            rule.metadata_file = _pick(rule.metadata_file, file)
    return dict(sorted(rules.items()))


def group_databases(
    files: Iterable[FileDescriptor], root_prefix: str = ""
) -> dict[str, DatabaseRecord]:
    databases: dict[str, DatabaseRecord] = {}
    for file in files:
        classification = classify(file.path, root_prefix)
        if classification is None or classification.database is None:
            continue
        database = databases.setdefault(
            classification.database, DatabaseRecord(name=classification.database)
        )
        if classification.name == DATABASE_SETTINGS_NAME:
            database.settings_file = _pick(database.settings_file, file)
        elif classification.name is not None:
            database.script_files[classification.name] = _pick(
                database.script_files.get(classification.name), file
            )

    for database in databases.values():
        database.script_files = {
            stage: database.script_files[stage]
            for stage in DATABASE_SCRIPTS
            if stage in database.script_files
        }
    return dict(sorted(databases.items()))


def group_templates(files: Iterable[FileDescriptor]) -> dict[str, TemplateRecord]:
    templates: dict[str, TemplateRecord] = {}
    for file in files:
        name, ext = _split(file)
        template = templates.setdefault(name, TemplateRecord(name=name))
        if ext == ".json":
            template.metadata_file = _pick(template.metadata_file, file)
        else:
            template.html_file = _pick(template.html_file, file)
    return dict(sorted(templates.items()))


def group_configurables(files: Iterable[FileDescriptor]) -> dict[str, ConfigurableRecord]:
    """Pair ``<name>.json`` configs with ``<name>.meta.json`` sidecars.

    Only JSON files take part; ``.js`` files in configurable directories are
    accepted by the classifier but carry nothing to unify.
    """
    configurables: dict[str, ConfigurableRecord] = {}
    for file in files:
        name, ext = _split(file)
        if ext != ".json":
            continue
        is_meta = name.endswith(_META_SUFFIX)
        if is_meta:
            name = name[: -len(_META_SUFFIX)]
        item = configurables.setdefault(name, ConfigurableRecord(name=name))
        if is_meta:
            item.metadata_file = _pick(item.metadata_file, file)
        else:
            item.config_file = _pick(item.config_file, file)
    return dict(sorted(configurables.items()))


def group_email_provider(files: Iterable[FileDescriptor]) -> dict[str, ConfigurableRecord]:
    """Return the singleton provider record; its config is absent if no file exists."""
    provider = ConfigurableRecord(name=EMAIL_PROVIDER_NAME)
    for file in files:
        provider.config_file = _pick(provider.config_file, file)
    return {EMAIL_PROVIDER_NAME: provider}


def group(
    files: Iterable[FileDescriptor], category: Category, root_prefix: str = ""
) -> dict[str, ArtifactRecord]:
    """Group the files belonging to *category* into records keyed by logical name."""
    matched = _files_in(files, category, root_prefix)
    if category == Category.RULES:
        return dict(group_rules(matched))
    if category == Category.DATABASES:
        return dict(group_databases(matched, root_prefix))
    if category in TEMPLATE_CATEGORIES:
        return dict(group_templates(matched))
    if category == Category.EMAIL_PROVIDER:
        return dict(group_email_provider(matched))
    if category in CONFIGURABLE_CATEGORIES:
        return dict(group_configurables(matched))
    raise ValueError(f"Unknown category '{category}'")
