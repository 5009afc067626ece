"""Convert populated records into canonical assets.

Stored JSON is parsed best-effort: malformed metadata or config is logged
at INFO and replaced by an empty object, and a metadata field of the wrong
type is logged and replaced by its default, so one broken file never aborts
a category.  When metadata and config are merged, config fields win.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from tfsassets.constants import DEFAULT_RULE_STAGE
from tfsassets.models.assets import (
    ConfigurableAsset,
    DatabaseAsset,
    EmailTemplateAsset,
    PageAsset,
    RuleAsset,
    RulesConfigAsset,
)
from tfsassets.models.errors import MalformedContentError
from tfsassets.models.files import Category
from tfsassets.models.records import (
    ArtifactRecord,
    ConfigurableRecord,
    DatabaseRecord,
    RuleRecord,
    TemplateRecord,
)

logger = logging.getLogger("tfsassets.unify")

_OPTIONAL_BOOL = (bool, type(None))


def parse_json(text: str) -> Any:
    """Parse *text* as JSON; raise :class:`MalformedContentError` if it is not."""
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MalformedContentError(str(exc)) from exc


def parse_or_default(
    text: str | None,
    default: dict[str, Any],
    *,
    name: str,
    category: Category | str,
    kind: str = "metadata",
) -> dict[str, Any]:
    """Parse a JSON object, falling back to *default* (logged) on bad input.

    A missing file (``None``) yields *default* silently; text that is not
    JSON, or JSON that is not an object, is logged and yields *default*.
    """
    if text is None:
        return default
    try:
        value = parse_json(text)
    except MalformedContentError:
        value = None
    if not isinstance(value, dict):
        _log_unparseable(kind, name, category)
        return default
    return value


def metadata_field(
    meta: dict[str, Any],
    key: str,
    default: Any,
    types: type | tuple[type, ...],
    *,
    name: str,
    category: Category | str,
) -> Any:
    """Return ``meta[key]`` if it has one of *types*, else *default*.

    A missing key yields *default* silently; a value of the wrong type is
    logged like unparseable metadata.  ``bool`` never counts as ``int``.
    """
    if key not in meta:
        return default
    value = meta[key]
    allowed = types if isinstance(types, tuple) else (types,)
    if isinstance(value, bool) and bool not in allowed:
        value_ok = False
    else:
        value_ok = isinstance(value, allowed)
    if not value_ok:
        _log_unparseable(f"metadata field '{key}'", name, category)
        return default
    return value


def _log_unparseable(kind: str, name: str, category: Category | str) -> None:
    logger.info(
        "Cannot parse %s of %s %s",
        kind,
        name,
        category,
        extra={"artifact": name, "category": str(category)},
    )


def unify_rule(record: RuleRecord) -> RuleAsset:
    name, category = record.name, Category.RULES
    meta = parse_or_default(record.metadata, {}, name=name, category=category)
    return RuleAsset(
        name=name,
        script=record.script,
        order=metadata_field(meta, "order", 0, int, name=name, category=category),
        stage=metadata_field(meta, "stage", DEFAULT_RULE_STAGE, str, name=name, category=category),
        enabled=metadata_field(meta, "enabled", None, _OPTIONAL_BOOL, name=name, category=category),
    )


def unify_database(record: DatabaseRecord) -> DatabaseAsset:
    settings = parse_or_default(
        record.settings, {}, name=record.name, category=Category.DATABASES, kind="settings"
    )
    options: dict[str, Any] = {**settings, "customScripts": dict(record.scripts)}
    if record.scripts:
        options["enabledDatabaseCustomization"] = True
    return DatabaseAsset(name=record.name, options=options)


def unify_page(record: TemplateRecord) -> PageAsset:
    meta = parse_or_default(record.metadata, {}, name=record.name, category=Category.PAGES)
    enabled = metadata_field(
        meta, "enabled", None, _OPTIONAL_BOOL, name=record.name, category=Category.PAGES
    )
    return PageAsset(name=record.name, html=record.html, enabled=enabled)


def unify_email_template(record: TemplateRecord) -> EmailTemplateAsset:
    meta = parse_or_default(
        record.metadata, {}, name=record.name, category=Category.EMAIL_TEMPLATES
    )
    enabled = metadata_field(
        meta, "enabled", None, _OPTIONAL_BOOL, name=record.name, category=Category.EMAIL_TEMPLATES
    )
    return EmailTemplateAsset(
        **{**meta, "name": record.name, "html": record.html, "enabled": enabled}
    )


def _config_and_meta(
    record: ConfigurableRecord, category: Category
) -> tuple[dict[str, Any], dict[str, Any]]:
    data = parse_or_default(record.config, {}, name=record.name, category=category, kind="config")
    meta = parse_or_default(record.metadata, {}, name=record.name, category=category)
    return data, meta


def unify_configurable(record: ConfigurableRecord, category: Category) -> ConfigurableAsset:
    data, meta = _config_and_meta(record, category)
    return ConfigurableAsset(**{"name": record.name, **meta, **data})


def unify_verbatim(record: ConfigurableRecord, category: Category) -> dict[str, Any] | None:
    """Client grants and the email provider: config as-is, or ``None`` if absent."""
    if record.config_file is None:
        return None
    return parse_or_default(record.config, {}, name=record.name, category=category, kind="config")


def unify_rules_config(record: ConfigurableRecord) -> RulesConfigAsset:
    data = parse_or_default(
        record.config, {}, name=record.name, category=Category.RULES_CONFIGS, kind="config"
    )
    return RulesConfigAsset(key=record.name, value=data.get("value"))


def unify_item(record: ArtifactRecord, category: Category) -> Any:
    """Convert one record; ``None`` means the record is absent and is dropped."""
    match category:
        case Category.RULES:
            assert isinstance(record, RuleRecord)
            return unify_rule(record)
        case Category.DATABASES:
            assert isinstance(record, DatabaseRecord)
            return unify_database(record)
        case Category.PAGES:
            assert isinstance(record, TemplateRecord)
            return unify_page(record)
        case Category.EMAIL_TEMPLATES:
            assert isinstance(record, TemplateRecord)
            return unify_email_template(record)
        case Category.EMAIL_PROVIDER | Category.CLIENT_GRANTS:
            assert isinstance(record, ConfigurableRecord)
            return unify_verbatim(record, category)
        case Category.RULES_CONFIGS:
            assert isinstance(record, ConfigurableRecord)
            return unify_rules_config(record)
        case Category.CLIENTS | Category.CONNECTIONS | Category.RESOURCE_SERVERS:
            assert isinstance(record, ConfigurableRecord)
            return unify_configurable(record, category)
    raise ValueError(f"Unknown category '{category}'")


def unify(records: Iterable[ArtifactRecord], category: Category) -> list[Any]:
    """Unify every record of *category*, dropping absent ones."""
    unified = (unify_item(record, category) for record in records)
    return [item for item in unified if item is not None]
