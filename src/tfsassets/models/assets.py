"""Canonical, backend-independent asset models consumed by the deployer."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from tfsassets.constants import DATABASE_STRATEGY, DEFAULT_RULE_STAGE


class RuleAsset(BaseModel):
    name: str
    script: str | None = None
    order: int = 0
    stage: str = DEFAULT_RULE_STAGE
    enabled: bool | None = None


class DatabaseAsset(BaseModel):
    """A custom database connection with its scripts under ``options.customScripts``."""

    strategy: str = DATABASE_STRATEGY
    name: str
    options: dict[str, Any] = {}


class PageAsset(BaseModel):
    name: str
    html: str | None = None
    enabled: bool | None = None


class EmailTemplateAsset(PageAsset):
    """Email template; extra sidecar fields (``from``, ``subject``, ...) are kept."""

    model_config = {"extra": "allow"}


class ConfigurableAsset(BaseModel):
    """Client, connection or resource server: ``name`` plus arbitrary config fields."""

    name: Any = None

    model_config = {"extra": "allow"}


class RulesConfigAsset(BaseModel):
    key: str
    value: Any = None


class CanonicalAssetDocument(BaseModel):
    """All extracted configuration, keyed by category.

    Field order is the static category order; dump with ``by_alias=True`` to
    obtain the camelCase keys the deployer expects.
    """

    rules: list[RuleAsset] = []
    databases: list[DatabaseAsset] = []
    pages: list[PageAsset] = []
    email_templates: list[EmailTemplateAsset] = Field([], alias="emailTemplates")
    email_provider: dict[str, Any] | None = Field(None, alias="emailProvider")
    clients: list[ConfigurableAsset] = []
    client_grants: list[dict[str, Any]] = Field([], alias="clientGrants")
    connections: list[ConfigurableAsset] = []
    resource_servers: list[ConfigurableAsset] = Field([], alias="resourceServers")
    rules_configs: list[RulesConfigAsset] = Field([], alias="rulesConfigs")

    model_config = {"populate_by_name": True}

    def to_assets(self) -> dict[str, Any]:
        """Return the plain-dict form handed to the deployer."""
        return self.model_dump(by_alias=True)
