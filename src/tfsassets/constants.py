"""Repository layout constants shared by every backend."""

from __future__ import annotations

RULES_DIRECTORY = "rules"
RULES_CONFIGS_DIRECTORY = "rules-configs"
DATABASE_CONNECTIONS_DIRECTORY = "database-connections"
PAGES_DIRECTORY = "pages"
EMAIL_TEMPLATES_DIRECTORY = "emails"
CLIENTS_DIRECTORY = "clients"
CLIENTS_GRANTS_DIRECTORY = "grants"
CONNECTIONS_DIRECTORY = "connections"
RESOURCE_SERVERS_DIRECTORY = "resource-servers"

EMAIL_PROVIDER_FILE = "provider.json"
DATABASE_SETTINGS_NAME = "settings"

# Lifecycle stages a custom database script may implement, in canonical order.
DATABASE_SCRIPTS: tuple[str, ...] = (
    "get_user",
    "create",
    "verify",
    "login",
    "change_password",
    "delete",
)

_PAGES = ("password_reset", "guardian_multifactor", "login", "error_page")

PAGE_NAMES: frozenset[str] = frozenset(
    f"{name}.{ext}" for name in _PAGES for ext in ("html", "json")
)

_EMAIL_TEMPLATES = (
    "verify_email",
    "reset_email",
    "welcome_email",
    "blocked_account",
    "stolen_credentials",
    "enrollment_email",
    "mfa_oob_code",
    "change_password",
    "password_reset",
)

EMAIL_TEMPLATES_NAMES: frozenset[str] = frozenset(
    f"{name}.{ext}" for name in _EMAIL_TEMPLATES for ext in ("html", "json")
)

DATABASE_STRATEGY = "auth0"
DEFAULT_RULE_STAGE = "login_success"
DEFAULT_DOWNLOAD_CONCURRENCY = 2
