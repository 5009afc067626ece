"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_prefix(prefix: str) -> str:
    """Return *prefix* without leading slashes and with exactly one trailing slash.

    An empty prefix stays empty so that it matches the repository root.
    """
    prefix = prefix.strip("/")
    return f"{prefix}/" if prefix else ""


class Settings(BaseSettings):
    """Configuration for repository extraction.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.  Field names map to the upper-cased
    environment variable (``tfs_type`` → ``TFS_TYPE``).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # Source control
    tfs_type: str = "git"  # "git" or "tfvc"
    tfs_instance: str = ""
    tfs_collection: str = "DefaultCollection"
    tfs_base_url: str | None = None  # overrides the visualstudio.com collection URL
    tfs_auth_method: str = "pat"  # "pat" or "basic"
    tfs_token: str = ""
    tfs_username: str = ""
    tfs_password: str = ""
    tfs_project: str = ""
    tfs_repository: str | None = None
    tfs_branch: str = "master"

    # Repository layout
    base_dir: str = ""  # git root prefix
    tfs_path: str = ""  # tfvc root prefix, e.g. "$/project/dev"

    # Networking
    download_concurrency: int = Field(default=2, ge=1)
    request_timeout_s: float = 30.0
    api_version: str = "4.1"

    @property
    def collection_url(self) -> str:
        """Return the collection URL (explicit base URL takes precedence)."""
        if self.tfs_base_url:
            return self.tfs_base_url.rstrip("/")
        return f"https://{self.tfs_instance}.visualstudio.com/{self.tfs_collection}"

    @property
    def root_prefix(self) -> str:
        """Return the normalized root prefix for the selected backend."""
        raw = self.tfs_path if self.tfs_type == "tfvc" else self.base_dir
        return normalize_prefix(raw)

    @property
    def repository(self) -> str:
        """Git repository name or id (defaults to the project name)."""
        return self.tfs_repository or self.tfs_project
