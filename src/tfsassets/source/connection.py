"""HTTP connection to a TFS / Azure DevOps collection."""

from __future__ import annotations

import threading
from typing import Any

import httpx

from tfsassets.models.errors import UnsupportedConfigurationError
from tfsassets.settings import Settings

AUTH_METHODS = ("basic", "pat")


def credentials_from_settings(settings: Settings) -> tuple[str, str]:
    """Return ``(username, password)`` for HTTP basic auth.

    Personal access tokens are sent as the password with an empty user name.
    """
    if settings.tfs_auth_method == "pat":
        return "", settings.tfs_token
    if settings.tfs_auth_method == "basic":
        return settings.tfs_username, settings.tfs_password
    raise UnsupportedConfigurationError(
        "auth method", settings.tfs_auth_method, available=list(AUTH_METHODS)
    )


class ConnectionFactory:
    """Creates the shared :class:`httpx.AsyncClient` lazily, at most once.

    Pass a ``transport`` to route requests through a fake (tests).
    """

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str],
        *,
        api_version: str = "4.1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.api_version = api_version
        self._auth = auth
        self._timeout = timeout
        self._transport = transport
        self._lock = threading.Lock()
        self._client: httpx.AsyncClient | None = None
        self.clients_created = 0

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> ConnectionFactory:
        return cls(
            settings.collection_url,
            credentials_from_settings(settings),
            api_version=settings.api_version,
            timeout=settings.request_timeout_s,
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """The shared client, created on first access."""
        with self._lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    auth=httpx.BasicAuth(*self._auth),
                    timeout=self._timeout,
                    transport=self._transport,
                )
                self.clients_created += 1
            return self._client

    async def get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET *path* relative to the collection URL; raises on HTTP error status."""
        query = {**(params or {}), "api-version": self.api_version}
        response = await self.client.get(path, params=query)
        response.raise_for_status()
        return response

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self.get(path, params)
        return response.json()

    async def get_text(self, path: str, params: dict[str, Any] | None = None) -> str:
        response = await self.get(path, params)
        return response.text

    async def aclose(self) -> None:
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def __aenter__(self) -> ConnectionFactory:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
