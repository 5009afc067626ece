"""Shared test fixtures: a sample tenant repository and fake TFS servers."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from tfsassets.source.connection import ConnectionFactory

GIT_ROOT = "tenant"
TFVC_ROOT = "$/proj/tenant"
COMMIT_ID = "a" * 40
TREE_ID = "tree-0001"
BASE_URL = "http://tfs.test/DefaultCollection"

TENANT_FILES: dict[str, str] = {
    "rules/enrich.js": "function enrich(user, context, cb) { cb(null, user, context); }",
    "rules/enrich.json": '{"order": 15}',
    "rules/block.js": "function block(user, context, cb) { cb(new Error('no')); }",
    "rules/notes.md": "not a rule",
    "database-connections/users-db/login.js": "function login(email, password, cb) {}",
    "database-connections/users-db/get_user.js": "function getByEmail(email, cb) {}",
    "database-connections/users-db/settings.json": '{"import_mode": true}',
    "database-connections/users-db/unknown.js": "not a stage",
    "pages/login.html": "<html>login</html>",
    "pages/login.json": '{"enabled": true}',
    "pages/other.html": "<html>unknown page</html>",
    "emails/verify_email.html": "<p>verify</p>",
    "emails/verify_email.json": '{"enabled": true, "from": "no-reply@example.com", "subject": "Verify"}',
    "emails/provider.json": '{"name": "sendgrid", "enabled": true}',
    "clients/app.json": '{"app_type": "spa", "name": "My App"}',
    "clients/app.meta.json": '{"description": "from meta", "app_type": "native"}',
    "grants/app-api.json": '{"client_id": "app", "audience": "https://api", "scope": []}',
    "connections/social.json": "{not json",
    "resource-servers/api.json": '{"identifier": "https://api"}',
    "rules-configs/secret.json": '{"value": "s3cr3t"}',
}

EXPECTED_ASSETS: dict[str, Any] = {
    "rules": [
        {
            "name": "block",
            "script": TENANT_FILES["rules/block.js"],
            "order": 0,
            "stage": "login_success",
            "enabled": None,
        },
        {
            "name": "enrich",
            "script": TENANT_FILES["rules/enrich.js"],
            "order": 15,
            "stage": "login_success",
            "enabled": None,
        },
    ],
    "databases": [
        {
            "strategy": "auth0",
            "name": "users-db",
            "options": {
                "import_mode": True,
                "customScripts": {
                    "get_user": TENANT_FILES["database-connections/users-db/get_user.js"],
                    "login": TENANT_FILES["database-connections/users-db/login.js"],
                },
                "enabledDatabaseCustomization": True,
            },
        }
    ],
    "pages": [{"name": "login", "html": "<html>login</html>", "enabled": True}],
    "emailTemplates": [
        {
            "name": "verify_email",
            "html": "<p>verify</p>",
            "enabled": True,
            "from": "no-reply@example.com",
            "subject": "Verify",
        }
    ],
    "emailProvider": {"name": "sendgrid", "enabled": True},
    "clients": [{"name": "My App", "description": "from meta", "app_type": "spa"}],
    "clientGrants": [{"client_id": "app", "audience": "https://api", "scope": []}],
    "connections": [{"name": "social"}],
    "resourceServers": [{"name": "api", "identifier": "https://api"}],
    "rulesConfigs": [{"key": "secret", "value": "s3cr3t"}],
}


class ConcurrencyTracker:
    """Tracks how many content downloads are in flight at once."""

    def __init__(self) -> None:
        self.in_flight = 0
        self.max_in_flight = 0
        self.downloaded: list[str] = []

    async def __aenter__(self) -> ConcurrencyTracker:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.005)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.in_flight -= 1


def _json(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


class FakeGitServer:
    """In-memory stand-in for the Azure DevOps git REST API."""

    def __init__(self, files: dict[str, str], *, root: str = GIT_ROOT) -> None:
        self.files = {f"{root}/{path}" if root else path: text for path, text in files.items()}
        self.files["README.md"] = "outside the root"
        self.object_ids = {path: f"obj-{index:04d}" for index, path in enumerate(sorted(self.files))}
        self.blobs = {object_id: self.files[path] for path, object_id in self.object_ids.items()}
        self.branches = {"master": COMMIT_ID}
        self.changes: dict[str, list[str]] = {}
        self.failing_blobs: set[str] = set()
        self.fail_tree = False
        self.requests: list[httpx.Request] = []
        self.tracker = ConcurrencyTracker()

    def _tree_entries(self) -> list[dict[str, Any]]:
        folders = {
            "/".join(path.split("/")[:depth])
            for path in self.files
            for depth in range(1, path.count("/") + 1)
        }
        entries = [
            {"relativePath": folder, "objectId": f"tree-{folder}", "gitObjectType": "tree"}
            for folder in sorted(folders)
        ]
        entries += [
            {
                "relativePath": path,
                "objectId": self.object_ids[path],
                "gitObjectType": "blob",
                "size": len(text),
            }
            for path, text in sorted(self.files.items())
        ]
        return entries

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        _, _, tail = path.partition("/_apis/git/repositories")
        parts = [part for part in tail.split("/") if part]

        if not parts:
            return _json({"value": [{"id": "repo-guid-1", "name": "tenant-config"}]})
        if parts[1:] == ["stats", "branches"]:
            commit = self.branches.get(request.url.params.get("name", ""))
            if commit is None:
                return _json({"message": "not found"}, 404)
            return _json({"name": request.url.params["name"], "commit": {"commitId": commit}})
        if len(parts) == 3 and parts[1] == "commits":
            return _json({"commitId": parts[2], "treeId": TREE_ID})
        if len(parts) == 4 and parts[1] == "commits" and parts[3] == "changes":
            items = [{"item": {"path": f"/{p}"}} for p in self.changes.get(parts[2], [])]
            return _json({"changes": items})
        if len(parts) == 3 and parts[1] == "trees":
            if self.fail_tree or request.url.params.get("recursive") != "true":
                return _json({"message": "boom"}, 500)
            return _json({"objectId": parts[2], "treeEntries": self._tree_entries()})
        if len(parts) == 3 and parts[1] == "blobs":
            async with self.tracker:
                if parts[2] in self.failing_blobs or parts[2] not in self.blobs:
                    return _json({"message": "blob unavailable"}, 500)
                self.tracker.downloaded.append(parts[2])
                return httpx.Response(200, text=self.blobs[parts[2]])
        return _json({"message": f"unexpected {path}"}, 404)


class FakeTfvcServer:
    """In-memory stand-in for the TFVC items/changesets REST API."""

    def __init__(self, files: dict[str, str], *, root: str = TFVC_ROOT) -> None:
        self.files = {f"{root}/{path}": text for path, text in files.items()}
        self.changesets: dict[str, list[str]] = {}
        self.failing_paths: set[str] = set()
        self.failing_scopes: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.tracker = ConcurrencyTracker()

    def _folders(self) -> set[str]:
        return {
            "/".join(path.split("/")[:depth])
            for path in self.files
            for depth in range(2, path.count("/") + 1)
        }

    def _list(self, scope: str) -> httpx.Response:
        folders = self._folders()
        if scope not in folders:
            return _json({"message": "not found"}, 404)
        items: list[dict[str, Any]] = [{"path": scope, "isFolder": True}]
        for folder in sorted(folders):
            if folder.rsplit("/", 1)[0] == scope:
                items.append({"path": folder, "isFolder": True})
        for path, text in sorted(self.files.items()):
            if path.rsplit("/", 1)[0] == scope:
                items.append({"path": path, "size": len(text), "version": 7})
        return _json({"count": len(items), "value": items})

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params
        if path.endswith("/_apis/tfvc/items") and "scopePath" in params:
            if params["scopePath"] in self.failing_scopes:
                return _json({"message": "boom"}, 500)
            return self._list(params["scopePath"])
        if path.endswith("/_apis/tfvc/items") and "path" in params:
            async with self.tracker:
                item = params["path"]
                if item in self.failing_paths or item not in self.files:
                    return _json({"message": "item unavailable"}, 500)
                self.tracker.downloaded.append(item)
                return httpx.Response(200, text=self.files[item])
        if "/_apis/tfvc/changesets/" in path and path.endswith("/changes"):
            changeset = path.split("/")[-2]
            items = [{"item": {"path": p}} for p in self.changesets.get(changeset, [])]
            return _json({"count": len(items), "value": items})
        return _json({"message": f"unexpected {path}"}, 404)


def make_connection(handler: Any) -> ConnectionFactory:
    return ConnectionFactory(
        BASE_URL, ("", "token"), transport=httpx.MockTransport(handler)
    )


@pytest.fixture
def git_server() -> FakeGitServer:
    return FakeGitServer(TENANT_FILES)


@pytest.fixture
def tfvc_server() -> FakeTfvcServer:
    return FakeTfvcServer(TENANT_FILES)


@pytest.fixture
async def git_connection(git_server: FakeGitServer):
    connection = make_connection(git_server.handler)
    yield connection
    await connection.aclose()


@pytest.fixture
async def tfvc_connection(tfvc_server: FakeTfvcServer):
    connection = make_connection(tfvc_server.handler)
    yield connection
    await connection.aclose()


def dump(data: Any) -> str:
    """Stable JSON rendering for comparing documents."""
    return json.dumps(data, sort_keys=True)
