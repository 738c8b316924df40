import io
import json

import pytest

from application.data_service import DataService
from application.settings_service import SETTINGS_KEY, SettingsService
from core.errors import AuthenticationError, ClientError
from infrastructure.cache_manager import CacheManager
from infrastructure.github_rest import ApiResponse
from infrastructure.kv_store import MemoryStore
from interface.message_handler import MessageHandler
from interface.stdio_server import run_stdio

TOKEN = "ghp_" + "x" * 36


class FakeClient:
    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []
        self.credential = ""

    def set_credential(self, credential):
        self.credential = credential

    def get(self, path, headers=None, params=None, timeout=None):
        self.calls.append((path, self.credential))
        route = self.routes[path]
        if isinstance(route, Exception):
            raise route
        return ApiResponse(data=route, status=200)


@pytest.fixture
def env():
    store = MemoryStore()
    client = FakeClient(
        {
            "/user": {"login": "octo"},
            "/user/repos": [],
            "/issues": [{"id": 1, "updated_at": "2024-01-01T00:00:00Z"}],
            "/user/projects": [],
        }
    )
    cache = CacheManager(store)
    settings = SettingsService(store)
    handler = MessageHandler(settings, DataService(client, cache), cache)
    return handler, store, client


def save_token(handler):
    resp = handler.handle({"type": "SAVE_TOKEN", "token": TOKEN})
    assert resp == {"success": True, "data": {"success": True}}


def test_get_settings_returns_defaults(env):
    handler, _, _ = env

    resp = handler.handle({"type": "GET_SETTINGS"})

    assert resp["success"] is True
    assert [item["id"] for item in resp["data"]["layout"]] == ["repositories", "issues", "projects"]
    assert resp["data"]["token"] == ""


def test_save_settings_validates_and_notifies(env):
    handler, store, _ = env
    seen = []
    handler.settings.add_listener(lambda settings: seen.append(settings.enabled_sections()))
    handler.settings.add_listener(lambda settings: 1 / 0)

    bad = handler.handle({"type": "SAVE_SETTINGS", "settings": {"layout": [{"id": "issues", "enabled": "yes", "order": 0}]}})
    assert bad["success"] is False
    assert bad["error"].startswith("Invalid settings")
    assert store.get(SETTINGS_KEY) is None

    layout = [{"id": "issues", "enabled": True, "order": 1}, {"id": "projects", "enabled": True, "order": 0}]
    ok = handler.handle({"type": "SAVE_SETTINGS", "settings": {"layout": layout}})
    assert ok == {"success": True, "data": {"success": True}}
    assert store.get(SETTINGS_KEY)["layout"] == layout
    assert seen == [["projects", "issues"]]


def test_save_token_rejects_malformed_tokens(env):
    handler, store, client = env

    resp = handler.handle({"type": "SAVE_TOKEN", "token": "short!"})

    assert resp["success"] is False
    assert "Invalid token" in resp["error"]
    assert client.credential == ""

    save_token(handler)
    assert store.get(SETTINGS_KEY)["token"] == TOKEN
    assert client.credential == TOKEN


def test_validate_token_without_credential(env):
    handler, _, client = env

    resp = handler.handle({"type": "VALIDATE_TOKEN"})

    assert resp == {"success": True, "data": {"valid": False, "message": "Token is not configured"}}
    assert client.calls == []


def test_validate_token_with_credential(env):
    handler, _, client = env
    save_token(handler)

    resp = handler.handle({"type": "VALIDATE_TOKEN"})

    assert resp["data"]["valid"] is True
    assert client.calls == [("/user", TOKEN)]


def test_validate_token_failure_is_a_value(env):
    handler, _, client = env
    save_token(handler)
    client.routes["/user"] = AuthenticationError("Bad credentials", 401)

    resp = handler.handle({"type": "VALIDATE_TOKEN"})

    assert resp["success"] is True
    assert resp["data"] == {"valid": False, "message": "Authentication failed: Bad credentials"}


def test_get_data_requires_credential(env):
    handler, _, _ = env

    resp = handler.handle({"type": "GET_DATA", "dataType": "all"})

    assert resp == {"success": False, "error": "Token is not configured"}


def test_get_data_uses_env_fallback_token():
    store = MemoryStore()
    client = FakeClient({"/issues": []})
    cache = CacheManager(store)
    handler = MessageHandler(SettingsService(store, fallback_token=lambda: " envtok "), DataService(client, cache), cache)

    resp = handler.handle({"type": "GET_DATA", "dataType": "issues"})

    assert resp == {"success": True, "data": {"issues": []}}
    assert client.credential == "envtok"


def test_get_data_all(env):
    handler, _, _ = env
    save_token(handler)

    resp = handler.handle({"type": "GET_DATA", "dataType": "all"})

    assert resp["success"] is True
    assert resp["data"] == {"repositories": [], "issues": [{"id": 1, "updated_at": "2024-01-01T00:00:00Z"}], "projects": []}


def test_get_data_reports_api_errors(env):
    handler, _, client = env
    save_token(handler)
    client.routes["/issues"] = ClientError("Not Found", 404)

    resp = handler.handle({"type": "GET_DATA", "dataType": "issues"})

    assert resp == {"success": False, "error": "API Error (404): Not Found"}


def test_get_data_rejects_unknown_kind(env):
    handler, _, _ = env

    resp = handler.handle({"type": "GET_DATA", "dataType": "gists"})

    assert resp["success"] is False
    assert "Invalid dataType" in resp["error"]


def test_refresh_clears_cache_but_keeps_settings(env):
    handler, store, client = env
    save_token(handler)
    handler.handle({"type": "GET_DATA", "dataType": "issues"})
    assert "cache_issues_mentioned" in store.keys()

    resp = handler.handle({"type": "REFRESH_DATA"})

    assert resp["success"] is True
    assert resp["data"]["cleared"] == 1
    assert store.keys() == [SETTINGS_KEY]
    # refresh does not re-fetch by itself
    assert [path for path, _ in client.calls] == ["/issues"]


def test_unknown_and_malformed_messages(env):
    handler, _, _ = env

    assert handler.handle({"type": "NOPE"}) == {"success": False, "error": "Unknown message type: NOPE"}
    assert handler.handle("GET_DATA") == {"success": False, "error": "message must be an object"}
    assert handler.handle({"type": "SAVE_SETTINGS"})["error"] == "settings must be an object"


def test_run_stdio_answers_each_line(env):
    handler, _, _ = env
    stdin = io.StringIO('{"type": "GET_SETTINGS"}\n\nnot json\n{"type": "REFRESH_DATA"}\n')
    stdout = io.StringIO()

    assert run_stdio(handler, stdin=stdin, stdout=stdout) == 0

    lines = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert len(lines) == 3
    assert lines[0]["success"] is True
    assert lines[1]["success"] is False and lines[1]["error"].startswith("Parse error")
    assert lines[2]["data"]["cleared"] == 0
