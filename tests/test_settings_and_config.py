import pytest
import yaml

import config
from application.settings_service import SETTINGS_KEY, SettingsService
from core.errors import StorageError, ValidationFailure
from core.messages import Configured, GetData, NotConfigured, SaveToken, parse_message
from core.models import DataKind
from core.settings import Settings, parse_settings, settings_errors, token_format_errors, validate_token_format
from infrastructure.kv_store import MemoryStore


def test_default_settings_roundtrip():
    default = Settings.default()
    assert default.enabled_sections() == ["repositories", "issues", "projects"]
    assert parse_settings(default.to_dict()) == default


def test_settings_errors_point_at_fields():
    errors = settings_errors({"layout": [{"id": "issues", "enabled": True}, "x"], "token": 5, "cache": []})

    assert any(e.startswith("layout.0:") and "order" in e for e in errors)
    assert any(e.startswith("layout.1:") for e in errors)
    assert any(e.startswith("token:") for e in errors)
    assert any(e.startswith("cache:") for e in errors)
    assert settings_errors("nope")
    assert settings_errors({"layout": []}) == []


def test_parse_settings_raises_validation_failure():
    with pytest.raises(ValidationFailure) as excinfo:
        parse_settings({"layout": "all"})
    assert excinfo.value.errors


def test_token_format_rules():
    assert token_format_errors("a" * 40) == []
    assert token_format_errors("") == ["token must be a non-empty string"]
    assert len(token_format_errors("bad-token")) == 2
    with pytest.raises(ValidationFailure):
        validate_token_format(None)


def test_settings_service_falls_back_on_malformed_or_failing_store():
    store = MemoryStore({SETTINGS_KEY: {"layout": "broken"}})
    assert SettingsService(store).get_settings() == Settings.default()

    class BrokenStore(MemoryStore):
        def get(self, key):
            raise StorageError("gone")

    assert SettingsService(BrokenStore()).get_settings() == Settings.default()


def test_lookup_credential_is_a_value():
    store = MemoryStore()
    service = SettingsService(store)
    assert isinstance(service.lookup_credential(), NotConfigured)

    service.save_token("a" * 40)
    assert service.lookup_credential() == Configured("a" * 40)


def test_parse_message_variants():
    assert parse_message({"type": "GET_DATA"}) == GetData(DataKind.ALL)
    assert parse_message({"type": "GET_DATA", "dataType": "projects"}).kind is DataKind.PROJECTS
    assert parse_message({"type": "SAVE_TOKEN", "token": "  abc  "}) == SaveToken("abc")
    with pytest.raises(ValidationFailure):
        parse_message({"type": "SAVE_TOKEN", "token": 5})


def test_load_config_file_and_env(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(yaml.safe_dump({"timeout": 10, "max_retries": 5, "log_level": "DEBUG"}), encoding="utf-8")

    cfg = config.load_config(path, environ={"GITHUB_DASHBOARD_MAX_RETRIES": "1", "GITHUB_DASHBOARD_CACHE_TTL": "bad"})

    assert cfg.timeout == 10.0
    assert cfg.max_retries == 1
    assert cfg.log_level == "DEBUG"
    assert cfg.cache_ttl == 300.0
    assert cfg.base_url == "https://api.github.com"


def test_load_config_ignores_broken_file(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("timeout: [1,", encoding="utf-8")

    assert config.load_config(path, environ={}) == config.DashboardConfig()
    assert config.load_config(tmp_path / "missing.yaml", environ={}) == config.DashboardConfig()


def test_env_token_precedence():
    assert config.get_env_token({"GITHUB_TOKEN": "b", "GITHUB_DASHBOARD_TOKEN": " a "}) == "a"
    assert config.get_env_token({"GITHUB_TOKEN": "b"}) == "b"
    assert config.get_env_token({}) == ""
