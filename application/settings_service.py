import logging
from typing import Any, Callable, Dict, List

from core.errors import StorageError
from core.messages import Configured, CredentialLookup, NotConfigured
from core.settings import Settings, parse_settings, settings_errors, validate_token_format

from .ports import KeyValueStore

SETTINGS_KEY = "settings"
logger = logging.getLogger("dashboard.settings")

SettingsListener = Callable[[Settings], None]


class SettingsService:
    """Settings document kept under a single key of the shared store."""

    def __init__(self, store: KeyValueStore, fallback_token: Callable[[], str] = lambda: "") -> None:
        self.store = store
        self.fallback_token = fallback_token
        self._listeners: List[SettingsListener] = []

    def add_listener(self, listener: SettingsListener) -> None:
        self._listeners.append(listener)

    def get_settings(self) -> Settings:
        try:
            raw = self.store.get(SETTINGS_KEY)
        except StorageError as exc:
            logger.warning("Failed to read settings: %s", exc)
            return Settings.default()
        if raw is None:
            return Settings.default()
        if settings_errors(raw):
            logger.warning("Stored settings are malformed; using defaults")
            return Settings.default()
        return Settings.from_dict(raw)

    def save_settings(self, raw: Dict[str, Any]) -> Settings:
        settings = parse_settings(raw)
        self.store.set(SETTINGS_KEY, settings.to_dict())
        self._notify(settings)
        return settings

    def save_token(self, token: str) -> Settings:
        settings = self.get_settings()
        settings.token = validate_token_format(token)
        self.store.set(SETTINGS_KEY, settings.to_dict())
        return settings

    def lookup_credential(self) -> CredentialLookup:
        token = self.get_settings().token or (self.fallback_token() or "").strip()
        if not token:
            return NotConfigured()
        return Configured(token)

    def _notify(self, settings: Settings) -> None:
        for listener in list(self._listeners):
            try:
                listener(settings)
            except Exception as exc:
                logger.warning("Settings listener %r failed: %s", listener, exc)


__all__ = ["SETTINGS_KEY", "SettingsService", "SettingsListener"]
