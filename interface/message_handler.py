"""Routes caller requests to the settings and data services.

Every request is answered with ``{"success": True, "data": ...}`` or
``{"success": False, "error": "..."}``; no exception escapes ``handle``.
"""

import logging
from typing import Any, Callable, Dict

from application.data_service import DataService
from application.settings_service import SettingsService
from core.errors import ApiError, UnknownMessageType
from core.messages import (
    Configured,
    CredentialLookup,
    GetData,
    GetSettings,
    Message,
    NotConfigured,
    RefreshData,
    SaveSettings,
    SaveToken,
    ValidateToken,
    parse_message,
)
from infrastructure.cache_manager import CacheManager

logger = logging.getLogger("dashboard.handler")


def success(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


def failure(error: str) -> Dict[str, Any]:
    return {"success": False, "error": error}


class MessageHandler:
    def __init__(self, settings: SettingsService, data: DataService, cache: CacheManager) -> None:
        self.settings = settings
        self.data = data
        self.cache = cache
        self._handlers: Dict[type, Callable[[Any], Any]] = {
            GetSettings: self._get_settings,
            SaveSettings: self._save_settings,
            SaveToken: self._save_token,
            ValidateToken: self._validate_token,
            GetData: self._get_data,
            RefreshData: self._refresh_data,
        }

    def handle(self, raw: Any) -> Dict[str, Any]:
        try:
            message = parse_message(raw)
            logger.debug("Message received: %s", type(message).__name__)
            return success(self.dispatch(message))
        except ApiError as exc:
            logger.error("API request failed: %r", exc)
            return failure(f"API Error ({exc.status_code}): {exc.message}")
        except Exception as exc:
            logger.error("Error handling message: %s", exc)
            return failure(str(exc))

    def dispatch(self, message: Message) -> Any:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise UnknownMessageType(f"Unknown message type: {type(message).__name__}")
        return handler(message)

    def _get_settings(self, message: GetSettings) -> Dict[str, Any]:
        return self.settings.get_settings().to_dict()

    def _save_settings(self, message: SaveSettings) -> Dict[str, Any]:
        saved = self.settings.save_settings(message.settings)
        if saved.token:
            self.data.client.set_credential(saved.token)
        return {"success": True}

    def _save_token(self, message: SaveToken) -> Dict[str, Any]:
        saved = self.settings.save_token(message.token)
        self.data.client.set_credential(saved.token)
        return {"success": True}

    def _activate_credential(self) -> CredentialLookup:
        lookup = self.settings.lookup_credential()
        if isinstance(lookup, Configured):
            self.data.client.set_credential(lookup.token)
        return lookup

    def _validate_token(self, message: ValidateToken) -> Dict[str, Any]:
        lookup = self._activate_credential()
        if isinstance(lookup, NotConfigured):
            return {"valid": False, "message": lookup.reason}
        return self.data.validate_token()

    def _get_data(self, message: GetData) -> Dict[str, Any]:
        lookup = self._activate_credential()
        if isinstance(lookup, NotConfigured):
            raise RuntimeError(lookup.reason)
        return self.data.get_dashboard_data(message.kind)

    def _refresh_data(self, message: RefreshData) -> Dict[str, Any]:
        cleared = self.cache.clear_all()
        return {"success": True, "message": "Cache cleared", "cleared": cleared}


__all__ = ["MessageHandler", "success", "failure"]
