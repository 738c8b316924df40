"""Closed set of request kinds accepted by the message handler."""

from dataclasses import dataclass
from typing import Any, Dict, Union

from .errors import UnknownMessageType, ValidationFailure
from .models import DataKind


GET_SETTINGS = "GET_SETTINGS"
SAVE_SETTINGS = "SAVE_SETTINGS"
SAVE_TOKEN = "SAVE_TOKEN"
VALIDATE_TOKEN = "VALIDATE_TOKEN"
GET_DATA = "GET_DATA"
REFRESH_DATA = "REFRESH_DATA"


@dataclass(frozen=True)
class GetSettings:
    pass


@dataclass(frozen=True)
class SaveSettings:
    settings: Dict[str, Any]


@dataclass(frozen=True)
class SaveToken:
    token: str


@dataclass(frozen=True)
class ValidateToken:
    pass


@dataclass(frozen=True)
class GetData:
    kind: DataKind = DataKind.ALL


@dataclass(frozen=True)
class RefreshData:
    pass


Message = Union[GetSettings, SaveSettings, SaveToken, ValidateToken, GetData, RefreshData]


def _parse_get_data(raw: Dict[str, Any]) -> GetData:
    data_type = raw.get("dataType", raw.get("data_type", DataKind.ALL.value))
    try:
        return GetData(DataKind(data_type))
    except ValueError:
        allowed = ", ".join(kind.value for kind in DataKind)
        raise ValidationFailure(f"Invalid dataType: {data_type!r} (expected one of {allowed})") from None


def _parse_save_settings(raw: Dict[str, Any]) -> SaveSettings:
    settings = raw.get("settings")
    if not isinstance(settings, dict):
        raise ValidationFailure("settings must be an object")
    return SaveSettings(settings)


def _parse_save_token(raw: Dict[str, Any]) -> SaveToken:
    token = raw.get("token")
    if not isinstance(token, str):
        raise ValidationFailure("token must be a string")
    return SaveToken(token.strip())


_PARSERS = {
    GET_SETTINGS: lambda raw: GetSettings(),
    SAVE_SETTINGS: _parse_save_settings,
    SAVE_TOKEN: _parse_save_token,
    VALIDATE_TOKEN: lambda raw: ValidateToken(),
    GET_DATA: _parse_get_data,
    REFRESH_DATA: lambda raw: RefreshData(),
}


def parse_message(raw: Any) -> Message:
    """Turn a raw ``{"type": ...}`` mapping into its message variant."""
    if not isinstance(raw, dict):
        raise ValidationFailure("message must be an object")
    msg_type = raw.get("type")
    parser = _PARSERS.get(msg_type)
    if parser is None:
        raise UnknownMessageType(f"Unknown message type: {msg_type}")
    return parser(raw)


@dataclass(frozen=True)
class Configured:
    token: str


@dataclass(frozen=True)
class NotConfigured:
    reason: str = "Token is not configured"


CredentialLookup = Union[Configured, NotConfigured]


__all__ = [
    "GET_SETTINGS",
    "SAVE_SETTINGS",
    "SAVE_TOKEN",
    "VALIDATE_TOKEN",
    "GET_DATA",
    "REFRESH_DATA",
    "GetSettings",
    "SaveSettings",
    "SaveToken",
    "ValidateToken",
    "GetData",
    "RefreshData",
    "Message",
    "parse_message",
    "Configured",
    "NotConfigured",
    "CredentialLookup",
]
