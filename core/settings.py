"""Dashboard settings document and its validation."""

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

import jsonschema

from .errors import ValidationFailure


DEFAULT_CACHE_TTL = 5 * 60
MIN_TOKEN_LENGTH = 40
_TOKEN_RE = re.compile(r"^[A-Za-z0-9_]+$")

LAYOUT_ITEM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "enabled": {"type": "boolean"},
        "order": {"type": "number"},
    },
    "required": ["id", "enabled", "order"],
}

SETTINGS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "layout": {"type": "array", "items": LAYOUT_ITEM_SCHEMA},
        "token": {"type": "string"},
        "cache": {"type": "object"},
    },
    "required": ["layout"],
}


@dataclass
class LayoutItem:
    id: str
    enabled: bool = True
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "enabled": self.enabled, "order": self.order}


@dataclass
class Settings:
    layout: List[LayoutItem] = field(default_factory=list)
    token: str = ""
    cache: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "Settings":
        return cls(
            layout=[
                LayoutItem("repositories", True, 0),
                LayoutItem("issues", True, 1),
                LayoutItem("projects", True, 2),
            ],
        )

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Settings":
        """Build settings from an already validated mapping."""
        return cls(
            layout=[LayoutItem(item["id"], item["enabled"], item["order"]) for item in raw.get("layout", [])],
            token=raw.get("token", "") or "",
            cache=copy.deepcopy(raw.get("cache") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layout": [item.to_dict() for item in self.layout],
            "token": self.token,
            "cache": copy.deepcopy(self.cache),
        }

    def enabled_sections(self) -> List[str]:
        return [item.id for item in sorted(self.layout, key=lambda item: item.order) if item.enabled]


def settings_errors(raw: Any) -> List[str]:
    """Return human readable schema violations; empty when ``raw`` is valid."""
    validator = jsonschema.Draft7Validator(SETTINGS_SCHEMA)
    errors = []
    for err in sorted(validator.iter_errors(raw), key=lambda e: [str(part) for part in e.absolute_path]):
        location = ".".join(str(part) for part in err.absolute_path)
        errors.append(f"{location}: {err.message}" if location else err.message)
    return errors


def parse_settings(raw: Any) -> Settings:
    errors = settings_errors(raw)
    if errors:
        raise ValidationFailure("Invalid settings: " + "; ".join(errors), errors)
    return Settings.from_dict(raw)


def token_format_errors(token: Any) -> List[str]:
    # Classic PATs are 40 chars, fine-grained ones are longer.
    if not token or not isinstance(token, str):
        return ["token must be a non-empty string"]
    errors = []
    if len(token) < MIN_TOKEN_LENGTH:
        errors.append(f"token is shorter than {MIN_TOKEN_LENGTH} characters")
    if not _TOKEN_RE.match(token):
        errors.append("token contains characters other than letters, digits and underscores")
    return errors


def validate_token_format(token: Any) -> str:
    errors = token_format_errors(token)
    if errors:
        raise ValidationFailure("Invalid token: " + "; ".join(errors), errors)
    return token


__all__ = [
    "DEFAULT_CACHE_TTL",
    "SETTINGS_SCHEMA",
    "LayoutItem",
    "Settings",
    "settings_errors",
    "parse_settings",
    "token_format_errors",
    "validate_token_format",
]
