from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml

CONFIG_PATH = Path(os.environ.get("GITHUB_DASHBOARD_CONFIG", Path.home() / ".github_dashboard.yaml"))
DEFAULT_STORE_PATH = Path.home() / ".cache" / "github_dashboard" / "store.yaml"
ENV_PREFIX = "GITHUB_DASHBOARD_"
logger = logging.getLogger("dashboard.config")


@dataclass
class DashboardConfig:
    base_url: str = "https://api.github.com"
    timeout: float = 30.0
    max_retries: int = 3
    initial_retry_delay: float = 1.0
    cache_ttl: float = 300.0
    store_path: str = str(DEFAULT_STORE_PATH)
    log_level: str = "WARNING"


def _load_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Path | None = None, environ: Dict[str, str] | None = None) -> DashboardConfig:
    """Defaults, then the YAML file, then ``GITHUB_DASHBOARD_*`` variables."""
    env = os.environ if environ is None else environ
    raw = _load_config(path or CONFIG_PATH)
    cfg = DashboardConfig()
    for f in fields(DashboardConfig):
        value = env.get(ENV_PREFIX + f.name.upper(), raw.get(f.name))
        if value is None or value == "":
            continue
        caster = type(getattr(cfg, f.name))
        try:
            setattr(cfg, f.name, caster(value))
        except (TypeError, ValueError):
            logger.warning("Invalid value for %s: %r; keeping %r", f.name, value, getattr(cfg, f.name))
    return cfg


def get_env_token(environ: Dict[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    return (env.get(ENV_PREFIX + "TOKEN") or env.get("GITHUB_TOKEN") or "").strip()
