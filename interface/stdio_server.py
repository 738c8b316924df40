#!/usr/bin/env python3
"""Newline-delimited JSON front end for the message handler.

Each stdin line is a message such as ``{"type": "GET_DATA", "dataType": "issues"}``;
each reply is one JSON envelope on stdout. Logs go to stderr so stdout stays clean.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from application.data_service import DataService
from application.settings_service import SettingsService
from config import DashboardConfig, get_env_token, load_config
from infrastructure.cache_manager import CacheManager
from infrastructure.github_rest import ApiClient, RetryPolicy, Transport
from infrastructure.kv_store import YamlFileStore
from interface.message_handler import MessageHandler, failure


def build_handler(cfg: DashboardConfig) -> MessageHandler:
    """Wire every component once; dependents receive references, not globals."""
    store = YamlFileStore(Path(cfg.store_path).expanduser())
    settings = SettingsService(store, fallback_token=get_env_token)
    cache = CacheManager(store)
    client = ApiClient(
        credential="",
        transport=Transport(timeout=cfg.timeout),
        retry_policy=RetryPolicy(max_retries=cfg.max_retries, initial_delay=cfg.initial_retry_delay),
        base_url=cfg.base_url,
    )
    data = DataService(client, cache, ttl=cfg.cache_ttl)
    return MessageHandler(settings, data, cache)


def run_stdio(handler: MessageHandler, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> int:
    for line in stdin:
        raw = line.strip()
        if not raw:
            continue
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as exc:
            resp = failure(f"Parse error: {exc}")
        else:
            resp = handler.handle(message)
        stdout.write(json.dumps(resp, ensure_ascii=False) + "\n")
        stdout.flush()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="github-dashboard-core", add_help=True)
    parser.add_argument("--config", type=str, help="YAML config file (default ~/.github_dashboard.yaml).")
    parser.add_argument("--store", type=str, help="Override the YAML store path.")
    parser.add_argument("--log-level", type=str, help="Logging level for stderr output.")
    args = parser.parse_args(argv)

    cfg = load_config(Path(args.config).expanduser() if args.config else None)
    if args.store:
        cfg.store_path = args.store
    if args.log_level:
        cfg.log_level = args.log_level
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, cfg.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    return run_stdio(build_handler(cfg))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
