"""
YAML loader for ledger configuration.

Responsibility:
    Turns raw YAML dicts into the frozen dataclasses of ``schema.py``.

Failure modes:
    * Unknown keys, wrong types or out-of-range values -> ``ValueError``.
    * Malformed YAML -> ``yaml.YAMLError`` propagates.
    * Missing file -> ``FileNotFoundError`` propagates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from settlement_config.schema import (
    AuditLogConfig,
    DatabaseConfig,
    LedgerConfig,
    LoggingConfig,
    ShareTotalPolicy,
)
from settlement_kernel.utils.hashing import hash_payload

_TOP_LEVEL_KEYS = frozenset(
    {"config_id", "version", "database", "share_total_policy", "audit", "logging"}
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{name}' must be a mapping")
    return value


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"'{name}' must be a positive integer, got {value!r}")
    return value


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    defaults = DatabaseConfig()
    url = data.get("url", defaults.url)
    if not isinstance(url, str) or not url:
        raise ValueError("'database.url' must be a non-empty string")
    return DatabaseConfig(
        url=url,
        echo=bool(data.get("echo", defaults.echo)),
        pool_size=_positive_int(data.get("pool_size", defaults.pool_size), "database.pool_size"),
        max_overflow=int(data.get("max_overflow", defaults.max_overflow)),
    )


def parse_audit(data: dict[str, Any]) -> AuditLogConfig:
    defaults = AuditLogConfig()
    default_limit = _positive_int(
        data.get("default_limit", defaults.default_limit), "audit.default_limit"
    )
    max_limit = _positive_int(data.get("max_limit", defaults.max_limit), "audit.max_limit")
    if default_limit > max_limit:
        raise ValueError(
            f"'audit.default_limit' ({default_limit}) exceeds 'audit.max_limit' ({max_limit})"
        )
    return AuditLogConfig(default_limit=default_limit, max_limit=max_limit)


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"'logging.level' is not a logging level: {level!r}")
    return LoggingConfig(level=level)


def parse_share_total_policy(value: Any) -> ShareTotalPolicy:
    try:
        return ShareTotalPolicy(str(value).lower())
    except ValueError:
        allowed = ", ".join(p.value for p in ShareTotalPolicy)
        raise ValueError(
            f"'share_total_policy' must be one of {allowed}, got {value!r}"
        ) from None


def parse_config(data: dict[str, Any]) -> LedgerConfig:
    """
    Build a LedgerConfig from a raw dict.

    Postconditions:
        - The returned config carries the checksum of ``data``.
    """
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    return LedgerConfig(
        config_id=str(data.get("config_id", "default")),
        version=_positive_int(data.get("version", 1), "version"),
        database=parse_database(_section(data, "database")),
        share_total_policy=parse_share_total_policy(
            data.get("share_total_policy", ShareTotalPolicy.WARN.value)
        ),
        audit=parse_audit(_section(data, "audit")),
        logging=parse_logging(_section(data, "logging")),
        checksum=hash_payload(data),
    )
