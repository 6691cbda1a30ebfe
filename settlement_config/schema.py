"""
LedgerConfig schema.

The YAML fragments under ``sets/`` are parsed into these frozen types by the
loader.  Nothing at runtime reads YAML directly; callers hold a LedgerConfig.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum


class ShareTotalPolicy(str, Enum):
    """What to do when active partner shares do not sum to 100."""

    WARN = "warn"  # log and continue
    ENFORCE = "enforce"  # reject totals above 100


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings handed to build_engine()."""

    url: str = "sqlite:///settlement_ledger.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10


@dataclass(frozen=True)
class AuditLogConfig:
    """Limits for audit log listings."""

    default_limit: int = 50
    max_limit: int = 500


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


@dataclass(frozen=True)
class LedgerConfig:
    """Complete runtime configuration of the settlement ledger."""

    config_id: str = "default"
    version: int = 1
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    share_total_policy: ShareTotalPolicy = ShareTotalPolicy.WARN
    audit: AuditLogConfig = field(default_factory=AuditLogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""

    @property
    def enforces_share_total(self) -> bool:
        return self.share_total_policy == ShareTotalPolicy.ENFORCE
