"""
settlement_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the resulting LedgerConfig
    by injection and never read files themselves.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` -- schema or range validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``settlement_config_loaded`` log entry with the config id, version and
    checksum, tying ledger writes back to the configuration in force.
"""

from __future__ import annotations

import logging
from pathlib import Path

from settlement_config.loader import load_yaml_file, parse_config
from settlement_config.schema import (
    AuditLogConfig,
    DatabaseConfig,
    LedgerConfig,
    LoggingConfig,
    ShareTotalPolicy,
)

_logger = logging.getLogger("settlement_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_CONFIG_PATH = _DEFAULT_CONFIG_DIR / "default.yaml"


def get_active_config(path: Path | str | None = None) -> LedgerConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML file to load.  Defaults to ``sets/default.yaml``.

    Returns:
        Frozen LedgerConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the configuration is invalid.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(config_path))

    _logger.info(
        "settlement_config_loaded",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "share_total_policy": config.share_total_policy.value,
            "source_path": str(config_path),
        },
    )
    return config


__all__ = [
    "AuditLogConfig",
    "DatabaseConfig",
    "LedgerConfig",
    "LoggingConfig",
    "ShareTotalPolicy",
    "get_active_config",
]
