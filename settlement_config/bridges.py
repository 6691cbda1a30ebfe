"""
Config -> Kernel Bridges.

Functions that convert a LedgerConfig into kernel-compatible inputs.  These
live in settlement_config (the producer) because the kernel must NEVER import
settlement_config.

Usage:
    from settlement_config.bridges import build_ledger_policy

    config = get_active_config()
    orchestrator = SettlementOrchestrator(session, source, policy=build_ledger_policy(config))
"""

from __future__ import annotations

from settlement_config.schema import LedgerConfig, ShareTotalPolicy
from settlement_kernel.domain.policy import LedgerPolicy


def build_ledger_policy(config: LedgerConfig) -> LedgerPolicy:
    return LedgerPolicy(
        enforce_share_total=config.share_total_policy == ShareTotalPolicy.ENFORCE,
        audit_default_limit=config.audit.default_limit,
        audit_max_limit=config.audit.max_limit,
    )


def engine_kwargs(config: LedgerConfig) -> dict:
    """Keyword arguments for settlement_kernel.db.build_engine()."""
    return {
        "database_url": config.database.url,
        "echo": config.database.echo,
        "pool_size": config.database.pool_size,
        "max_overflow": config.database.max_overflow,
    }
