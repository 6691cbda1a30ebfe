"""
LedgerPolicy -- the configuration values the kernel acts on.

The kernel never reads configuration itself; settlement_config.bridges turns
a LedgerConfig into one of these.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerPolicy:
    # Reject writes that push active shares above 100 instead of warning
    enforce_share_total: bool = False
    audit_default_limit: int = 50
    audit_max_limit: int = 500
