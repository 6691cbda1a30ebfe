"""
Settlement Kernel - Partner Profit-Settlement Ledger

An append-only ledger for revenue-sharing partners with:
- Period profit snapshots allocated by partner share
- Payments, adjustments and settlements recorded per partner
- Non-destructive voiding (flag flip, never deletion)
- Balances derived from primary records on every read
- Full traceability via an append-only audit log
"""

__version__ = "0.1.0"
