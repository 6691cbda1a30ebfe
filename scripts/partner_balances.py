#!/usr/bin/env python3
"""
Print every partner's balance summary for a business.

Usage:
    python3 scripts/partner_balances.py --business-id biz-1
    python3 scripts/partner_balances.py --business-id biz-1 \
        --database-url sqlite:///ledger.db --create-tables
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from settlement_config import get_active_config  # noqa: E402
from settlement_config.bridges import build_ledger_policy, engine_kwargs  # noqa: E402
from settlement_kernel.db.engine import (  # noqa: E402
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from settlement_kernel.domain.finance_source import FixedTotalsSource  # noqa: E402
from settlement_kernel.exceptions import SettlementKernelError  # noqa: E402
from settlement_kernel.logging_config import configure_logging  # noqa: E402
from settlement_kernel.services.settlement_orchestrator import (  # noqa: E402
    SettlementOrchestrator,
)

W = 104


def _fmt(v: Decimal) -> str:
    return f"{v:,.2f}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show partner profit, payments and balances for a business.",
    )
    parser.add_argument("--business-id", required=True, help="Business to report on")
    parser.add_argument("--config", help="Ledger configuration YAML (default: bundled default)")
    parser.add_argument("--database-url", help="Override the configured database URL")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create ledger tables before reading (empty database bootstrap)",
    )
    parser.add_argument(
        "--active-only",
        action="store_true",
        help="Hide inactive partners",
    )
    return parser


def render_summaries(summaries, business_id: str, out=None) -> None:
    out = out or sys.stdout
    print(file=out)
    print("=" * W, file=out)
    print(f"PARTNER BALANCES - {business_id}".center(W), file=out)
    print("=" * W, file=out)
    print(
        f"  {'Partner':<24} {'Share %':>8} {'Profit due':>14} {'Paid':>14} "
        f"{'Adjust':>12} {'Outstanding':>14} {'Credit':>12}",
        file=out,
    )
    print(f"  {'-'*24} {'-'*8} {'-'*14} {'-'*14} {'-'*12} {'-'*14} {'-'*12}", file=out)

    for s in summaries:
        name = s.partner.name if s.partner.is_active else f"{s.partner.name} (inactive)"
        print(
            f"  {name[:24]:<24} {s.partner.profit_share_percentage:>8.2f} "
            f"{_fmt(s.total_profit_due):>14} {_fmt(s.total_paid):>14} "
            f"{_fmt(s.total_adjustments):>12} {_fmt(s.outstanding_balance):>14} "
            f"{_fmt(s.credit_balance):>12}",
            file=out,
        )

    print(file=out)
    print(f"  Total: {len(summaries)} partner(s)", file=out)
    print(file=out)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_active_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"  ERROR: invalid configuration: {exc}", file=sys.stderr)
        return 2

    configure_logging(level=config.logging.level_number)

    kwargs = engine_kwargs(config)
    if args.database_url:
        kwargs["database_url"] = args.database_url

    try:
        engine = init_engine_from_url(**kwargs)
        if args.create_tables:
            create_tables(engine)
    except Exception as exc:
        print(f"  ERROR: cannot open database: {exc}", file=sys.stderr)
        reset_engine()
        return 1

    session = get_session()
    try:
        orchestrator = SettlementOrchestrator(
            session,
            FixedTotalsSource(),
            policy=build_ledger_policy(config),
        )
        summaries = orchestrator.get_all_partner_summaries(args.business_id)
        if args.active_only:
            summaries = [s for s in summaries if s.partner.is_active]

        if not summaries:
            print(f"  No partners found for business {args.business_id}.")
            return 0

        render_summaries(summaries, args.business_id)
        return 0
    except SettlementKernelError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    finally:
        session.close()
        reset_engine()


if __name__ == "__main__":
    sys.exit(main())
