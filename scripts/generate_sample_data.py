#!/usr/bin/env python3
"""Generate a sample ledger and run it through the reconciliation engine.

Seeds an in-memory store with a generated ledger, runs the recurrence sync
and prints the resulting loan groups, entity groups and dashboard summary.
The final ledger is saved as JSON in the local/ folder.
"""

import argparse
import asyncio
import json
import sys
import uuid
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from finanai.dates import month_key
from finanai.generators import LedgerGenerator
from finanai.logging import setup_logging
from finanai.models.enums import ReceivableMode
from finanai.services import BackgroundTasks, TransactionService
from finanai.sinks import ConsoleSink
from finanai.sinks.serialization import to_dict
from finanai.store import CATEGORIES, TRANSACTIONS, InMemoryRecordStore
from finanai.views import (
    build_notifications,
    financial_summary,
    group_by_source_entity,
    group_loans,
    loan_stats,
)


def save_json(data: list, filename: str, output_dir: Path) -> None:
    """Save data to JSON file."""
    filepath = output_dir / filename
    serialized = [to_dict(item) for item in data]
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(serialized, f, indent=2, ensure_ascii=False)
    print(f"Saved {len(data)} records to {filepath}")


def print_section(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


async def run(args: argparse.Namespace) -> None:
    today = date.fromisoformat(args.today) if args.today else date.today()
    company_id = args.company or str(uuid.uuid4())

    generator = LedgerGenerator(company_id, user_id="sample-user", seed=args.seed)
    company = generator.generate_company()
    ledger = generator.generate_ledger(
        today, entries=args.entries, installments=args.installments, recurring=args.recurring
    )

    store = InMemoryRecordStore()
    tasks = BackgroundTasks(workers=args.workers)
    events = ConsoleSink() if args.events else None
    service = TransactionService(store, tasks=tasks, clock=lambda: today, events=events)

    await store.insert(CATEGORIES, [c.to_record() for c in generator.generate_categories()])

    print_section(f"Seeding {len(ledger)} transactions for {company.name}")
    for tx in ledger:
        await service.add_transaction(tx)
    await tasks.join()

    service.start_sync(company_id)
    await tasks.close()
    if events is not None:
        events.close()
    print(f"Store now holds {await store.count(TRANSACTIONS)} transactions")

    transactions = await service.list_transactions(company_id, today=today)
    categories = await service.list_categories(company_id)
    print(f"Categories: {', '.join(c.name for c in categories)}")

    print_section("Loans & card invoices")
    groups = group_loans(transactions)
    for group in groups:
        print(
            f"{group.description:30} {group.current_installment:>2}/{group.total_installments:<2} "
            f"remaining {group.remaining_amount:>10} next {group.next_due_date}"
        )
    stats = loan_stats(groups)
    print(f"Total debt: {stats.total_debt}  Monthly commitment: {stats.monthly_commitment}")

    print_section("Receivables by entity")
    for entity in group_by_source_entity(transactions, [company]):
        print(f"{entity.title:30} total {entity.total:>10} pending {entity.pending_count}")

    print_section("Alerts")
    for mode in ReceivableMode:
        for alert in build_notifications(transactions, today, mode):
            print(f"[{alert.level.value}] {alert.title}: {alert.message}")

    print_section(f"Summary {month_key(today)}")
    for name, value in to_dict(financial_summary(transactions, month_key(today))).items():
        print(f"{name + ':':22}{value}")

    output_dir = project_root / "local"
    output_dir.mkdir(exist_ok=True)
    save_json(transactions, "ledger.json", output_dir)


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate and reconcile a sample ledger")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--company", type=str, default=None, help="Company id (default: random)")
    parser.add_argument("--today", type=str, default=None, help="Reference date (YYYY-MM-DD)")
    parser.add_argument("--entries", type=int, default=20, help="One-off transactions")
    parser.add_argument("--installments", type=int, default=3, help="Installment purchases")
    parser.add_argument("--recurring", type=int, default=3, help="Recurring bills")
    parser.add_argument("--workers", type=int, default=1, help="Background workers")
    parser.add_argument("--events", action="store_true", help="Print published events")
    parser.add_argument("--log-level", type=str, default="INFO", help="Log level")
    args = parser.parse_args()

    setup_logging(args.log_level)
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
