#!/usr/bin/env python3
"""Run the recurrence sync for companies stored in PostgreSQL.

Connection settings come from the environment (see ``FinanAIConfig``).
Events are published to Kafka when --kafka is given.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from finanai.config import FinanAIConfig
from finanai.exceptions import FinanAIError
from finanai.logging import setup_logging
from finanai.services import ProjectionEngine, ReconciliationSync
from finanai.store.postgres import PostgresRecordStore

logger = logging.getLogger(__name__)


async def run(args: argparse.Namespace, config: FinanAIConfig) -> int:
    store = await PostgresRecordStore.connect(config.postgres.connection_string)
    sink = None
    try:
        if args.create_schema:
            await store.create_schema()

        if args.kafka:
            from finanai.sinks.kafka import KafkaSink

            sink = KafkaSink(config.kafka)

        engine = ProjectionEngine(store, events=sink)
        sync = ReconciliationSync(store, engine, lookback_months=config.sync.lookback_months)

        failures = 0
        for company_id in args.companies:
            report = await sync.sync(company_id)
            failures += report.failures
            print(
                f"{company_id}: {report.series} series, "
                f"{report.inserted} inserted, {report.failures} failures"
            )
        return 1 if failures else 0
    finally:
        if sink is not None:
            sink.close()
        await store.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Reconcile recurring and installment series")
    parser.add_argument("companies", nargs="+", help="Company ids to sync")
    parser.add_argument("--create-schema", action="store_true", help="Create tables first")
    parser.add_argument("--kafka", action="store_true", help="Publish events to Kafka")
    args = parser.parse_args()

    config = FinanAIConfig.from_env()
    setup_logging(config.log_level, config.log_format)

    try:
        sys.exit(asyncio.run(run(args, config)))
    except FinanAIError as e:
        logger.error("Sync failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
