"""
Run the pay item sync for one business from the command line.

    docker exec payitem-sync-api-1 bash -c \\
        "export PYTHONPATH=/app && python -m payitem_sync.scripts.sync_pay_items <business-external-id>"

Pass --queue to hand the run to the Celery worker instead of running it in
this process.
"""
import argparse
import logging
import sys

from payitem_sync.core.config import settings
from payitem_sync.core.database import SessionLocal
from payitem_sync.core.exceptions import BusinessNotFound, PayItemSyncError
from payitem_sync.services.pay_item_sync import (
    get_business_by_external_id,
    reconcile_pay_items,
    sync_business,
)

logger = logging.getLogger("sync_pay_items")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sync_pay_items",
        description="Runs the pay item sync for the provided business External ID",
    )
    parser.add_argument("business", help="External ID of the business to sync")
    parser.add_argument(
        "--queue",
        action="store_true",
        help="Enqueue the sync on the Celery worker instead of running it here",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    with SessionLocal() as db:
        # Confirm the business exists before launching anything
        try:
            business = get_business_by_external_id(db, args.business)
        except BusinessNotFound:
            print("The business External ID that you provided does not exist", file=sys.stderr)
            return 1

        try:
            if args.queue:
                task = sync_business.delay(business.external_id)
                print(f"Sync queued for {args.business} (task {task.id})")
                return 0
            result = reconcile_pay_items(db, business)
        except PayItemSyncError as exc:
            print(f"An unexpected error occurred: {exc}", file=sys.stderr)
            return 1

    logger.info(
        "%d received, %d upserted, %d skipped, %d deleted",
        result.records_received, result.upserted, result.skipped, result.rows_deleted,
    )
    print(f"Sync run successfully for {args.business}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=getattr(logging, settings.api_log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    sys.exit(main())
