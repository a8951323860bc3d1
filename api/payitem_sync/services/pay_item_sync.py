"""
Pay item reconciliation: a full resync of one business per run.

A run pulls the complete partner feed for a business and makes the local
pay_items table match it, user by user, inside a single transaction:

  1. collect every page from the partner
  2. for each record, resolve the local user by employee ID (unknown
     employees are skipped)
  3. the first time a user is seen in the run, clear their old pay items
  4. upsert the record on (external_id, business_id, user_id)

Either every change of the run is committed or none is. Failures surface as
SyncFailure; nothing here retries.

Runs for the same business must not overlap. The scheduled task walks the
enabled businesses one at a time.
"""

import logging
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import and_, delete, select
from sqlalchemy.orm import Session

from payitem_sync.core.config import settings
from payitem_sync.core.database import SessionLocal
from payitem_sync.core.exceptions import BusinessNotFound, PayItemSyncError, SyncFailure
from payitem_sync.models.business import Business, UserBusiness
from payitem_sync.models.pay_item import PayItem
from payitem_sync.models.user import User
from payitem_sync.schemas.partner import PartnerPayItem
from payitem_sync.services.partner_client import PayItemFeedClient
from payitem_sync.worker import celery_app

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


@dataclass
class SyncResult:
    business_external_id: str
    records_received: int = 0
    upserted: int = 0
    skipped: int = 0
    users_wiped: int = 0
    rows_deleted: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_amount(hours, pay_rate, deduction_percentage: float | None) -> Decimal:
    """hours × rate × (percentage / 100), rounded half-up to cents.

    A zero or missing percentage falls back to the configured default (30).
    """
    percentage = deduction_percentage or settings.pay_item_default_deduction_percentage
    raw = _to_decimal(hours) * _to_decimal(pay_rate) * _to_decimal(percentage) / Decimal(100)
    return raw.quantize(_CENT, rounding=ROUND_HALF_UP)


@contextmanager
def sync_transaction(session: Session) -> Iterator[Session]:
    """Commit on clean exit, roll back on any exception."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


def get_business_by_external_id(session: Session, external_id: str) -> Business:
    business = session.execute(
        select(Business).where(Business.external_id == external_id)
    ).scalar_one_or_none()
    if business is None:
        raise BusinessNotFound(external_id)
    return business


def _resolve_user(session: Session, business_id: int, employee_id: str) -> User | None:
    return session.execute(
        select(User)
        .join(UserBusiness, UserBusiness.user_id == User.id)
        .where(
            UserBusiness.business_id == business_id,
            User.external_id == employee_id,
        )
    ).scalars().first()


def _feed_keys_by_employee(records: list[PartnerPayItem]) -> dict[str, set[str]]:
    keys: dict[str, set[str]] = defaultdict(set)
    for record in records:
        keys[record.employee_id].add(record.external_id)
    return keys


def _wipe_user(
    session: Session,
    user_id: int,
    business_id: int,
    keep_external_ids: set[str],
    wipe_scope: str,
) -> int:
    """Delete the user's pay items that this run will not write again.

    Rows in this business whose external ID is in the feed are kept so the
    upsert updates them in place. Returns the number of rows deleted.
    """
    conditions = [PayItem.user_id == user_id]
    if wipe_scope == "business":
        conditions.append(PayItem.business_id == business_id)
    if keep_external_ids:
        conditions.append(
            ~and_(
                PayItem.business_id == business_id,
                PayItem.external_id.in_(sorted(keep_external_ids)),
            )
        )

    doomed = session.execute(select(PayItem.id).where(*conditions)).scalars().all()
    if doomed:
        session.execute(delete(PayItem).where(PayItem.id.in_(doomed)))
    return len(doomed)


def _upsert_pay_item(
    session: Session,
    business_id: int,
    user_id: int,
    record: PartnerPayItem,
    amount: Decimal,
) -> PayItem:
    pay_item = session.execute(
        select(PayItem).where(
            PayItem.external_id == record.external_id,
            PayItem.business_id == business_id,
            PayItem.user_id == user_id,
        )
    ).scalar_one_or_none()
    if pay_item is None:
        pay_item = PayItem(
            external_id=record.external_id,
            business_id=business_id,
            user_id=user_id,
        )
        session.add(pay_item)

    pay_item.amount = amount
    pay_item.pay_rate = record.pay_rate
    pay_item.hours = record.hours_worked
    pay_item.pay_date = record.pay_date
    return pay_item


# ── Reconciliation ────────────────────────────────────────────────────────────

def reconcile_pay_items(
    session: Session,
    business: Business,
    client: PayItemFeedClient | None = None,
    wipe_scope: str | None = None,
) -> SyncResult:
    """Replace the business's pay items, per user, with the partner feed.

    Commits once at the end. Any error rolls back every delete and upsert of
    the run and is re-raised as SyncFailure.
    """
    # Read before the transaction: a rollback expires the instance
    ext_id = business.external_id
    business_id = business.id
    deduction_percentage = business.deduction_percentage
    client = client or PayItemFeedClient(business)
    wipe_scope = wipe_scope or settings.pay_item_wipe_scope

    result = SyncResult(business_external_id=ext_id)
    logger.info("Starting pay item sync for %s", ext_id)

    try:
        with sync_transaction(session):
            records = client.collect()
            result.records_received = len(records)
            feed_keys = _feed_keys_by_employee(records)

            users: dict[str, User | None] = {}
            wiped_user_ids: set[int] = set()

            for record in records:
                if record.employee_id not in users:
                    users[record.employee_id] = _resolve_user(
                        session, business_id, record.employee_id
                    )
                user = users[record.employee_id]
                # Partner may report employees not provisioned locally yet
                if user is None:
                    logger.debug(
                        "Skipping pay item %s: no user %s in %s",
                        record.external_id, record.employee_id, ext_id,
                    )
                    result.skipped += 1
                    continue

                if user.id not in wiped_user_ids:
                    result.rows_deleted += _wipe_user(
                        session, user.id, business_id,
                        feed_keys[record.employee_id], wipe_scope,
                    )
                    wiped_user_ids.add(user.id)

                amount = calculate_amount(
                    record.hours_worked, record.pay_rate, deduction_percentage
                )
                _upsert_pay_item(session, business_id, user.id, record, amount)
                result.upserted += 1

            result.users_wiped = len(wiped_user_ids)
    except Exception as exc:
        logger.error("Pay item sync for %s rolled back: %s", ext_id, exc)
        raise SyncFailure(str(exc), ext_id) from exc

    logger.info(
        "Pay item sync committed for %s: %d received, %d upserted, %d skipped, %d deleted",
        ext_id, result.records_received, result.upserted, result.skipped, result.rows_deleted,
    )
    return result


# ── Celery tasks ──────────────────────────────────────────────────────────────

@celery_app.task(name="payitem_sync.services.pay_item_sync.sync_business")
def sync_business(business_external_id: str) -> dict:
    """Celery task: full pay item resync for one business."""
    with SessionLocal() as session:
        business = get_business_by_external_id(session, business_external_id)
        result = reconcile_pay_items(session, business)
    return result.as_dict()


@celery_app.task(name="payitem_sync.services.pay_item_sync.sync_enabled_businesses")
def sync_enabled_businesses() -> dict:
    """Celery beat task: resync every enabled business, one after another."""
    with SessionLocal() as session:
        external_ids = session.execute(
            select(Business.external_id)
            .where(Business.enabled.is_(True))
            .order_by(Business.id)
        ).scalars().all()

    logger.info("Starting scheduled pay item sync for %d businesses", len(external_ids))
    synced: list[str] = []
    failed: list[str] = []
    for ext_id in external_ids:
        try:
            sync_business(ext_id)
            synced.append(ext_id)
        except PayItemSyncError as exc:
            logger.error("Scheduled pay item sync failed for %s: %s", ext_id, exc)
            failed.append(ext_id)

    return {"synced": synced, "failed": failed}
