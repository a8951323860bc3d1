from celery import Celery
from celery.schedules import crontab

from payitem_sync.core.config import settings

celery_app = Celery(
    "payitem_sync",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

# ─── Scheduled tasks ──────────────────────────
celery_app.conf.beat_schedule = {
    "sync-pay-items-daily": {
        "task": "payitem_sync.services.pay_item_sync.sync_enabled_businesses",
        "schedule": crontab(
            hour=settings.sync_schedule_hour, minute=settings.sync_schedule_minute
        ),
    },
}

# autodiscover_tasks() only looks for a "tasks.py" file, which we don't use.
celery_app.conf.include = [
    "payitem_sync.services.pay_item_sync",
]
