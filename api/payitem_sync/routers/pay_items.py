import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from payitem_sync.core.database import get_db
from payitem_sync.core.deps import require_internal_key
from payitem_sync.core.exceptions import BusinessNotFound
from payitem_sync.core.limiter import limiter
from payitem_sync.schemas.sync import SyncQueuedResponse
from payitem_sync.services.pay_item_sync import get_business_by_external_id, sync_business

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses", tags=["pay-items"])


@router.post(
    "/{external_id}/pay-items/sync",
    response_model=SyncQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit("10/minute")
def trigger_pay_item_sync(
    request: Request,
    external_id: str,
    db: Session = Depends(get_db),
    _key: str = Depends(require_internal_key),
):
    """Queue a full pay item resync for one business."""
    try:
        business = get_business_by_external_id(db, external_id)
    except BusinessNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    if not business.enabled:
        logger.info("Queueing pay item sync for disabled business %s", external_id)

    task = sync_business.delay(business.external_id)
    logger.info("Queued pay item sync for %s (task %s)", external_id, task.id)
    return SyncQueuedResponse(business_external_id=business.external_id, task_id=task.id)
