from slowapi import Limiter
from slowapi.util import get_remote_address

from payitem_sync.core.config import settings

# Backed by Redis in deployment so limits survive across worker restarts
limiter = Limiter(key_func=get_remote_address, storage_uri=settings.rate_limit_storage_uri)
