from pydantic import BaseModel


class SyncQueuedResponse(BaseModel):
    status: str = "queued"
    business_external_id: str
    task_id: str
