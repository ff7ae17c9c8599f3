from pydantic import BaseModel
from datetime import datetime


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    read: bool
    related_id: int | None
    related_model: str | None
    created_at: datetime

    class Config:
        from_attributes = True
