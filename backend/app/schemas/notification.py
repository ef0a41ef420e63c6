from typing import List, Optional
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    comment: Optional[str] = None
    type: str  # info | warning | error
    timestamp: str
    read: bool


class NotificationsList(BaseModel):
    unread: int
    items: List[NotificationResponse]
