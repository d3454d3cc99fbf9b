from pydantic import Field
from typing import Optional
from datetime import datetime
from utils.response_helpers import CamelModel


class ChatMessageIn(CamelModel):
    """Payload of a client's chatMessage event"""
    group_id: Optional[str] = None
    sender_id: Optional[str] = Field(default=None, max_length=100)
    sender_name: Optional[str] = Field(default=None, max_length=200)
    message: Optional[str] = None


class ChatMessageResponse(CamelModel):
    id: int
    group_id: str
    sender_id: str
    sender_name: str
    message: str
    timestamp: datetime
