from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MessageCreate(BaseModel):
    receiver_id: int
    body: str = ""


class MessageOut(BaseModel):
    """Формат сообщения в истории и в событии new_message."""
    id: int
    sender_id: int
    receiver_id: int
    body: str
    sender_name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
