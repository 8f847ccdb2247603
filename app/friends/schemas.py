from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from app.friends.models import FriendStatusEnum

RequestDirection = Literal["sent", "received"]


class FriendOut(BaseModel):
    id: int
    username: str
    email: str
    avatar: Optional[str] = None
    status: FriendStatusEnum
    request_direction: RequestDirection

    model_config = ConfigDict(from_attributes=True)


class UserSearchResult(BaseModel):
    id: int
    username: str
    email: str
    avatar: Optional[str] = None
    friend_status: Optional[FriendStatusEnum] = None
    request_direction: Optional[RequestDirection] = None

    model_config = ConfigDict(from_attributes=True)
