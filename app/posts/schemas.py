from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PostCreate(BaseModel):
    content: str = ""
    image: Optional[str] = None


class CommentCreate(BaseModel):
    body: str = ""


class PostOut(BaseModel):
    id: int
    user_id: int
    content: str
    image: Optional[str] = None
    created_at: datetime
    username: str
    avatar: Optional[str] = None
    likes_count: int
    comments_count: int
    is_liked: bool

    model_config = ConfigDict(from_attributes=True)


class CommentOut(BaseModel):
    id: int
    user_id: int
    post_id: int
    body: str
    created_at: datetime
    username: str
    avatar: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CreatedOut(BaseModel):
    id: int
    message: str


class LikeOut(BaseModel):
    liked: bool
    message: str
