from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

DEFAULT_STATUS = "online"


class User(Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(100), default=DEFAULT_STATUS, server_default=DEFAULT_STATUS,
                                        nullable=False)

    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")

    # заявки, отправленные пользователем
    sent_requests = relationship(
        "Friend",
        foreign_keys="Friend.user_id",
        back_populates="requester",
        cascade="all, delete-orphan"
    )

    # заявки, полученные пользователем
    received_requests = relationship(
        "Friend",
        foreign_keys="Friend.friend_id",
        back_populates="target",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
