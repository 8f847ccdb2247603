from enum import Enum

from sqlalchemy import Integer, ForeignKey, UniqueConstraint, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.database import Base


class FriendStatusEnum(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class Friend(Base):
    """Заявка в друзья: user_id отправил, friend_id получил."""
    __tablename__ = "friends"

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
                                         index=True)
    friend_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
                                           index=True)
    status: Mapped[FriendStatusEnum] = mapped_column(
        SQLEnum(FriendStatusEnum, name="friendstatusenum", values_callable=lambda e: [m.value for m in e]),
        default=FriendStatusEnum.PENDING, nullable=False
    )
    # пара id без учёта направления, чтобы A->B и B->A не могли существовать одновременно
    pair_low: Mapped[int] = mapped_column(Integer, nullable=False)
    pair_high: Mapped[int] = mapped_column(Integer, nullable=False)

    requester = relationship("User", foreign_keys="Friend.user_id", back_populates="sent_requests")
    target = relationship("User", foreign_keys="Friend.friend_id", back_populates="received_requests")

    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="uq_user_friend"),
        UniqueConstraint("pair_low", "pair_high", name="uq_friend_pair"),
        CheckConstraint("user_id <> friend_id", name="ck_friend_not_self"),
    )

    def __init__(self, **kwargs):
        user_id, friend_id = kwargs.get("user_id"), kwargs.get("friend_id")
        if user_id is not None and friend_id is not None:
            kwargs.setdefault("pair_low", min(user_id, friend_id))
            kwargs.setdefault("pair_high", max(user_id, friend_id))
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<Friend {self.user_id}->{self.friend_id} status={self.status}>"
