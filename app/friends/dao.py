from sqlalchemy import String, select, update, delete, func, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.friends.models import Friend, FriendStatusEnum
from app.users.models import User

SEARCH_LIMIT = 20


def _between(user_id: int, other_id: int):
    return or_(
        and_(Friend.user_id == user_id, Friend.friend_id == other_id),
        and_(Friend.user_id == other_id, Friend.friend_id == user_id),
    )


class FriendDAO:
    @staticmethod
    async def add_request(session: AsyncSession, user_id: int, friend_id: int) -> Friend:
        new_request = Friend(user_id=user_id, friend_id=friend_id, status=FriendStatusEnum.PENDING)
        session.add(new_request)
        try:
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
        return new_request

    @staticmethod
    async def exists(session: AsyncSession, user_id: int, friend_id: int) -> bool:
        query = select(Friend.id).where(_between(user_id, friend_id))
        result = await session.execute(query)
        return result.first() is not None

    @staticmethod
    async def accept(session: AsyncSession, requester_id: int, target_id: int) -> int:
        """
        Переводит заявку requester -> target из pending в accepted одним условным UPDATE.
        Возвращает число изменённых строк (0, если такой заявки нет).
        """
        query = (
            update(Friend)
            .where(
                Friend.user_id == requester_id,
                Friend.friend_id == target_id,
                Friend.status == FriendStatusEnum.PENDING,
            )
            .values(status=FriendStatusEnum.ACCEPTED)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await session.execute(query)
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
        return result.rowcount

    @staticmethod
    async def remove(session: AsyncSession, user_id: int, other_id: int) -> int:
        query = delete(Friend).where(_between(user_id, other_id)).execution_options(synchronize_session=False)
        try:
            result = await session.execute(query)
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
        return result.rowcount or 0

    @staticmethod
    async def get_friends(session: AsyncSession, user_id: int) -> list[dict]:
        """Все связи пользователя (в любую сторону, любой статус), новые сверху."""
        query = (
            select(Friend, User)
            .join(User, or_(
                and_(Friend.user_id == user_id, User.id == Friend.friend_id),
                and_(Friend.friend_id == user_id, User.id == Friend.user_id),
            ))
            .order_by(Friend.created_at.desc(), Friend.id.desc())
        )
        result = await session.execute(query)
        return [
            {
                "id": user.id,
                "username": user.username,
                "email": user.email,
                "avatar": user.avatar,
                "status": friend.status,
                "request_direction": "sent" if friend.user_id == user_id else "received",
            }
            for friend, user in result.all()
        ]

    @staticmethod
    async def search_users(session: AsyncSession, user_id: int, term: str, limit: int = SEARCH_LIMIT) -> list[dict]:
        term = term.lower()
        query = (
            select(User, Friend.status, Friend.user_id)
            .outerjoin(Friend, or_(
                and_(Friend.user_id == user_id, Friend.friend_id == User.id),
                and_(Friend.friend_id == user_id, Friend.user_id == User.id),
            ))
            .where(
                or_(
                    func.lower(User.username, type_=String).contains(term, autoescape=True),
                    func.lower(User.email, type_=String).contains(term, autoescape=True),
                ),
                User.id != user_id,
            )
            .order_by(User.username)
            .limit(limit)
        )
        result = await session.execute(query)

        found = []
        for user, friend_status, requester_id in result.all():
            direction = None
            if friend_status == FriendStatusEnum.PENDING:
                direction = "sent" if requester_id == user_id else "received"
            found.append({
                "id": user.id,
                "username": user.username,
                "email": user.email,
                "avatar": user.avatar,
                "friend_status": friend_status,
                "request_direction": direction,
            })
        return found
