from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.users.models import User


class UserDAO(BaseDAO):
    model = User

    @classmethod
    async def find_others(cls, session: AsyncSession, user_id: int) -> list[User]:
        q = select(cls.model).where(cls.model.id != user_id).order_by(cls.model.id)
        res = await session.execute(q)
        return list(res.scalars().all())

    @classmethod
    async def update_profile(cls, session: AsyncSession, user_id: int, **values) -> Optional[User]:
        """Возвращает уже ОБНОВЛЁННОГО пользователя (или None, если не найден)."""
        updated = await cls.update(session, {"id": user_id}, **values)
        if not updated:
            return None
        user = await cls.find_one_or_none_by_id(session, user_id)
        if user is not None:
            await session.refresh(user)
        return user
