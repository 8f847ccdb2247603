import re
from typing import Any, Optional

from sqlalchemy import select, update as sqlalchemy_update, delete as sqlalchemy_delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession


def is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


def violated_field(error: IntegrityError, *fields: str) -> Optional[str]:
    """
    Имя поля, уникальность которого нарушена, по тексту ошибки СУБД.

    Смотрим только на имя колонки / ключа ("users.email", "Key (email)"),
    сами дублирующиеся значения из текста вырезаем.
    """
    if not is_unique_violation(error):
        return None
    message = str(error.orig).lower()
    # postgres: Key (email)=(username@x.com) already exists
    message = re.sub(r"\)=\(.*", ")", message)
    # mysql: Duplicate entry 'username@x.com' for key 'users.email'
    message = re.sub(r"entry '.*?' for key", "for key", message)
    for field in fields:
        if re.search(rf"\b{re.escape(field)}\b", message):
            return field
    return None


class BaseDAO:
    model = None

    @classmethod
    async def find_one_or_none_by_id(cls, session: AsyncSession, model_id: int):
        query = select(cls.model).filter_by(id=model_id)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    @classmethod
    async def find_one_or_none(cls, session: AsyncSession, **filter_by):
        query = select(cls.model).filter_by(**filter_by)
        result = await session.execute(query)
        return result.scalar_one_or_none()

    @classmethod
    async def add(cls, session: AsyncSession, **values):
        new_instance = cls.model(**values)
        session.add(new_instance)
        try:
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
        await session.refresh(new_instance)
        return new_instance

    @classmethod
    async def update(cls, session: AsyncSession, filter_by: dict[str, Any], **values) -> Optional[int]:
        """Обновляет строки по filter_by. Возвращает число затронутых строк."""
        if not values:
            return None
        query = sqlalchemy_update(cls.model)\
            .where(*[getattr(cls.model, k) == v for k, v in filter_by.items()])\
            .values(**values)\
            .execution_options(synchronize_session=False)
        try:
            result = await session.execute(query)
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
        return result.rowcount

    @classmethod
    async def delete(cls, session: AsyncSession, **filter_by) -> int:
        query = sqlalchemy_delete(cls.model).filter_by(**filter_by)
        try:
            result = await session.execute(query)
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise
        return result.rowcount or 0
