from datetime import datetime
from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlalchemy import func, DateTime
from sqlalchemy.orm import Mapped, mapped_column, DeclarativeBase
from sqlalchemy.ext.asyncio import AsyncAttrs, async_sessionmaker, create_async_engine, AsyncSession

from app.config import database_url

engine = create_async_engine(url=database_url)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncSession:
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def init_models() -> None:
    """Создаёт недостающие таблицы. Используется при старте приложения."""
    # models must be imported so that Base.metadata knows every table
    from app.users.models import User  # noqa: F401
    from app.friends.models import Friend  # noqa: F401
    from app.posts.models import Post, Like, Comment  # noqa: F401
    from app.messages.models import Message  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema is ready")


async def dispose_engine() -> None:
    await engine.dispose()
    logger.info("Database engine disposed")


class Base(AsyncAttrs, DeclarativeBase):
    __abstract__ = True

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def to_dict(self) -> dict:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}
