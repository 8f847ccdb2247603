from sqlalchemy import select, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO
from app.messages.models import Message
from app.users.models import User


class MessageDAO(BaseDAO):
    model = Message

    @classmethod
    async def get_conversation(cls, session: AsyncSession, user_id: int, other_id: int) -> list[dict]:
        """Переписка двух пользователей в обе стороны, старые сверху."""
        query = (
            select(Message, User.username)
            .join(User, User.id == Message.sender_id)
            .where(or_(
                and_(Message.sender_id == user_id, Message.receiver_id == other_id),
                and_(Message.sender_id == other_id, Message.receiver_id == user_id),
            ))
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        result = await session.execute(query)
        return [{**message.to_dict(), "sender_name": sender_name} for message, sender_name in result.all()]
