from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dao.base import BaseDAO, is_unique_violation
from app.posts.models import Post, Like, Comment
from app.users.models import User


class PostDAO(BaseDAO):
    model = Post

    @classmethod
    async def list_with_stats(cls, session: AsyncSession, viewer_id: int) -> list[dict]:
        likes_count = (
            select(func.count(func.distinct(Like.user_id)))
            .where(Like.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        comments_count = (
            select(func.count(Comment.id))
            .where(Comment.post_id == Post.id)
            .correlate(Post)
            .scalar_subquery()
        )
        is_liked = (
            select(Like.id)
            .where(Like.post_id == Post.id, Like.user_id == viewer_id)
            .correlate(Post)
            .exists()
        )
        query = (
            select(
                Post,
                User.username,
                User.avatar,
                likes_count.label("likes_count"),
                comments_count.label("comments_count"),
                is_liked.label("is_liked"),
            )
            .join(User, User.id == Post.user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        result = await session.execute(query)
        return [
            {
                **post.to_dict(),
                "username": username,
                "avatar": avatar,
                "likes_count": likes or 0,
                "comments_count": comments or 0,
                "is_liked": bool(liked),
            }
            for post, username, avatar, likes, comments, liked in result.all()
        ]


class LikeDAO(BaseDAO):
    model = Like

    @classmethod
    async def toggle(cls, session: AsyncSession, user_id: int, post_id: int) -> bool:
        """
        Переключает лайк и возвращает итоговое состояние (True - лайк стоит).

        Сначала условный DELETE: если строка была, лайк снят. Иначе INSERT;
        нарушение уникальности при гонке означает, что лайк уже поставлен.
        """
        removed = await cls.delete(session, user_id=user_id, post_id=post_id)
        if removed:
            return False

        session.add(Like(user_id=user_id, post_id=post_id))
        try:
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            if not is_unique_violation(e):
                raise
        except SQLAlchemyError:
            await session.rollback()
            raise
        return True


class CommentDAO(BaseDAO):
    model = Comment

    @classmethod
    async def list_for_post(cls, session: AsyncSession, post_id: int) -> list[dict]:
        query = (
            select(Comment, User.username, User.avatar)
            .join(User, User.id == Comment.user_id)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        result = await session.execute(query)
        return [
            {**comment.to_dict(), "username": username, "avatar": avatar}
            for comment, username, avatar in result.all()
        ]
