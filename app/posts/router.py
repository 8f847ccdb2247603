from fastapi import APIRouter, status

from app.database import SessionDep
from app.exception import InvalidInputException, PostNotFoundException
from app.posts.dao import PostDAO, LikeDAO, CommentDAO
from app.posts.schemas import PostCreate, PostOut, CommentCreate, CommentOut, CreatedOut, LikeOut
from app.users.dependencies import CurrentUser

router = APIRouter(prefix="/posts", tags=["Posts"])


async def _ensure_post(session, post_id: int) -> None:
    if not await PostDAO.find_one_or_none_by_id(session, post_id):
        raise PostNotFoundException


@router.get("", response_model=list[PostOut])
async def get_posts(current_user: CurrentUser, session: SessionDep):
    return await PostDAO.list_with_stats(session, current_user.id)


@router.post("", response_model=CreatedOut, status_code=status.HTTP_201_CREATED)
async def create_post(post: PostCreate, current_user: CurrentUser, session: SessionDep):
    if not post.content.strip():
        raise InvalidInputException("Post content is required")

    created = await PostDAO.add(session, user_id=current_user.id, content=post.content, image=post.image or None)
    return CreatedOut(id=created.id, message="Post created")


@router.post("/{post_id}/like", response_model=LikeOut)
async def toggle_like(post_id: int, current_user: CurrentUser, session: SessionDep):
    await _ensure_post(session, post_id)

    liked = await LikeDAO.toggle(session, user_id=current_user.id, post_id=post_id)
    return LikeOut(liked=liked, message="Post liked" if liked else "Like removed")


@router.post("/{post_id}/comments", response_model=CreatedOut, status_code=status.HTTP_201_CREATED)
async def add_comment(post_id: int, comment: CommentCreate, current_user: CurrentUser, session: SessionDep):
    if not comment.body.strip():
        raise InvalidInputException("Comment cannot be empty")
    await _ensure_post(session, post_id)

    created = await CommentDAO.add(session, user_id=current_user.id, post_id=post_id, body=comment.body)
    return CreatedOut(id=created.id, message="Comment added")


@router.get("/{post_id}/comments", response_model=list[CommentOut])
async def get_comments(post_id: int, current_user: CurrentUser, session: SessionDep):
    return await CommentDAO.list_for_post(session, post_id)
