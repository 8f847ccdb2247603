from fastapi import APIRouter, Query
from loguru import logger
from sqlalchemy.exc import IntegrityError

from app.dao.base import is_unique_violation
from app.database import SessionDep
from app.exception import ConflictException, InvalidInputException, NotFoundException, UserNotFoundException
from app.friends.dao import FriendDAO
from app.friends.schemas import FriendOut, UserSearchResult
from app.users.dao import UserDAO
from app.users.dependencies import CurrentUser

router = APIRouter(tags=["Friends"])

MIN_QUERY_LENGTH = 2


@router.get("/users/search", response_model=list[UserSearchResult])
async def search_users(current_user: CurrentUser, session: SessionDep, q: str = Query("")):
    term = q.strip()
    if len(term) < MIN_QUERY_LENGTH:
        raise InvalidInputException(f"Search query must be at least {MIN_QUERY_LENGTH} characters")
    return await FriendDAO.search_users(session, current_user.id, term)


@router.get("/friends", response_model=list[FriendOut])
async def get_friends(current_user: CurrentUser, session: SessionDep):
    return await FriendDAO.get_friends(session, current_user.id)


@router.post("/friends/request/{user_id}")
async def send_friend_request(user_id: int, current_user: CurrentUser, session: SessionDep):
    if user_id == current_user.id:
        raise InvalidInputException("You cannot add yourself as a friend")

    target = await UserDAO.find_one_or_none_by_id(session, user_id)
    if not target:
        raise UserNotFoundException

    if await FriendDAO.exists(session, current_user.id, user_id):
        raise ConflictException("Friend request already exists")

    try:
        await FriendDAO.add_request(session, user_id=current_user.id, friend_id=user_id)
    except IntegrityError as e:
        # параллельная заявка успела раньше
        if not is_unique_violation(e):
            raise
        raise ConflictException("Friend request already exists")

    logger.info(f"[FRIENDS] {current_user.id} -> {user_id}: pending")
    return {"message": "Friend request sent"}


@router.post("/friends/accept/{user_id}")
async def accept_friend_request(user_id: int, current_user: CurrentUser, session: SessionDep):
    accepted = await FriendDAO.accept(session, requester_id=user_id, target_id=current_user.id)
    if not accepted:
        raise NotFoundException("Friend request not found")

    logger.info(f"[FRIENDS] {user_id} -> {current_user.id}: accepted")
    return {"message": "Friend request accepted"}


@router.delete("/friends/{user_id}")
async def remove_friend(user_id: int, current_user: CurrentUser, session: SessionDep):
    removed = await FriendDAO.remove(session, current_user.id, user_id)
    if removed:
        logger.info(f"[FRIENDS] {current_user.id} x {user_id}: removed")
    return {"message": "Friend removed"}
