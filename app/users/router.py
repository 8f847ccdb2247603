from fastapi import APIRouter, status
from loguru import logger
from sqlalchemy.exc import IntegrityError

from app.dao.base import is_unique_violation, violated_field
from app.database import SessionDep
from app.exception import (
    ConflictException, InvalidInputException, InvalidCredentialException, UserNotFoundException
)
from app.users.auth import hash_password_async, verify_password_async, create_access_token
from app.users.dao import UserDAO
from app.users.dependencies import CurrentUser
from app.users.models import DEFAULT_STATUS
from app.users.schemas import (
    UserRegister, UserLogin, LoginResponse, PublicProfile, UserListItem, ProfileUpdate, ProfileUpdateResponse
)

router = APIRouter(tags=["User"])

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 50

DUPLICATE_MESSAGES = {
    "username": "Username already taken",
    "email": "Email already registered",
}


def _check_username(username: str) -> str:
    username = username.strip()
    if len(username) < MIN_USERNAME_LENGTH:
        raise InvalidInputException(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    if len(username) > MAX_USERNAME_LENGTH:
        raise InvalidInputException(f"Username must be at most {MAX_USERNAME_LENGTH} characters")
    return username


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(user: UserRegister, session: SessionDep):
    if not user.username.strip() or not user.password:
        raise InvalidInputException("All fields are required")
    username = _check_username(user.username)

    hashed_password = await hash_password_async(user.password)
    try:
        created = await UserDAO.add(session, username=username, email=user.email, password=hashed_password)
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        field = violated_field(e, "username", "email")
        logger.info(f"Registration rejected for {username!r}: duplicate {field}")
        raise ConflictException(DUPLICATE_MESSAGES.get(field, "User already exists"))

    logger.info(f"Registered user id={created.id} username={created.username!r}")
    return {"message": "User created"}


@router.post("/login", response_model=LoginResponse)
async def login(credentials: UserLogin, session: SessionDep):
    user = await UserDAO.find_one_or_none(session, email=credentials.email)
    if not user:
        raise UserNotFoundException
    if not await verify_password_async(credentials.password, user.password):
        raise InvalidCredentialException

    logger.info(f"User id={user.id} logged in")
    return LoginResponse(token=create_access_token(user), user=PublicProfile.model_validate(user))


@router.get("/users", response_model=list[UserListItem])
async def get_other_users(current_user: CurrentUser, session: SessionDep):
    users = await UserDAO.find_others(session, current_user.id)
    return [UserListItem.model_validate(u) for u in users]


@router.get("/profile", response_model=PublicProfile)
async def get_profile(current_user: CurrentUser, session: SessionDep):
    user = await UserDAO.find_one_or_none_by_id(session, current_user.id)
    if not user:
        raise UserNotFoundException
    return PublicProfile.model_validate(user)


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(profile: ProfileUpdate, current_user: CurrentUser, session: SessionDep):
    username = _check_username(profile.username)
    try:
        updated = await UserDAO.update_profile(
            session,
            current_user.id,
            username=username,
            bio=profile.bio or None,
            status=profile.status or DEFAULT_STATUS,
            avatar=profile.avatar or None,
        )
    except IntegrityError as e:
        if violated_field(e, "username") is None:
            raise
        raise ConflictException(DUPLICATE_MESSAGES["username"])
    if not updated:
        raise UserNotFoundException

    return ProfileUpdateResponse(message="Profile updated", user=PublicProfile.model_validate(updated))
