from datetime import datetime, timedelta, timezone

from fastapi.concurrency import run_in_threadpool
from jose import jwt, JWTError
from loguru import logger
from passlib.context import CryptContext

from app.config import settings
from app.exception import ForbiddenException
from app.users.models import User
from app.users.schemas import TokenUser

pwd_context = CryptContext(schemes=['bcrypt'], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

# bcrypt учитывает только первые 72 байта пароля
BCRYPT_MAX_BYTES = 72


def _truncate(password: str) -> str:
    if len(password.encode('utf-8')) > BCRYPT_MAX_BYTES:
        password = password.encode('utf-8')[:BCRYPT_MAX_BYTES].decode('utf-8', errors='ignore')
    return password


def get_password_hash(password: str) -> str:
    return pwd_context.hash(_truncate(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_truncate(plain_password), hashed_password)


async def hash_password_async(password: str) -> str:
    """bcrypt намеренно медленный, поэтому считаем его вне event loop."""
    return await run_in_threadpool(get_password_hash, password)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)


def create_access_token(user: User, expire_minutes: int | None = None, secret_key: str | None = None) -> str:
    """Подписывает id и username пользователя. exp добавляется только если задан срок жизни."""
    to_encode = {"sub": str(user.id), "username": user.username}
    if expire_minutes is None:
        expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    if expire_minutes is not None:
        expire = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)
        to_encode["exp"] = int(expire.timestamp())
    return jwt.encode(to_encode, secret_key or settings.SECRET_KEY, settings.ALGORITHM)


def decode_access_token(token: str) -> TokenUser:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise ForbiddenException

    user_id = payload.get("sub")
    username = payload.get("username")
    if not user_id or not username:
        logger.warning("Rejected token without identity claims")
        raise ForbiddenException
    try:
        return TokenUser(id=int(user_id), username=username)
    except ValueError:
        logger.warning(f"Rejected token with malformed subject {user_id!r}")
        raise ForbiddenException
