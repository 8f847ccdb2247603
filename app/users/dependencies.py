from typing import Annotated, Optional

from fastapi import Depends, Request

from app.exception import UnauthenticatedException
from app.users.auth import decode_access_token
from app.users.schemas import TokenUser


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Возвращает токен из заголовка 'Bearer <token>' или None."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


def get_token(request: Request) -> str:
    token = extract_bearer(request.headers.get("Authorization"))
    if not token:
        raise UnauthenticatedException
    return token


async def get_current_user(token: str = Depends(get_token)) -> TokenUser:
    return decode_access_token(token)


CurrentUser = Annotated[TokenUser, Depends(get_current_user)]
