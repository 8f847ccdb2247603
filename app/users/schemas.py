from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class TokenUser(BaseModel):
    """Идентичность, извлечённая из bearer-токена."""
    id: int
    username: str


class UserRegister(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=1)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    username: str = ""
    bio: Optional[str] = None
    status: Optional[str] = None
    avatar: Optional[str] = None


class PublicProfile(BaseModel):
    id: int
    username: str
    email: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class UserListItem(BaseModel):
    id: int
    username: str
    email: str
    avatar: Optional[str] = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    token: str
    user: PublicProfile


class ProfileUpdateResponse(BaseModel):
    message: str
    user: PublicProfile
