from typing import Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = ""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.detail)


class InvalidInputException(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid input"


class UnauthenticatedException(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Authentication token is missing"


class ForbiddenException(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Invalid or expired token"


class InvalidCredentialException(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Wrong password"


class NotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


class UserNotFoundException(NotFoundException):
    detail = "User not found"


class PostNotFoundException(NotFoundException):
    detail = "Post not found"


class ConflictException(AppException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already exists"


class InternalErrorException(AppException):
    detail = "Internal server error"
