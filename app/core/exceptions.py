# app/core/exceptions.py
# Domain errors raised by the service layer.
# HTTP-facing ones subclass HTTPException so FastAPI maps them directly;
# storage errors are plain exceptions handled in app.main.
from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    headers = None

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail, headers=self.headers)


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class StorageError(Exception):
    """Object store unreachable or returned an unexpected error."""


class StorageObjectNotFoundError(StorageError):
    """Requested key does not exist in the bucket."""

    def __init__(self, key: str):
        super().__init__(f"object not found: {key}")
        self.key = key
