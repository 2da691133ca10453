# app/core/security.py
# Passwords (bcrypt), access tokens (JWT) and the current-user dependency
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import BadRequestError, UnauthorizedError
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user_schema import TokenData

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Signed JWT carrying `data` plus an `exp` claim.
    The user identifier travels in `sub`.
    """
    claims = dict(data)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims["exp"] = datetime.now(timezone.utc) + lifetime
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_access_token(token: str) -> Optional[TokenData]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None

    identifier = payload.get("sub")
    return TokenData(identifier=identifier) if identifier else None


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """FastAPI Dependency: the authenticated, active caller."""
    token_data = verify_access_token(token)
    if token_data is None:
        raise UnauthorizedError("Could not validate credentials")

    user = await UserRepository(db).get_user_by_identifier(token_data.identifier)
    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    if not user.is_active:
        raise BadRequestError("This account has been deactivated")
    return user
