# app/services/auth_service.py
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, UnauthorizedError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user_schema import Token, UserCreate

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.user_repo = UserRepository(db)

    async def register_user(self, user_create: UserCreate) -> User:
        """New active user with a fresh public identifier."""
        if await self.user_repo.get_user_by_email(user_create.email):
            logger.warning(f"Registration refused, email in use: {user_create.email}")
            raise BadRequestError("Email is already registered")

        user = await self.user_repo.create_user(User(
            identifier=str(uuid.uuid4()),
            name=user_create.name,
            email=user_create.email,
            password_hash=get_password_hash(user_create.password),
            is_active=True,
        ))
        logger.info(f"Registered user {user.identifier}")
        return user

    async def authenticate_user(self, email: str, password: str) -> User | None:
        user = await self.user_repo.get_user_by_email(email)
        if user is None or not user.is_active:
            logger.warning(f"Login refused for email: {email}")
            return None
        if not verify_password(password, user.password_hash):
            logger.warning(f"Password mismatch for email: {email}")
            return None
        return user

    async def login(self, email: str, password: str) -> Token:
        """Email + password -> bearer token; 401 on any mismatch."""
        user = await self.authenticate_user(email, password)
        if user is None:
            raise UnauthorizedError("Incorrect email or password")

        logger.info(f"User logged in: {user.identifier}")
        return Token(access_token=create_access_token({"sub": user.identifier}), token_type="bearer")
