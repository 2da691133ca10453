# app/services/user_service.py
import logging
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.user_repo import UserRepository
from app.schemas.user_schema import UserSearchOut, UserSearchPage

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: AsyncSession):
        self.user_repo = UserRepository(db)

    async def search_users(self, keyword: str | None, page: int, size: int) -> UserSearchPage:
        """
        Paginated lookup by name, email or identifier substring.
        A blank keyword yields an empty page without touching the database.
        """
        keyword = (keyword or "").strip()
        if not keyword:
            return UserSearchPage(items=[], total=0, page=page, size=size)

        users, total = await self.user_repo.search_users(keyword, offset=page * size, limit=size)
        logger.debug(f"User search '{keyword}' matched {total} users (page {page})")

        return UserSearchPage(
            items=[UserSearchOut.model_validate(u) for u in users],
            total=total,
            page=page,
            size=size,
        )
