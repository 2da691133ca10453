# app/repositories/user_repo.py
# Database access for users
from typing import List, Tuple
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models.user import User

class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def create_user(self, user: User) -> User:
        """
        Insert a user and commit
        """
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def get_user_by_identifier(self, identifier: str) -> User | None:
        stmt = select(User).where(User.identifier == identifier)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_users_by_identifiers(self, identifiers: List[str]) -> List[User]:
        if not identifiers:
            return []
        stmt = select(User).where(User.identifier.in_(identifiers))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def search_users(self, keyword: str, offset: int, limit: int) -> Tuple[List[User], int]:
        """
        Case-insensitive substring match on name, email or identifier.
        Returns one page of users plus the total match count.
        """
        condition = or_(
            User.name.icontains(keyword, autoescape=True),
            User.email.icontains(keyword, autoescape=True),
            User.identifier.icontains(keyword, autoescape=True),
        )

        count_stmt = select(func.count(User.id)).where(condition)
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = select(User).where(condition).order_by(User.id).offset(offset).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total
