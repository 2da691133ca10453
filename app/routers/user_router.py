# app/routers/user_router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.user_schema import UserOut, UserSearchPage
from app.services.user_service import UserService

router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)] # every route requires login
)

@router.get("/me", response_model=UserOut)
async def read_users_me(
    current_user: User = Depends(get_current_user)
):
    """
    Current user's profile (no password hash)
    """
    return current_user

@router.get("/search", response_model=UserSearchPage)
async def search_users(
    keyword: str = Query(..., description="matches name, email or identifier"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """
    Find users to invite as participants.
    """
    return await UserService(db).search_users(keyword, page, size)
