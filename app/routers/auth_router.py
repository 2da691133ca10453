# app/routers/auth_router.py
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.user_schema import Token, UserCreate, UserOut
from app.services.auth_service import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["Auth"]
)

def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)

@router.post(
    "/register",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account"
)
async def api_register(
    user_data: UserCreate,
    service: AuthService = Depends(get_auth_service)
):
    """
    Passwords need at least 8 characters with both letters and digits.
    The response carries the public `identifier` used to invite the user to contracts.
    """
    return await service.register_user(user_data)

@router.post("/token", response_model=Token, summary="Log in")
async def api_login(
    # username field holds the email
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service)
):
    return await service.login(form_data.username, form_data.password)
