# app/routers/signature_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.signature_schema import SignatureOut
from app.services.signature_service import SignatureService

router = APIRouter(
    prefix="/api/contracts",
    tags=["Signatures"]
)

@router.post(
    "/{version_id}/sign",
    response_model=SignatureOut,
    summary="Sign a contract version"
)
async def api_sign_contract(
    version_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Record the caller's signature on a version.

    - 404: version does not exist
    - 403: caller is not a party of the contract
    - 409: caller already signed this version

    The version becomes SIGNED once every party has signed.
    """
    result = await SignatureService(db).sign(version_id, current_user)
    return SignatureOut(
        message="Signature recorded",
        signature_id=result.signature.id,
        version_id=result.version.id,
        signature_hash=result.signature.signature_hash,
        signed_at=result.signature.signed_at,
        version_status=result.version.status,
    )
