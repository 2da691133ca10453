# app/routers/contract_router.py

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.services.contract_service import ContractService
from app.services.storage_service import S3StorageService, get_storage_service
from app.schemas.contract_schema import (
    ContractUploadRequest, ContractUploadResponse, ContractOut, ContractDetailOut
)

from app.models.user import User
from app.core.security import get_current_user
from app.core.database import get_db

router = APIRouter(
    prefix="/api/contracts",
    tags=["Contracts"]
)

def get_contract_service(
    db: AsyncSession = Depends(get_db),
    storage: S3StorageService = Depends(get_storage_service)
) -> ContractService:
    return ContractService(db, storage)

@router.post(
    "/upload",
    response_model=ContractUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a contract file and invite participants"
)
async def api_upload_contract(
    data: str = Form(..., description="JSON: {title, description, participant_ids}"),
    file: UploadFile = File(...),
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    """
    Multipart upload: a JSON `data` part with the metadata and a `file` part.

    Creates the contract, version 1 and the party rows (uploader as
    INITIATOR, each participant as COUNTERPARTY) in a single transaction.
    """
    try:
        request = ContractUploadRequest.model_validate_json(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))

    contents = await file.read()
    contract = await service.upload_contract(
        request,
        current_user,
        contents,
        file.filename,
        file.content_type,
    )
    return ContractUploadResponse(
        message="Contract uploaded successfully",
        contract_id=contract.id,
        version_id=contract.current_version_id,
    )

@router.get(
    "/my",
    response_model=List[ContractOut],
    summary="Contracts I am a party to"
)
async def api_get_my_contracts(
    search: Optional[str] = None,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    """
    Every live contract involving the caller; `search` filters by title
    (case-insensitive substring).
    """
    return await service.get_my_contracts(current_user, search)

@router.get(
    "/{contract_id}",
    response_model=ContractDetailOut,
    summary="Contract detail with versions and parties"
)
async def api_get_contract_details(
    contract_id: int,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    return await service.get_contract_details(contract_id, current_user)

@router.delete(
    "/{contract_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Soft-delete a contract (creator only)"
)
async def api_delete_contract(
    contract_id: int,
    service: ContractService = Depends(get_contract_service),
    current_user: User = Depends(get_current_user)
):
    await service.delete_contract(contract_id, current_user)
    return None # 204 No Content
