# app/routers/contract_file_router.py
# Preview (inline) / download (attachment) of stored contract files

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.contract_schema import PresignedUrlOut
from app.services.contract_file_service import (
    ContractFile, ContractFileService, content_disposition
)
from app.services.storage_service import S3StorageService, get_storage_service

router = APIRouter(
    prefix="/api/contracts",
    tags=["Contract Files"]
)

PDF_MEDIA_TYPE = "application/pdf"

def get_contract_file_service(
    db: AsyncSession = Depends(get_db),
    storage: S3StorageService = Depends(get_storage_service)
) -> ContractFileService:
    return ContractFileService(db, storage)

def preview_response(contract_file: ContractFile, filename: str | None = None) -> Response:
    # browsers render inline; caching allowed
    return Response(
        content=contract_file.content,
        media_type=PDF_MEDIA_TYPE,
        headers={
            "Content-Disposition": content_disposition("inline", filename),
            "Cache-Control": "private, max-age=3600",
            "ETag": f'"{contract_file.version.file_hash}"',
        },
    )

def download_response(contract_file: ContractFile) -> Response:
    return Response(
        content=contract_file.content,
        media_type=PDF_MEDIA_TYPE,
        headers={
            "Content-Disposition": content_disposition("attachment", contract_file.download_filename),
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )

@router.get("/files/{file_path:path}", summary="Stream a file by its storage key")
async def api_get_file_by_key(
    file_path: str,
    service: ContractFileService = Depends(get_contract_file_service),
    current_user: User = Depends(get_current_user)
):
    contract_file = await service.get_file_by_key(file_path, current_user)
    return preview_response(contract_file, contract_file.download_filename)

@router.get(
    "/versions/{version_id}/file-url",
    response_model=PresignedUrlOut,
    summary="Time-limited direct URL for a version's file"
)
async def api_get_presigned_url(
    version_id: int,
    service: ContractFileService = Depends(get_contract_file_service),
    current_user: User = Depends(get_current_user)
):
    url = await service.get_presigned_url(version_id, current_user)
    return PresignedUrlOut(url=url, expires_in_minutes=settings.PRESIGNED_URL_EXPIRE_MINUTES)

@router.get("/{contract_id}/preview", summary="Preview the current version")
async def api_preview_contract(
    contract_id: int,
    service: ContractFileService = Depends(get_contract_file_service),
    current_user: User = Depends(get_current_user)
):
    return preview_response(await service.get_contract_file(contract_id, current_user))

@router.get("/{contract_id}/download", summary="Download the current version")
async def api_download_contract(
    contract_id: int,
    service: ContractFileService = Depends(get_contract_file_service),
    current_user: User = Depends(get_current_user)
):
    return download_response(await service.get_contract_file(contract_id, current_user))

@router.get("/{contract_id}/versions/{version_number}/preview", summary="Preview a specific version")
async def api_preview_contract_version(
    contract_id: int,
    version_number: int,
    service: ContractFileService = Depends(get_contract_file_service),
    current_user: User = Depends(get_current_user)
):
    return preview_response(await service.get_contract_file(contract_id, current_user, version_number))

@router.get("/{contract_id}/versions/{version_number}/download", summary="Download a specific version")
async def api_download_contract_version(
    contract_id: int,
    version_number: int,
    service: ContractFileService = Depends(get_contract_file_service),
    current_user: User = Depends(get_current_user)
):
    return download_response(await service.get_contract_file(contract_id, current_user, version_number))
