# app/services/contract_file_service.py
# Authorization-checked retrieval of stored contract files

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ForbiddenError, NotFoundError, StorageError
from app.models.contract import Contract, ContractVersion
from app.models.user import User
from app.repositories.contract_repo import ContractRepository
from app.repositories.contract_version_repo import ContractVersionRepository
from app.services.contract_service import ContractService
from app.services.storage_service import S3StorageService

logger = logging.getLogger(__name__)


@dataclass
class ContractFile:
    contract: Contract
    version: ContractVersion
    content: bytes

    @property
    def download_filename(self) -> str:
        return build_download_filename(self.contract.title, self.version.version_number)


def build_download_filename(title: str, version_number: int) -> str:
    """'{title without punctuation, spaces -> _}_v{n}.pdf'"""
    clean = re.sub(r"[^\w\s]", "", title)
    clean = re.sub(r"\s+", "_", clean.strip())
    return f"{clean or 'contract'}_v{version_number}.pdf"


def content_disposition(disposition: str, filename: Optional[str] = None) -> str:
    if not filename:
        return disposition
    return f"{disposition}; filename*=UTF-8''{quote(filename, safe='')}"


class ContractFileService:
    def __init__(self, db: AsyncSession, storage: S3StorageService):
        self.db = db
        self.storage = storage
        self.contract_repo = ContractRepository(db)
        self.version_repo = ContractVersionRepository(db)
        self.contract_service = ContractService(db, storage)

    async def _check_access(self, contract: Contract, user: User) -> None:
        if not await self.contract_service.can_access_contract(contract, user):
            logger.warning(f"File access denied - contract_id: {contract.id}, user: {user.identifier}")
            raise ForbiddenError("You do not have access to this contract")

    async def _fetch(self, contract: Contract, version: ContractVersion) -> ContractFile:
        content = await run_in_threadpool(self.storage.download, version.file_path)
        return ContractFile(contract=contract, version=version, content=content)

    async def get_contract_file(
        self, contract_id: int, user: User, version_number: Optional[int] = None
    ) -> ContractFile:
        """
        File of a specific version, or of the current version when
        version_number is None.
        """
        logger.info(f"File request - contract_id: {contract_id}, version: {version_number}, user: {user.identifier}")

        contract = await self.contract_repo.get_contract_by_id(contract_id)
        if not contract:
            raise NotFoundError("Contract not found")

        # access is decided before the version number is looked at
        await self._check_access(contract, user)

        if version_number is not None:
            version = await self.version_repo.get_version_by_number(contract.id, version_number)
        else:
            version = contract.current_version
        if version is None:
            raise NotFoundError("Contract version not found")

        return await self._fetch(contract, version)

    async def get_file_by_key(self, file_key: str, user: User) -> ContractFile:
        logger.info(f"File request by key - key: {file_key}, user: {user.identifier}")

        version = await self.version_repo.get_version_by_file_path(file_key)
        if version is None or version.contract.deleted_at is not None:
            raise NotFoundError("File not found")

        await self._check_access(version.contract, user)
        return await self._fetch(version.contract, version)

    async def get_presigned_url(self, version_id: int, user: User) -> str:
        version = await self.version_repo.get_version_by_id(version_id)
        if version is None or version.contract.deleted_at is not None:
            raise NotFoundError("Contract version not found")

        await self._check_access(version.contract, user)

        if not version.file_path:
            raise NotFoundError("File path not found for this contract version")

        url = await run_in_threadpool(
            self.storage.generate_presigned_get_url,
            version.file_path,
            settings.PRESIGNED_URL_EXPIRE_MINUTES,
        )
        if url is None:
            raise StorageError(f"could not generate presigned URL for {version.file_path}")
        return url
