# app/services/contract_service.py

import hashlib
import logging
from datetime import datetime
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.models.contract import (
    Contract, ContractParty, ContractStatus, ContractVersion, PartyRole, VersionStatus
)
from app.models.user import User
from app.repositories.contract_party_repo import ContractPartyRepository
from app.repositories.contract_repo import ContractFilter, ContractRepository
from app.repositories.contract_version_repo import ContractVersionRepository
from app.repositories.user_repo import UserRepository
from app.schemas.contract_schema import ContractUploadRequest
from app.services.storage_service import S3StorageService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class ContractService:
    def __init__(self, db: AsyncSession, storage: Optional[S3StorageService] = None):
        self.db = db
        self.storage = storage
        self.contract_repo = ContractRepository(db)
        self.version_repo = ContractVersionRepository(db)
        self.party_repo = ContractPartyRepository(db)
        self.user_repo = UserRepository(db)

    def _validate_file(self, file_contents: bytes, filename: Optional[str]) -> None:
        if not filename:
            raise BadRequestError("A file name is required")
        if not file_contents:
            raise BadRequestError("The uploaded file is empty")
        max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        if len(file_contents) > max_bytes:
            raise BadRequestError(f"Maximum file size is {settings.MAX_UPLOAD_SIZE_MB} MB")

    async def _resolve_participants(self, participant_ids: List[str], uploader: User) -> List[User]:
        """
        Map identifiers to users, dropping duplicates and the uploader.
        Any unknown identifier fails the whole upload.
        """
        wanted = []
        for identifier in participant_ids:
            if identifier != uploader.identifier and identifier not in wanted:
                wanted.append(identifier)

        users = await self.user_repo.get_users_by_identifiers(wanted)
        by_identifier = {u.identifier: u for u in users}
        missing = [i for i in wanted if i not in by_identifier]
        if missing:
            raise BadRequestError(f"No user found for participant identifier(s): {', '.join(missing)}")
        return [by_identifier[i] for i in wanted]

    async def upload_contract(
        self,
        request: ContractUploadRequest,
        uploader: User,
        file_contents: bytes,
        filename: Optional[str],
        content_type: Optional[str] = None,
    ) -> Contract:
        """
        Create contract + version 1 + parties in one transaction.

        Participants are resolved before anything is written, so an unknown
        identifier leaves neither rows nor an orphaned blob behind.
        """
        logger.info(f"Uploading contract titled '{request.title}' by user {uploader.identifier}")
        self._validate_file(file_contents, filename)

        try:
            participants = await self._resolve_participants(request.participant_ids, uploader)

            # Step 1: contract header
            contract = await self.contract_repo.add_contract(Contract(
                title=request.title,
                description=request.description,
                created_by_id=uploader.id,
                status=ContractStatus.OPEN,
            ))
            logger.debug(f"Contract row flushed with id: {contract.id}")

            # Step 2: hash + store blob
            file_hash = sha256_hex(file_contents)
            file_key = await run_in_threadpool(self.storage.upload, file_contents, filename, content_type)

            # Step 3: first version
            version = await self.version_repo.add_version(ContractVersion(
                contract_id=contract.id,
                version_number=1,
                file_path=file_key,
                file_hash=file_hash,
                status=VersionStatus.PENDING_SIGNATURE,
                storage_provider=settings.STORAGE_PROVIDER,
                bucket_name=self.storage.get_bucket_name(),
            ))

            # Step 4: current version pointer
            contract.current_version_id = version.id

            # Step 5: parties
            await self.party_repo.add_party(ContractParty(
                contract_id=contract.id, user_id=uploader.id, role=PartyRole.INITIATOR
            ))
            for participant in participants:
                await self.party_repo.add_party(ContractParty(
                    contract_id=contract.id, user_id=participant.id, role=PartyRole.COUNTERPARTY
                ))
                logger.debug(f"Added participant {participant.identifier} as COUNTERPARTY to contract {contract.id}")

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Contract upload completed for contract id: {contract.id}")
        return contract

    async def get_my_contracts(self, user: User, search_term: Optional[str] = None) -> List[Contract]:
        """
        Live contracts the user is a party to, optionally filtered by title.
        """
        logger.info(f"Getting contracts for user: {user.identifier}, search_term: '{search_term}'")

        parties = await self.party_repo.list_parties_by_user(user.id)
        contract_ids = sorted({p.contract_id for p in parties})

        if not contract_ids:
            logger.info(f"User {user.identifier} is not involved in any contracts")
            return []

        contracts = await self.contract_repo.list_contracts(ContractFilter(
            ids=contract_ids,
            title_contains=search_term,
            exclude_deleted=True,
        ))
        logger.info(f"Found {len(contracts)} contracts for user {user.identifier}")
        return contracts

    async def can_access_contract(self, contract: Contract, user: User) -> bool:
        """Creator or any party of the contract."""
        if contract.created_by_id == user.id:
            return True
        return await self.party_repo.is_party(contract.id, user.id)

    async def get_contract_details(self, contract_id: int, user: User) -> Contract:
        contract = await self.contract_repo.get_contract_with_details(contract_id)
        if not contract:
            raise NotFoundError("Contract not found")
        if not await self.can_access_contract(contract, user):
            logger.warning(f"User {user.identifier} denied access to contract {contract_id}")
            raise ForbiddenError("You do not have access to this contract")
        return contract

    async def delete_contract(self, contract_id: int, user: User) -> None:
        """
        Soft delete; only the creator may do it.
        """
        contract = await self.contract_repo.get_contract_by_id(contract_id)
        if not contract:
            raise NotFoundError("Contract not found")
        if contract.created_by_id != user.id:
            raise ForbiddenError("Only the creator can delete this contract")

        contract.deleted_at = datetime.now()
        await self.db.commit()
        logger.info(f"Contract {contract_id} soft-deleted by user {user.identifier}")
