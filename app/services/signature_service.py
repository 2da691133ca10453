# app/services/signature_service.py

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.contract import ContractVersion, VersionStatus
from app.models.signature import Signature
from app.models.user import User
from app.repositories.contract_party_repo import ContractPartyRepository
from app.repositories.contract_version_repo import ContractVersionRepository
from app.repositories.signature_repo import SignatureRepository

logger = logging.getLogger(__name__)


def compute_signature_hash(signer_identifier: str, file_hash: str, signed_at: datetime) -> str:
    """SHA-256 over signer identifier, version file hash and the persisted signing time."""
    payload = f"{signer_identifier}{file_hash}{signed_at.isoformat()}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def verify_signature(signature: Signature, signer: User, version: ContractVersion) -> bool:
    """Recompute the hash from stored columns and compare."""
    expected = compute_signature_hash(signer.identifier, version.file_hash, signature.signed_at)
    return expected == signature.signature_hash


@dataclass
class SignResult:
    signature: Signature
    version: ContractVersion
    completed: bool


class SignatureService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.version_repo = ContractVersionRepository(db)
        self.party_repo = ContractPartyRepository(db)
        self.signature_repo = SignatureRepository(db)

    async def sign(self, version_id: int, signer: User) -> SignResult:
        """
        Record signer's signature on a version.

        The version row stays locked until commit, so the duplicate check and
        the completion check see every concurrent signer of the same version.
        """
        logger.info(f"User {signer.identifier} signing version {version_id}")
        try:
            # 1) version (locked)
            version = await self.version_repo.get_version_by_id(version_id, for_update=True)
            if not version or version.contract.deleted_at is not None:
                raise NotFoundError("Contract version not found")

            # 2) signer must be a party of the owning contract
            if not await self.party_repo.is_party(version.contract_id, signer.id):
                logger.warning(f"User {signer.identifier} is not a participant of contract {version.contract_id}")
                raise ForbiddenError("You are not a participant of this contract")

            # 3) a second signature is rejected, not ignored
            if await self.signature_repo.exists_by_version_and_signer(version.id, signer.id):
                raise ConflictError("You have already signed this contract version")

            # 4) hash over a timestamp that is stored with the row
            signed_at = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
            signature = Signature(
                version_id=version.id,
                signer_id=signer.id,
                signed_at=signed_at,
                signature_hash=compute_signature_hash(signer.identifier, version.file_hash, signed_at),
            )

            # 5) append to the ledger
            try:
                await self.signature_repo.add_signature(signature)
            except IntegrityError as e:
                raise ConflictError("You have already signed this contract version") from e

            # 6) PENDING_SIGNATURE -> SIGNED once every party has signed
            completed = await self.version_repo.mark_signed_if_complete(version, signed_at)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(version, attribute_names=["status", "signed_at"])
        if completed:
            logger.info(f"Version {version.id} of contract {version.contract_id} is now {VersionStatus.SIGNED.value}")
        logger.info(f"Signature {signature.id} recorded for version {version.id}")
        return SignResult(signature=signature, version=version, completed=completed)
