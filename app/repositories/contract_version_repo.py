# app/repositories/contract_version_repo.py

from datetime import datetime
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload

from app.models.contract import ContractVersion, ContractParty, VersionStatus
from app.models.signature import Signature


class ContractVersionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_version(self, version: ContractVersion) -> ContractVersion:
        self.db.add(version)
        await self.db.flush()
        return version

    async def get_version_by_id(self, version_id: int, for_update: bool = False) -> Optional[ContractVersion]:
        """
        Version plus its owning contract.
        for_update locks the version row until the transaction ends.
        """
        stmt = (
            select(ContractVersion)
            .where(ContractVersion.id == version_id)
            .options(joinedload(ContractVersion.contract))
        )
        if for_update:
            stmt = stmt.with_for_update(of=ContractVersion)

        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_version_by_number(self, contract_id: int, version_number: int) -> Optional[ContractVersion]:
        stmt = select(ContractVersion).where(
            ContractVersion.contract_id == contract_id,
            ContractVersion.version_number == version_number
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_version_by_file_path(self, file_path: str) -> Optional[ContractVersion]:
        stmt = (
            select(ContractVersion)
            .where(ContractVersion.file_path == file_path)
            .options(joinedload(ContractVersion.contract))
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def mark_signed_if_complete(self, version: ContractVersion, signed_at: datetime) -> bool:
        """
        PENDING_SIGNATURE -> SIGNED in one conditional UPDATE, only when every
        party of the contract has a signature on this version.
        Returns True when this call performed the transition.
        """
        signed_count = (
            select(func.count(Signature.id))
            .where(Signature.version_id == version.id)
            .scalar_subquery()
        )
        party_count = (
            select(func.count(ContractParty.id))
            .where(ContractParty.contract_id == version.contract_id)
            .scalar_subquery()
        )
        stmt = (
            update(ContractVersion)
            .where(
                ContractVersion.id == version.id,
                ContractVersion.status == VersionStatus.PENDING_SIGNATURE,
                signed_count >= party_count,
            )
            .values(status=VersionStatus.SIGNED, signed_at=signed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
