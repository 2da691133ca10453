# app/repositories/signature_repo.py

from typing import List
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql.expression import exists

from app.models.signature import Signature


class SignatureRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_signature(self, signature: Signature) -> Signature:
        self.db.add(signature)
        await self.db.flush()
        return signature

    async def exists_by_version_and_signer(self, version_id: int, signer_id: int) -> bool:
        stmt = select(exists().where(
            Signature.version_id == version_id,
            Signature.signer_id == signer_id
        ))
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def count_by_version(self, version_id: int) -> int:
        stmt = select(func.count(Signature.id)).where(Signature.version_id == version_id)
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def list_by_version(self, version_id: int) -> List[Signature]:
        stmt = select(Signature).where(Signature.version_id == version_id).order_by(Signature.signed_at, Signature.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
