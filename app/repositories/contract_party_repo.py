# app/repositories/contract_party_repo.py

from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql.expression import exists

from app.models.contract import ContractParty


class ContractPartyRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_party(self, party: ContractParty) -> ContractParty:
        self.db.add(party)
        await self.db.flush()
        return party

    async def list_parties_by_user(self, user_id: int) -> List[ContractParty]:
        stmt = select(ContractParty).where(ContractParty.user_id == user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_party(self, contract_id: int, user_id: int) -> Optional[ContractParty]:
        stmt = select(ContractParty).where(
            ContractParty.contract_id == contract_id,
            ContractParty.user_id == user_id
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def is_party(self, contract_id: int, user_id: int) -> bool:
        stmt = select(exists().where(
            ContractParty.contract_id == contract_id,
            ContractParty.user_id == user_id
        ))
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def count_parties(self, contract_id: int) -> int:
        stmt = select(func.count(ContractParty.id)).where(ContractParty.contract_id == contract_id)
        result = await self.db.execute(stmt)
        return result.scalar_one()
