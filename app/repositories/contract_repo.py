# app/repositories/contract_repo.py

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.models.contract import Contract, ContractParty


@dataclass
class ContractFilter:
    """Optional filters combined (AND) into one contract query."""
    ids: Optional[List[int]] = None
    title_contains: Optional[str] = None
    exclude_deleted: bool = True


def build_contract_query(filters: ContractFilter) -> Select:
    """
    Build a single parameterized SELECT over contracts.

    - ids: restrict to these contract ids
    - title_contains: case-insensitive substring on title, ignored when blank
    - exclude_deleted: drop soft-deleted rows
    """
    stmt = select(Contract)

    if filters.ids is not None:
        stmt = stmt.where(Contract.id.in_(filters.ids))

    term = (filters.title_contains or "").strip()
    if term:
        stmt = stmt.where(Contract.title.icontains(term, autoescape=True))

    if filters.exclude_deleted:
        stmt = stmt.where(Contract.deleted_at.is_(None))

    return stmt.order_by(Contract.created_at.desc(), Contract.id.desc())


class ContractRepository:
    """
    Data access for the 'contracts' table.
    Writes only add + flush; the service owns the transaction.
    """
    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_common_contract_options(self):
        # everything ContractOut needs, loaded up front (no lazy IO under asyncio)
        return [
            selectinload(Contract.created_by),
            selectinload(Contract.current_version),
        ]

    async def add_contract(self, contract: Contract) -> Contract:
        self.db.add(contract)
        await self.db.flush()
        return contract

    async def get_contract_by_id(self, contract_id: int, include_deleted: bool = False) -> Optional[Contract]:
        stmt = select(Contract).where(Contract.id == contract_id)
        if not include_deleted:
            stmt = stmt.where(Contract.deleted_at.is_(None))
        stmt = stmt.options(*self._get_common_contract_options())

        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_contract_with_details(self, contract_id: int) -> Optional[Contract]:
        """
        Live contract with its versions and parties (and each party's user).
        """
        stmt = (
            select(Contract)
            .where(Contract.id == contract_id, Contract.deleted_at.is_(None))
            .options(
                *self._get_common_contract_options(),
                selectinload(Contract.versions),
                selectinload(Contract.parties).selectinload(ContractParty.user),
            )
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_contracts(self, filters: ContractFilter) -> List[Contract]:
        stmt = build_contract_query(filters).options(*self._get_common_contract_options())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
