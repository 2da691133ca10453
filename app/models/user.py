# models/user.py
import uuid
from sqlalchemy import Column, Integer, String, Boolean, CHAR, TIMESTAMP, func
from sqlalchemy.orm import relationship
from app.core.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # external identifier handed to clients and embedded in tokens
    identifier = Column(CHAR(36), unique=True, index=True, nullable=False, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    # contracts this user uploaded
    contracts_created = relationship(
        "Contract",
        foreign_keys="[Contract.created_by_id]",
        back_populates="created_by"
    )

    # party rows (initiator / counterparty) on any contract
    contract_parties = relationship(
        "ContractParty",
        back_populates="user"
    )
