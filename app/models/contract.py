# app/models/contract.py

import enum
from sqlalchemy import (
    Column, String, TEXT, TIMESTAMP, INT, Integer, ForeignKey, Enum,
    UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from app.core.database import Base


class ContractStatus(str, enum.Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class VersionStatus(str, enum.Enum):
    PENDING_SIGNATURE = "PENDING_SIGNATURE"
    SIGNED = "SIGNED"


class PartyRole(str, enum.Enum):
    INITIATOR = "INITIATOR"
    COUNTERPARTY = "COUNTERPARTY"


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(TEXT, nullable=True)
    status = Column(Enum(ContractStatus, name="contract_status_enum"), default=ContractStatus.OPEN, nullable=False)

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    # contracts <-> contract_versions reference each other; this side is added after both tables exist
    current_version_id = Column(
        Integer,
        ForeignKey("contract_versions.id", use_alter=True, name="fk_contracts_current_version"),
        nullable=True
    )

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(TIMESTAMP, nullable=True) # soft delete marker

    created_by = relationship(
        "User",
        foreign_keys=[created_by_id],
        back_populates="contracts_created"
    )

    versions = relationship(
        "ContractVersion",
        foreign_keys="[ContractVersion.contract_id]",
        back_populates="contract",
        order_by="ContractVersion.version_number"
    )

    current_version = relationship(
        "ContractVersion",
        foreign_keys=[current_version_id],
        post_update=True
    )

    parties = relationship(
        "ContractParty",
        back_populates="contract"
    )


class ContractVersion(Base):
    __tablename__ = "contract_versions"
    __table_args__ = (
        UniqueConstraint("contract_id", "version_number", name="uq_contract_version_number"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    contract_id = Column(Integer, ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    version_number = Column(INT, nullable=False)

    # storage key inside the bucket and SHA-256 hex of the uploaded bytes
    file_path = Column(String(512), nullable=False, index=True)
    file_hash = Column(String(64), nullable=False)

    status = Column(Enum(VersionStatus, name="version_status_enum"), default=VersionStatus.PENDING_SIGNATURE, nullable=False)
    storage_provider = Column(String(50), nullable=True)
    bucket_name = Column(String(255), nullable=True)

    created_at = Column(TIMESTAMP, server_default=func.now())
    signed_at = Column(TIMESTAMP, nullable=True)

    contract = relationship(
        "Contract",
        foreign_keys=[contract_id],
        back_populates="versions"
    )

    signatures = relationship(
        "Signature",
        back_populates="version"
    )


class ContractParty(Base):
    __tablename__ = "contract_parties"
    __table_args__ = (
        UniqueConstraint("contract_id", "user_id", name="uq_contract_party"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    contract_id = Column(Integer, ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    role = Column(Enum(PartyRole, name="party_role_enum"), nullable=False)

    contract = relationship("Contract", back_populates="parties")
    user = relationship("User", back_populates="contract_parties")
