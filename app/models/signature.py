# app/models/signature.py

from sqlalchemy import Column, Integer, String, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base


class Signature(Base):
    __tablename__ = "signatures"
    __table_args__ = (
        UniqueConstraint("version_id", "signer_id", name="uq_signature_version_signer"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    version_id = Column(Integer, ForeignKey("contract_versions.id", ondelete="CASCADE"), nullable=False, index=True)
    signer_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    # SHA-256(signer identifier + version file hash + signed_at.isoformat())
    signature_hash = Column(String(64), nullable=False)
    signed_at = Column(TIMESTAMP, nullable=False)

    version = relationship("ContractVersion", back_populates="signatures")
    signer = relationship("User")
