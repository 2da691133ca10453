# app/schemas/contract_schema.py

from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

from app.models.contract import ContractStatus, VersionStatus, PartyRole
from app.schemas.user_schema import UserSearchOut

# --- 1. Upload metadata (the JSON "data" part of the multipart request) ---
class ContractUploadRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    # user identifiers (UUID strings) invited as counterparties
    participant_ids: List[str] = Field(default_factory=list)

class ContractUploadResponse(BaseModel):
    message: str
    contract_id: int
    version_id: int

# --- 2. Versions ---
class ContractVersionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    version_number: int
    file_hash: str
    status: VersionStatus
    created_at: Optional[datetime] = None
    signed_at: Optional[datetime] = None

# --- 3. Parties ---
class ContractPartyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    role: PartyRole
    user: UserSearchOut

# --- 4. Contract (list item) ---
# used by GET /api/contracts/my
class ContractOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: ContractStatus
    created_at: Optional[datetime] = None
    created_by: UserSearchOut
    current_version: Optional[ContractVersionOut] = None

# --- 5. Contract detail ---
class ContractDetailOut(ContractOut):
    versions: List[ContractVersionOut]
    parties: List[ContractPartyOut]

class PresignedUrlOut(BaseModel):
    url: str
    expires_in_minutes: int
