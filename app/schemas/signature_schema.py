# app/schemas/signature_schema.py

from pydantic import BaseModel
from datetime import datetime

from app.models.contract import VersionStatus

class SignatureOut(BaseModel):
    message: str
    signature_id: int
    version_id: int
    signature_hash: str
    signed_at: datetime
    version_status: VersionStatus
