# app/schemas/user_schema.py
from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
import re
from datetime import datetime
from typing import List, Optional

# Token response
class Token(BaseModel):
    access_token: str
    token_type: str

# Data carried inside the token
class TokenData(BaseModel):
    identifier: str


# Registration request body
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        """
        Password must mix letters and digits
        """
        if not re.search(r'(?=.*[a-zA-Z])(?=.*[0-9])', v):
            raise ValueError('password must contain letters and digits')
        return v

# Safe user representation (no password hash)
class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    identifier: str
    name: str
    email: str
    is_active: bool
    created_at: Optional[datetime] = None

# Compact user used in search results and nested in contracts
class UserSearchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    identifier: str
    name: str
    email: str

class UserSearchPage(BaseModel):
    items: List[UserSearchOut]
    total: int
    page: int
    size: int
