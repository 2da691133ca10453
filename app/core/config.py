# app/core/config.py
# Application settings (database URL, JWT secret, object storage credentials)
from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str
    DB_ECHO: bool = False

    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Object storage (any S3-compatible endpoint, e.g. Backblaze B2)
    S3_ENDPOINT_URL: Optional[str] = None
    S3_REGION: str = "us-east-005"
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_BUCKET_NAME: str = "contracts"
    STORAGE_PROVIDER: str = "B2"
    PRESIGNED_URL_EXPIRE_MINUTES: int = 10

    # Uploads
    MAX_UPLOAD_SIZE_MB: int = 20

    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"

settings = Settings()
