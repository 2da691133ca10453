# app/services/storage_service.py
# S3-compatible object storage (Backblaze B2, MinIO, AWS S3) behind boto3
import logging
import uuid
from datetime import datetime
from functools import lru_cache
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import StorageError, StorageObjectNotFoundError

logger = logging.getLogger(__name__)

KEY_PREFIX = "contracts/"
MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class S3StorageService:
    """
    Upload / download contract files and issue presigned GET URLs.
    Every method blocks on the network; async callers use run_in_threadpool.
    """

    def __init__(self, client, bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

    @classmethod
    def from_settings(cls) -> "S3StorageService":
        client = boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.S3_REGION,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            config=Config(signature_version="s3v4"),
        )
        logger.info(f"Storage initialized with endpoint: {settings.S3_ENDPOINT_URL}, bucket: {settings.S3_BUCKET_NAME}")
        return cls(client, settings.S3_BUCKET_NAME)

    @staticmethod
    def generate_file_key(original_filename: str) -> str:
        """contracts/{YYYYmmddHHMMSS}_{8 random hex}_{original filename}"""
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        suffix = uuid.uuid4().hex[:8]
        return f"{KEY_PREFIX}{timestamp}_{suffix}_{original_filename}"

    def get_bucket_name(self) -> str:
        return self.bucket_name

    def upload(self, data: bytes, original_filename: str, content_type: Optional[str] = None) -> str:
        key = self.generate_file_key(original_filename)
        logger.info(f"Uploading file with key: {key} to bucket: {self.bucket_name}")

        params = {"Bucket": self.bucket_name, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Upload failed for key {key}: {e}", exc_info=True)
            raise StorageError(f"upload failed: {key}") from e

        logger.info(f"File uploaded successfully: {key}")
        return key

    def download(self, key: str) -> bytes:
        logger.debug(f"Downloading file with key: {key} from bucket: {self.bucket_name}")
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in MISSING_KEY_CODES:
                logger.error(f"Object not found in storage: {key}")
                raise StorageObjectNotFoundError(key) from e
            logger.error(f"Download failed for key {key}: {e}", exc_info=True)
            raise StorageError(f"download failed: {key}") from e
        except BotoCoreError as e:
            logger.error(f"Download failed for key {key}: {e}", exc_info=True)
            raise StorageError(f"download failed: {key}") from e

    def generate_presigned_get_url(self, key: Optional[str], ttl_minutes: int) -> Optional[str]:
        if key is None:
            logger.warning("Cannot generate presigned URL for null key")
            return None
        logger.debug(f"Generating presigned URL for key: {key}, duration: {ttl_minutes} minutes")
        try:
            url = self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=ttl_minutes * 60,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating presigned URL for key {key}: {e}", exc_info=True)
            return None
        logger.info(f"Generated presigned URL for {key}")
        return url


@lru_cache
def get_storage_service() -> S3StorageService:
    """FastAPI Dependency: process-wide storage client"""
    return S3StorageService.from_settings()
