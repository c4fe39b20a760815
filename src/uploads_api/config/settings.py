# src/uploads_api/config/settings.py
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

LOCAL_MODE = "local"
S3_MODE = "s3"

VALID_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Values passed to the constructor (tests, embedding apps)
    2. Environment variables
    3. .env file (if exists)
    4. Default values in this class (lowest priority)

    The three cloud credentials decide the storage backend: all of them set
    means S3, anything less means the local public directory.

    Usage:
        from uploads_api.config.settings import get_settings
        settings = get_settings()
        settings.storage_mode  # "s3" or "local"
    """

    # Application Settings
    app_name: str = Field(
        default="uploads-api",
        description="Application name"
    )

    # Cloud credentials (all three required for S3 mode)
    aws_iam_user_key: Optional[str] = Field(
        default=None,
        alias="AWS_IAM_USER_KEY",
        description="Access key of the IAM user allowed to write the bucket"
    )

    aws_iam_user_secret: Optional[str] = Field(
        default=None,
        alias="AWS_IAM_USER_SECRET",
        description="Secret key of the IAM user"
    )

    aws_bucket_name: Optional[str] = Field(
        default=None,
        alias="AWS_BUCKET_NAME",
        description="Bucket receiving avatars and post attachments"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL",
        description="S3-compatible endpoint, e.g. MinIO or a moto server"
    )

    # Local Storage Configuration
    public_dir: str = Field(
        default="public",
        description="Directory served under /public; uploads land in <public_dir>/uploads"
    )

    # Upload Limits
    max_upload_bytes: int = Field(
        default=MAX_UPLOAD_BYTES,
        gt=0,
        description="Maximum size of a single uploaded file in bytes"
    )

    storage_strict_config: bool = Field(
        default=False,
        description="Fail at startup when only some cloud credentials are set"
    )

    # HTTP
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma separated list of CORS origins"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("aws_iam_user_key", "aws_iam_user_secret", "aws_bucket_name", "aws_endpoint_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty and whitespace-only values as unset."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the logging level is a standard one."""
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {v}")
        return level

    @property
    def cloud_credentials(self) -> Dict[str, Optional[str]]:
        return {
            "AWS_IAM_USER_KEY": self.aws_iam_user_key,
            "AWS_IAM_USER_SECRET": self.aws_iam_user_secret,
            "AWS_BUCKET_NAME": self.aws_bucket_name,
        }

    @property
    def using_s3(self) -> bool:
        """True only when every cloud credential is present."""
        return all(self.cloud_credentials.values())

    @property
    def has_partial_cloud_credentials(self) -> bool:
        """Some, but not all, cloud credentials are present."""
        values = self.cloud_credentials.values()
        return any(values) and not all(values)

    @property
    def missing_cloud_credentials(self) -> list:
        return [name for name, value in self.cloud_credentials.items() if not value]

    @property
    def storage_mode(self) -> str:
        return S3_MODE if self.using_s3 else LOCAL_MODE

    @property
    def cors_origins(self) -> list:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def get_display_dict(self) -> Dict[str, Any]:
        """Get configuration as a dictionary with secrets masked.

        Returns:
            Dictionary suitable for printing or logging
        """
        return {
            "APP_NAME": self.app_name,
            "STORAGE_MODE": self.storage_mode,
            "AWS_IAM_USER_KEY": _mask(self.aws_iam_user_key),
            "AWS_IAM_USER_SECRET": _mask(self.aws_iam_user_secret),
            "AWS_BUCKET_NAME": self.aws_bucket_name or "",
            "AWS_DEFAULT_REGION": self.aws_region,
            "AWS_ENDPOINT_URL": self.aws_endpoint_url or "",
            "PUBLIC_DIR": self.public_dir,
            "MAX_UPLOAD_BYTES": self.max_upload_bytes,
            "STORAGE_STRICT_CONFIG": self.storage_strict_config,
            "LOG_LEVEL": self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )


def _mask(value: Optional[str]) -> str:
    if not value:
        return ""
    if len(value) <= 8:
        return "****"
    return value[:4] + "*" * (len(value) - 4)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
