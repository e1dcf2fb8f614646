"""
Session store configuration using Pydantic Settings.

Configuration values can be set via environment variables or .env file.
DynamoDBStoreConfig is the validated structure a store is constructed from;
Settings builds one from the environment.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSCredentials(BaseModel):
    """Explicit credentials used to build a DynamoDB client"""

    access_key: str = Field(min_length=1)
    secret_key: str = Field(min_length=1)
    session_token: Optional[str] = None
    region: str = "us-east-1"
    # DynamoDB Local or another compatible endpoint
    endpoint_url: Optional[str] = None

    @field_validator("region")
    @classmethod
    def normalize_region(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("region must not be empty")
        return v


class DynamoDBStoreConfig(BaseModel):
    """
    Construction options for DynamoDBStore.

    Exactly one of `client` (a pre-built backend handle exposing put_item,
    get_item, delete_item and update_item) or `credentials` must be given.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    table: str = Field(min_length=1)
    hash_key: str = Field(min_length=1)
    # KeyValueBackend; checked by check_client
    client: Optional[Any] = None
    credentials: Optional[AWSCredentials] = None
    # Delete items found expired on read instead of waiting for backend TTL
    delete_expired_on_read: bool = False

    @field_validator("hash_key")
    @classmethod
    def check_hash_key(cls, v: str) -> str:
        from dynamo_session_store.stores.codec import EXPIRES_KEY, SESSION_KEY

        if v in (EXPIRES_KEY, SESSION_KEY):
            raise ValueError(f"hash_key must not be the reserved attribute '{v}'")
        return v

    @field_validator("client")
    @classmethod
    def check_client(cls, v: Any) -> Any:
        from dynamo_session_store.stores.base import KeyValueBackend

        if v is not None and not isinstance(v, KeyValueBackend):
            raise ValueError(
                "client must provide put_item, get_item, delete_item and update_item"
            )
        return v

    @model_validator(mode="after")
    def check_backend_handle(self) -> "DynamoDBStoreConfig":
        if self.client is None and self.credentials is None:
            raise ValueError("either client or credentials is required")
        if self.client is not None and self.credentials is not None:
            raise ValueError("client and credentials are mutually exclusive")
        return self


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Session table
    SESSION_TABLE: str = "Sessions"
    SESSION_HASH_KEY: str = "SessionID"
    SESSION_DELETE_EXPIRED_ON_READ: bool = False

    # Session cookie (used by the ASGI middleware)
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_MAX_AGE_MS: Optional[int] = Field(default=None, gt=0)
    SECRET_KEY: str = "change-me-session-signing-key"

    # AWS
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_SESSION_TOKEN: Optional[str] = None
    AWS_DEFAULT_REGION: str = "us-east-1"
    DYNAMODB_ENDPOINT_URL: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    def get_credentials(self) -> Optional[AWSCredentials]:
        """Return configured AWS credentials, or None if the key pair is incomplete"""
        if not self.AWS_ACCESS_KEY_ID or not self.AWS_SECRET_ACCESS_KEY:
            return None
        return AWSCredentials(
            access_key=self.AWS_ACCESS_KEY_ID,
            secret_key=self.AWS_SECRET_ACCESS_KEY,
            session_token=self.AWS_SESSION_TOKEN,
            region=self.AWS_DEFAULT_REGION,
            endpoint_url=self.DYNAMODB_ENDPOINT_URL,
        )

    def store_config(self, client: Optional[Any] = None) -> DynamoDBStoreConfig:
        """
        Build a store configuration from these settings.

        Args:
            client: Optional pre-built backend client; takes precedence over
                configured credentials

        Raises:
            pydantic.ValidationError: If neither a client nor credentials are available
        """
        return DynamoDBStoreConfig(
            table=self.SESSION_TABLE,
            hash_key=self.SESSION_HASH_KEY,
            client=client,
            credentials=None if client is not None else self.get_credentials(),
            delete_expired_on_read=self.SESSION_DELETE_EXPIRED_ON_READ,
        )


# Global settings instance
settings = Settings()
