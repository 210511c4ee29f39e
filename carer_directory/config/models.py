"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Provider limit for the number of values in one "in" query
PROVIDER_IN_QUERY_LIMIT = 10


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class DirectoryConfig(BaseModel):
    """Where carer profiles and reviews live, and how they are queried."""

    profiles_collection: str = Field(
        "users", min_length=1, description="Collection holding user profile documents"
    )
    reviews_collection: str = Field(
        "reviews", min_length=1, description="Collection holding standalone review documents"
    )
    role_field: str = Field("role", min_length=1, description="Profile field carrying the user role")
    carer_roles: List[str] = Field(
        default_factory=lambda: ["carer"],
        min_length=1,
        description="Role values that mark a profile as a carer",
    )
    review_batch_size: int = Field(
        PROVIDER_IN_QUERY_LIMIT,
        ge=1,
        le=PROVIDER_IN_QUERY_LIMIT,
        description="Carer ids per reviews query",
    )

    @field_validator("profiles_collection", "reviews_collection", "role_field")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from string fields."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("carer_roles")
    @classmethod
    def normalize_roles(cls, v: List[str]) -> List[str]:
        """Strip roles, drop blanks and duplicates while keeping order."""
        roles: List[str] = []
        for role in v:
            stripped = role.strip()
            if stripped and stripped not in roles:
                roles.append(stripped)
        if not roles:
            raise ValueError("carer_roles must contain at least one non-empty role")
        return roles


class StorageConfig(BaseModel):
    """Backing document store settings."""

    enabled: bool = Field(True, description="Set to false to run without a document store")
    database_url: Optional[str] = Field(
        None, description="SQLAlchemy URL of the document database"
    )

    @field_validator("database_url")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank URL as not configured."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the carer directory."""

    directory: DirectoryConfig = Field(
        default_factory=DirectoryConfig, description="Collections and query settings"
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig, description="Document store settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    def resolve_database_url(self, override: Optional[str] = None) -> Optional[str]:
        """Database URL to use, or None when the store is not configured.

        An environment override wins over the file; a disabled store always
        yields None.
        """
        if not self.storage.enabled:
            return None
        return override or self.storage.database_url
