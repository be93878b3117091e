"""
Configuration models for css-source.

Handles language options for a parse session and global settings
read from the environment.
"""

from typing import Any, Dict
from pydantic import BaseModel, Field, ConfigDict, StrictBool, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LanguageOptions(BaseModel):
    """Options controlling how a stylesheet is parsed"""
    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True
    )

    # Keep the tree when the grammar reports recoverable errors
    tolerant: StrictBool = False

    # Processing limits
    max_file_size_mb: int = Field(default=10, ge=1, le=100)

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes"""
        return self.max_file_size_mb * 1024 * 1024

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LanguageOptions':
        """Create from dictionary"""
        return cls(**data)


class GlobalSettings(BaseSettings):
    """Global application settings with environment variable support"""
    model_config = SettingsConfigDict(
        env_prefix="CSS_SOURCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Parsing defaults
    default_tolerant: bool = False
    max_file_size_mb: int = Field(default=10, ge=1, le=100)

    # Logging
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lower-case level names"""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def default_language_options(self) -> LanguageOptions:
        """Language options seeded from these settings"""
        return LanguageOptions(
            tolerant=self.default_tolerant,
            max_file_size_mb=self.max_file_size_mb
        )
