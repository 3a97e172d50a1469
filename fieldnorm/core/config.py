from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FIELDNORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Annotations
    TAG_KEY: str = "normalize"  # metadata / json_schema_extra key holding directives
    ANNOTATIONS_FILE: Optional[str] = None  # YAML overrides, see registry/loader.py

    @field_validator("TAG_KEY")
    @classmethod
    def tag_key_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("TAG_KEY must not be empty")
        return v

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FILE: Optional[str] = None


settings = Settings()
