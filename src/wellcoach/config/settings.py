"""
Configuration management for the WellCoach backend.

Settings are read from the environment (and an optional ``.env`` file) once per
process. The privileged identity key is held as a ``SecretStr`` and is only
handed out to server-side clients, see ``wellcoach.features.auth.adapters``.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WellcoachSettings(BaseSettings):
    """Application settings for the WellCoach services."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Core Application Settings
    app_name: str = Field(default="wellcoach")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    
    # Identity provider (Keycloak realm)
    identity_provider_url: str = Field(default="http://localhost:8080")
    identity_realm: str = Field(default="wellcoach")
    identity_public_client_id: str = Field(default="wellcoach-web")
    identity_service_client_id: str = Field(default="wellcoach-server")
    identity_service_key: Optional[SecretStr] = Field(default=None)
    identity_verify_tls: bool = Field(default=True)
    
    # Profile store / change feed (PostgreSQL)
    database_url: Optional[str] = Field(default=None)
    db_pool_min_size: int = Field(default=2)
    db_pool_max_size: int = Field(default=10)
    db_command_timeout: int = Field(default=30)
    change_feed_channel_prefix: str = Field(default="realtime")
    
    # Session cookies
    session_cookie_prefix: str = Field(default="wc")
    session_cookie_secure: bool = Field(default=True)
    session_cookie_samesite: str = Field(default="lax")
    session_cookie_domain: Optional[str] = Field(default=None)
    
    # Routing
    protected_paths: List[str] = Field(
        default=["/dashboard", "/clients", "/check-ins", "/settings"]
    )
    login_path: str = Field(default="/login")
    signup_path: str = Field(default="/signup")
    post_login_path: str = Field(default="/dashboard")
    
    @field_validator("protected_paths")
    @classmethod
    def _normalize_protected_paths(cls, value: List[str]) -> List[str]:
        normalized = []
        for path in value:
            path = path.strip()
            if not path.startswith("/"):
                raise ValueError(f"Protected path must start with '/': {path!r}")
            if len(path) > 1:
                path = path.rstrip("/")
            if path not in normalized:
                normalized.append(path)
        return normalized
    
    @field_validator("session_cookie_samesite")
    @classmethod
    def _validate_samesite(cls, value: str) -> str:
        value = value.lower()
        if value not in ("lax", "strict", "none"):
            raise ValueError("session_cookie_samesite must be lax, strict or none")
        return value
    
    @model_validator(mode="after")
    def _check_key_separation(self) -> "WellcoachSettings":
        if (
            self.identity_service_key is not None
            and self.identity_service_key.get_secret_value() == self.identity_public_client_id
        ):
            raise ValueError("The privileged identity key must differ from the public client id")
        return self
    
    @property
    def access_token_cookie(self) -> str:
        return f"{self.session_cookie_prefix}-access-token"
    
    @property
    def refresh_token_cookie(self) -> str:
        return f"{self.session_cookie_prefix}-refresh-token"


@lru_cache()
def get_settings() -> WellcoachSettings:
    """Get cached settings instance."""
    return WellcoachSettings()
