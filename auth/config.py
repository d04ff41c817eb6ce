"""Application and authentication configuration."""

import os
from enum import Enum

from pydantic import BaseModel, Field


class Environment(str, Enum):
    """Deployment mode. Controls cookie security and fault policy."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"


class AuthConfig(BaseModel):
    """
    Non-secret settings. Secrets (database URL, Valkey URL, email API key)
    come from Vault; see clients/vault_client.py.

    The magic-link lifetime is fixed at 24 hours and intentionally not
    configurable here.
    """

    # Session settings
    session_expiry_hours: int = Field(
        default=24,
        description="Admin session lifetime in hours (sliding)",
        ge=1,
        le=720,
    )

    # Rate limiting of access requests
    rate_limit_attempts: int = Field(
        default=5,
        description="Max magic link requests per email per window",
        ge=1,
        le=20,
    )
    rate_limit_window_minutes: int = Field(
        default=15,
        description="Rate limit window duration",
        ge=5,
        le=60,
    )

    # Passwords
    password_hash_rounds: int = Field(
        default=12,
        description="bcrypt cost factor",
        ge=10,
        le=15,
    )

    # Application
    app_base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL for magic link generation",
    )
    app_name: str = Field(
        default="TaskSafe",
        description="Application name for emails",
    )
    email_from: str = Field(
        default="noreply@affirmer.education",
        description="Sender address when Vault does not provide one",
    )
    environment: Environment = Environment.DEVELOPMENT

    @classmethod
    def from_env(cls) -> "AuthConfig":
        """Defaults, overridden by TASKSAFE_ENVIRONMENT and TASKSAFE_APP_BASE_URL when set."""
        overrides = {}
        if os.environ.get("TASKSAFE_ENVIRONMENT"):
            overrides["environment"] = os.environ["TASKSAFE_ENVIRONMENT"]
        if os.environ.get("TASKSAFE_APP_BASE_URL"):
            overrides["app_base_url"] = os.environ["TASKSAFE_APP_BASE_URL"]
        return cls(**overrides)

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION
