from dataclasses import dataclass
from typing import List, Literal, Optional

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Portfolio Contact"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # --- Environment & Debug ---
    ENVIRONMENT: str = "local"
    DEBUG: bool = False  # Default to False for security
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # --- Mail transport ---
    TRANSPORT_HOST: Optional[str] = None
    TRANSPORT_PORT: int = 465
    TRANSPORT_USER: Optional[str] = None
    TRANSPORT_PASS: Optional[SecretStr] = None
    TRANSPORT_SECURE: bool = True  # implicit TLS (SMTPS); False uses STARTTLS
    TRANSPORT_TIMEOUT: float = 30.0

    # --- Contact identities (never taken from the form) ---
    CONTACT_FROM: str = "Contact Me <contact@yishaizehavi.com>"
    CONTACT_TO: str = "zehaviyishai+contact@gmail.com"

    # --- Honeypot ---
    HONEYPOT_ENCRYPTION_SEED: Optional[SecretStr] = Field(
        default=None, validate_default=True
    )
    HONEYPOT_NAME_FIELD: str = "name__confirm"
    HONEYPOT_VALID_FROM_FIELD: str = "form__confirm"
    HONEYPOT_MAX_AGE_SECONDS: Optional[int] = Field(
        default=None,
        description="Reject proof tokens older than this. None disables expiry.",
    )

    # drop: field names only, redact: masked values, full: raw values
    CONTACT_LOG_FORM_DATA: Literal["drop", "redact", "full"] = "redact"

    # --- CORS ---
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=list,
        description="List of allowed CORS origins. Configure in .env",
    )

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def default_allowed_origins(
        cls, v: Optional[List[str]], info: ValidationInfo
    ) -> Optional[List[str]]:
        env = info.data.get("ENVIRONMENT") or "local"
        if env != "production":
            if v is None:
                return ["http://localhost:5173", "http://localhost:3000"]
            if isinstance(v, str) and v.strip() in ("", "[]"):
                return ["http://localhost:5173", "http://localhost:3000"]
            if isinstance(v, list) and len(v) == 0:
                return ["http://localhost:5173", "http://localhost:3000"]
        return v

    @field_validator("HONEYPOT_ENCRYPTION_SEED", mode="before")
    @classmethod
    def validate_honeypot_seed(
        cls, v: Optional[SecretStr], info: ValidationInfo
    ) -> Optional[SecretStr]:
        # Require a seed for non-local deployments
        env = info.data.get("ENVIRONMENT") or "local"
        if env != "local" and not v:
            raise ValueError(
                "HONEYPOT_ENCRYPTION_SEED must be set in environment for non-local deployments"
            )
        return v


@dataclass(frozen=True)
class ContactConfig:
    """Process-wide contact settings, built once at startup."""

    sender: str
    recipient: str
    transport_host: Optional[str]
    transport_port: int
    transport_user: Optional[str]
    transport_pass: Optional[str]
    transport_secure: bool
    transport_timeout: float
    honeypot_seed: str
    honeypot_name_field: str
    honeypot_valid_from_field: str
    honeypot_max_age_seconds: Optional[int]
    log_form_data: str

    @classmethod
    def from_settings(cls, source: Settings) -> "ContactConfig":
        seed = (
            source.HONEYPOT_ENCRYPTION_SEED.get_secret_value()
            if source.HONEYPOT_ENCRYPTION_SEED
            else ""
        )
        password = (
            source.TRANSPORT_PASS.get_secret_value() if source.TRANSPORT_PASS else None
        )
        return cls(
            sender=source.CONTACT_FROM,
            recipient=source.CONTACT_TO,
            transport_host=source.TRANSPORT_HOST,
            transport_port=source.TRANSPORT_PORT,
            transport_user=source.TRANSPORT_USER,
            transport_pass=password,
            transport_secure=source.TRANSPORT_SECURE,
            transport_timeout=source.TRANSPORT_TIMEOUT,
            honeypot_seed=seed,
            honeypot_name_field=source.HONEYPOT_NAME_FIELD,
            honeypot_valid_from_field=source.HONEYPOT_VALID_FROM_FIELD,
            honeypot_max_age_seconds=source.HONEYPOT_MAX_AGE_SECONDS,
            log_form_data=source.CONTACT_LOG_FORM_DATA,
        )


settings = Settings()
