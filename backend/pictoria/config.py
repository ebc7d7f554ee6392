"""Application settings and environment configuration."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TRAINING_VERSION = "b6af14222e6bd9be257cbc1ea4afda3cd0503e1133083b9d1de0364d8568e6ef"


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    env: str = "development"
    app_name: str = "Pictoria AI"
    api_prefix: str = "/api"

    database_url: str = "sqlite:///./data/pictoria.db"

    cors_origins: str = Field(default="http://localhost:3000")
    trusted_hosts: str = Field(default="localhost,127.0.0.1,testserver")
    enable_docs: bool | None = None
    max_request_mb: int = Field(default=16, ge=1, le=512)
    write_rate_limit_per_minute: int = Field(default=30, ge=1, le=10000)

    # Training / inference provider
    replicate_api_token: str = ""
    replicate_api_url: str = "https://api.replicate.com/v1"
    replicate_timeout_seconds: float = Field(default=60.0, gt=0, le=600)
    replicate_webhook_secret: str | None = None
    replicate_model_owner: str = "gabaal"
    replicate_model_hardware: str = "gpu-l40s"
    training_base_owner: str = "ostris"
    training_base_model: str = "flux-dev-lora-trainer"
    training_base_version: str = DEFAULT_TRAINING_VERSION
    training_steps: int = Field(default=1000, ge=1, le=10000)
    training_resolution: str = "1024"
    trigger_word: str = "ohwx"
    site_url: str | None = None
    ngrok_host: str | None = None

    # Transactional email
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com"
    email_from: str = "Pictoria AI <noreply@pictoria.ai>"
    email_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    # Hosted identity provider
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    session_cookie_name: str = "sb-access-token"
    identity_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    # Object storage (USE_S3_STORAGE=true against the hosted S3 endpoint)
    use_s3_storage: bool = False
    s3_endpoint_url: str = "http://localhost:54321/storage/v1/s3"
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_region: str = "us-east-1"
    storage_dir: str = "./data/storage"
    training_bucket: str = "training_data"
    images_bucket: str = "generated_images"
    signed_url_expiry: int = Field(default=3600, ge=60, le=86400)

    @model_validator(mode="after")
    def validate_webhook_settings(self) -> "Settings":
        """Production deployments need a reachable HTTPS callback base."""
        if self.env.lower() == "production":
            base = self.webhook_base_url
            if not base:
                raise ValueError("SITE_URL or NGROK_HOST must be set in production.")
            if not base.startswith("https://"):
                raise ValueError("Webhook base URL must use https in production.")
        return self

    @property
    def webhook_base_url(self) -> str | None:
        """Public base URL the provider calls back on; SITE_URL wins over the tunnel host."""
        base = self.site_url or self.ngrok_host
        return base.rstrip("/") if base else None

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def trusted_host_list(self) -> list[str]:
        """Parse comma-separated trusted hostnames for Host header validation."""
        hosts = [host.strip() for host in self.trusted_hosts.split(",") if host.strip()]
        return hosts or ["localhost", "127.0.0.1"]

    @property
    def docs_enabled(self) -> bool:
        """Enable docs by default in non-production environments only."""
        if self.enable_docs is not None:
            return bool(self.enable_docs)
        return self.env.lower() != "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
