from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for invitation lookup and user deletion

    # App
    app_name: str = "underwraps-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    # First entry is the fallback origin; entries may contain a single "*" wildcard
    cors_origins: str = "http://localhost:5173,http://localhost:8080,http://localhost:3000,https://*-preview.vercel.app"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    public_rate_limit: str = "20/minute"
    app_base_url: str = "http://localhost:5173"

    # Domain
    invitation_ttl_days: int = 7
    invitations_require_admin: bool = False
    wishlist_name_max_attempts: int = 5
    metadata_fetch_timeout_seconds: float = 8.0
    default_currency: str = "USD"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
