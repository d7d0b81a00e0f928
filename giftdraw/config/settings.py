from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None

    # Row store backend: "supabase" or "memory" (local development only)
    storage_backend: str = "supabase"

    # Draw
    draw_min_members: int = 3
    draw_lock_timeout_seconds: float = 10.0

    # Join codes
    join_code_length: int = 6
    join_code_max_attempts: int = 5

    # App
    app_name: str = "giftdraw-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @field_validator("draw_min_members")
    @classmethod
    def _at_least_three(cls, value: int) -> int:
        # A single cycle over fewer than 3 members degenerates into a swap
        if value < 3:
            raise ValueError("draw_min_members must be at least 3")
        return value

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
