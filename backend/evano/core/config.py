"""Application configuration."""
import os
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    app_name: str = "Evano Streams API"
    api_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase (auth, tables, storage, rpc)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_key: str = ""
    http_timeout: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS - accepts comma-separated string from env
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Return CORS origins as a list."""
        origins = []
        if self.cors_origins:
            origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        else:
            origins = ["http://localhost:5173", "http://localhost:3000"]

        railway_domain = os.getenv("RAILWAY_PUBLIC_DOMAIN")
        if railway_domain:
            origins.append(f"https://{railway_domain}")

        return origins

    # Home feed - comma-separated category shelves, in display order
    home_categories: str = "Movies,Music,Podcast,Documentary,Skit video"

    @property
    def home_categories_list(self) -> List[str]:
        return [c.strip() for c in self.home_categories.split(",") if c.strip()]

    # Sessions
    sign_out_timeout: float = 2.0
    session_ttl_seconds: int = 300

    # Ads (seconds)
    banner_ad_delay: float = 5.0
    lower_third_min_interval: float = 8.0
    lower_third_max_interval: float = 23.0
    lower_third_visible: float = 4.0


settings = Settings()
