"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # MongoDB
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "resetdesk_dev"

    # Tokens
    jwt_secret: str = "resetdesk-dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    # Authentication / authorization policy
    # login_identifier: "nrp", "email" or "any" (email when the identifier contains "@")
    login_identifier: str = "any"
    # resolution_policy: "SUPERADMIN_ONLY" or "ANY_ADMIN"
    resolution_policy: str = "SUPERADMIN_ONLY"
    # When False the public form accepts an unregistered NRP with requester fields
    public_requires_registration: bool = True

    # Logging
    logs_path: str = "./logs"
    log_level: str = "INFO"

    # CORS - set to "*" to allow all origins
    cors_origins: str = "*"

    # Environment
    environment: str = "development"
    debug: bool = True

    # Site settings defaults (used until an admin saves their own)
    site_name: str = "Polda Jatim"
    site_logo: str = "/img/BIDTIK.webp"
    login_title: str = "Reset Password Email Polri"
    login_subtitle: str = "Bid Tik Polda Jatim"

    # Seed data
    seed_default_password: str = "password123"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
