"""Library configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ECDHES_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ECDHES_",
        env_file=".env",
        case_sensitive=False,
    )

    # Reject an "epk" header whose curve differs from the recipient key
    require_epk_curve_match: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
