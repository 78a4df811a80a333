from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Database backing the key-value storage
    database_url: str = Field(default="sqlite:///./medflow.db", env="DATABASE_URL")

    # Storage keys are "<namespace>_users", "<namespace>_current_user", "<namespace>_patients"
    storage_namespace: str = Field(default="medflow", env="STORAGE_NAMESPACE")

    # Password digests
    password_hash_iterations: int = Field(default=100_000, env="PASSWORD_HASH_ITERATIONS")

    # Dashboard
    recent_patients_limit: int = Field(default=5, env="RECENT_PATIENTS_LIMIT")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_file: str = Field(default="", env="LOG_FILE")

    # CORS
    cors_origins: list[str] = Field(default=["*"], env="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
