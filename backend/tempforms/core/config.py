from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "TempForms"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Storage backend: "sql" (sweep-based), "json" (file sweep), "redis" (native TTL)
    STORAGE_BACKEND: Literal["sql", "json", "redis"] = "sql"
    DATABASE_URL: str = "sqlite:///./tempforms.db"
    JSON_DATA_DIR: str = "data"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "tempforms"

    # Expiration
    MAX_CUSTOM_EXPIRATION_MINUTES: int = 1440  # 24 hours

    # Link minting: insert attempts before giving up on a collision streak
    LINK_GENERATION_MAX_ATTEMPTS: int = 5

    # Reclamation sweep (ignored by backends with native expiry)
    RECLAMATION_INTERVAL_SECONDS: int = 3600
    RECLAMATION_INITIAL_DELAY_SECONDS: int = 5

    # Response passwords
    BCRYPT_ROUNDS: int = 10
    RESPONSE_PASSWORD_MIN_LENGTH: int = 4
    RESPONSE_PASSWORD_MAX_LENGTH: int = 50

    # Rate limiting (per client address, slowapi limit strings)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_API: str = "100/15 minutes"
    RATE_LIMIT_CREATE_FORM: str = "10/hour"
    RATE_LIMIT_SUBMIT_RESPONSE: str = "20/5 minutes"
    RATE_LIMIT_VIEW_RESPONSES: str = "50/15 minutes"

    model_config = {"env_file": ".env", "case_sensitive": True}


settings = Settings()
