from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    # If DEV and you hit SSL cert issues, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ENV: str = "dev"  # "dev" or "prod"
    LOG_LEVEL: str = "INFO"

    # Create tables on startup (disable when migrations own the schema)
    INIT_DB_ON_STARTUP: bool = True

    # --- AUTHORIZATION ---
    # Role names that bypass every organizational scope
    SUPER_ROLE_NAMES: List[str] = ["super-admin", "admin"]

    # --- TRAININGS ---
    # Re-applications allowed after a rejection for approval-gated trainings
    TRAINING_MAX_REAPPLY_ATTEMPTS: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
