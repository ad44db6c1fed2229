from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Postshare API"
    api_prefix: str = ""
    database_url: str = Field(default="sqlite:///./postshare.db")
    secret_key: str = Field(default="dev-change-me-to-a-long-random-secret")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    password_schemes: List[str] = ["pbkdf2_sha256"]
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # Client side
    api_url: str = "http://localhost:8000"
    client_storage_path: Path = Field(
        default_factory=lambda: Path.home() / ".postshare" / "storage.json"
    )
    client_timeout: float = 30.0


settings = Settings()
