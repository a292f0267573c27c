import logging
import os
import tomllib
from enum import StrEnum
from pathlib import Path

from pydantic import SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_DIR = Path(__file__).parent.parent.parent
PROJECT_TOML_PATH = PROJECT_DIR / "pyproject.toml"

with open(PROJECT_TOML_PATH, "rb") as f:
    PYPROJECT_CONTENT = tomllib.load(f)["project"]


class Environment(StrEnum):
    LOCAL = "local"
    DEV = "dev"
    STG = "stg"
    PRD = "prd"


def convert_app_name(s: str) -> str:
    return " ".join(word.capitalize() for word in s.split("-"))


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # App variables
    app_name: str = PYPROJECT_CONTENT["name"]
    app_title: str = os.getenv("APP_TITLE", convert_app_name(app_name))
    app_version: str = PYPROJECT_CONTENT["version"]
    app_description: str = PYPROJECT_CONTENT["description"]

    backend_host: str = "0.0.0.0"
    backend_port: int = 8000

    cors_origins: str = "*"

    # Number of workers for uvicorn
    workers_count: int = 1

    # Enable uvicorn reloading
    reload_uvicorn: bool = False

    # Current working environment
    current_environment: Environment = Environment.LOCAL
    log_level: int = logging.INFO
    log_to_file: bool = True
    debug: bool = False

    # Pairing token signing
    link_secret: SecretStr | None = None  # HMAC-SHA256 key, env LINK_SECRET
    token_ttl_default_seconds: int = 600
    token_ttl_min_seconds: int = 60

    # Bot callback authorization, env PAIR_CALLBACK_AUTH (unset disables the check)
    pair_callback_auth: SecretStr | None = None

    # Claim cache
    claim_ttl_seconds: int = 300
    claim_sweep_interval_seconds: int = 60  # 0 disables the background sweep

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS origins from a comma-separated string.
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @computed_field
    @property
    def server_host(self) -> str:
        """
        Get the server host URL based on environment.
        """
        if self.current_environment in {Environment.LOCAL, Environment.DEV}:
            return f"http://{self.backend_host}:{self.backend_port}"

        return f"https://{self.backend_host}"


settings = Settings()  # type: ignore
