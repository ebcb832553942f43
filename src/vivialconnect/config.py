from __future__ import annotations
import os
import yaml
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vivialconnect.errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.vivialconnect.net/api/v1.0/"


class ClientConfig(BaseSettings):
    """
    Client configuration. Values come from:
      1) Environment variables (.env) — highest precedence
      2) Optional YAML config file (default: vivialconnect.yaml)
    """
    # blank values in the environment or .env fall through to YAML/defaults
    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", extra="ignore", populate_by_name=True, env_ignore_empty=True,
    )

    # --- Credentials ---
    account_id: Optional[int] = Field(default=None, alias="VIVIALCONNECT_ACCOUNT_ID")
    api_key: Optional[str] = Field(default=None, alias="VIVIALCONNECT_API_KEY")
    api_secret: Optional[str] = Field(default=None, alias="VIVIALCONNECT_API_SECRET")

    # --- Networking ---
    api_base_url: str = Field(DEFAULT_BASE_URL, alias="VIVIALCONNECT_API_BASE_URL")
    timeout_seconds: float = Field(20.0, alias="VIVIALCONNECT_TIMEOUT_SECONDS")
    max_retries: int = Field(3, alias="VIVIALCONNECT_MAX_RETRIES")
    backoff_seconds: float = Field(0.5, alias="VIVIALCONNECT_BACKOFF_SECONDS")
    max_backoff_seconds: float = Field(8.0, alias="VIVIALCONNECT_MAX_BACKOFF_SECONDS")

    # --- Observability ---
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @classmethod
    def settings_customise_sources(
            cls,
            settings_cls,
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
    ):
        # env first, so YAML values passed as init kwargs act as defaults
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    # ---------------- Validators ----------------

    @field_validator("account_id", "api_key", "api_secret", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        """
        Allow empty strings in .env: VIVIALCONNECT_API_KEY=
        """
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("api_base_url", mode="before")
    @classmethod
    def normalize_base_url(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_BASE_URL
        s = str(v).strip()
        return s if s.endswith("/") else s + "/"

    @property
    def has_credentials(self) -> bool:
        return bool(self.account_id and self.api_key and self.api_secret)


ClientConfig.model_rebuild()


def load_config() -> ClientConfig:
    """
    Load config from optional YAML (VIVIALCONNECT_CONFIG_FILE or ./vivialconnect.yaml),
    then overlay env vars.
    """
    yaml_path = os.environ.get("VIVIALCONNECT_CONFIG_FILE", "vivialconnect.yaml")
    data = {}
    if os.path.exists(yaml_path):
        with open(yaml_path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f) or {}
            data.update(y)

    try:
        return ClientConfig(**data)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e
