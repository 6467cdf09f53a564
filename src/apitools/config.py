"""Configuration management for apitools."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "APITOOLS_CONFIG"
DEFAULT_CONFIG_PATH = Path("etc/apitools.json")


class ServerConfig(BaseModel):
    """Configuration for the HTTP API server."""

    host: str = Field(default="127.0.0.1", description="Host to bind the API to")
    port: int = Field(default=8888, description="Port to bind the API to")


class GitLabConfig(BaseModel):
    """Configuration for the GitLab server queried for commit records.

    Requests may override both the URL and the token.
    """

    default_url: str = Field(
        default="https://gitlab.com", description="Default GitLab server URL"
    )
    default_access_token: str = Field(
        default="", description="Default personal access token"
    )
    timeout_seconds: int = Field(default=30, description="Request timeout in seconds")

    @field_validator("default_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class EmailConfig(BaseModel):
    """SMTP settings used by the local email sender."""

    host: str = Field(default="", description="SMTP server host")
    port: int = Field(default=587, description="SMTP port (465 uses implicit SSL)")
    username: str = Field(default="", description="SMTP login username")
    password: str = Field(default="", description="SMTP login password")
    from_address: str = Field(default="", description="Default sender address")
    from_name: str = Field(default="", description="Default sender display name")
    timeout_seconds: int = Field(default=30, description="SMTP timeout in seconds")

    @property
    def is_configured(self) -> bool:
        return bool(self.host) and self.port > 0


class EmailRpcConfig(BaseModel):
    """Connection parameters for the RPC mail tier."""

    host: str = Field(default="127.0.0.1", description="RPC tier host")
    port: int = Field(default=18861, description="RPC tier port")
    socket_path: Optional[str] = Field(
        default=None, description="Unix socket path, preferred over host/port when set"
    )
    timeout_seconds: int = Field(
        default=60, description="Timeout for a single RPC call in seconds"
    )


class AppConfig(BaseModel):
    """Main configuration shared by the API server and the RPC tier."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    email_rpc: EmailRpcConfig = Field(default_factory=EmailRpcConfig)
    email_backend: Literal["smtp", "rpc"] = Field(
        default="rpc", description="Which EmailSender the API uses"
    )
    log_level: str = Field(default="INFO", description="Root logging level")


# Environment variable -> (section, field, converter)
_ENV_OVERRIDES = {
    "APITOOLS_GITLAB_URL": ("gitlab", "default_url", str),
    "APITOOLS_GITLAB_TOKEN": ("gitlab", "default_access_token", str),
    "APITOOLS_SMTP_HOST": ("email", "host", str),
    "APITOOLS_SMTP_PORT": ("email", "port", int),
    "APITOOLS_SMTP_USERNAME": ("email", "username", str),
    "APITOOLS_SMTP_PASSWORD": ("email", "password", str),
    "APITOOLS_EMAIL_BACKEND": (None, "email_backend", str),
}


class ConfigManager:
    """Loads AppConfig from a JSON file and applies environment overrides."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else resolve_config_path()

    def load(self) -> AppConfig:
        """Load configuration from file, falling back to defaults if missing."""
        data: Dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {self.config_path}: {e}")
            logger.info(f"Loaded configuration from {self.config_path}")
        else:
            logger.info(
                f"No configuration file at {self.config_path}, using defaults"
            )

        self._apply_env_overrides(data, os.environ)
        return AppConfig(**data)

    @staticmethod
    def _apply_env_overrides(data: Dict[str, Any], environ) -> None:
        for env_name, (section, field, convert) in _ENV_OVERRIDES.items():
            raw = environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                value = convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}")
            if section is None:
                data[field] = value
            else:
                data.setdefault(section, {})[field] = value
            logger.debug(f"Configuration override from {env_name}")


def resolve_config_path(explicit: Optional[str] = None) -> Path:
    """Pick the config path: explicit argument, then env var, then default."""
    if explicit:
        return Path(explicit)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(config_path: Optional[str] = None) -> AppConfig:
    return ConfigManager(resolve_config_path(config_path)).load()
