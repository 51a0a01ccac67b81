"""
Configuration management using Pydantic Settings.
"""

from pathlib import Path
from typing import Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator


class FetchConfig(BaseModel):
    """Settings for per-listing booking fetches."""
    timeout_seconds: Optional[float] = None  # None waits indefinitely
    on_failure: Literal["fail", "include", "exclude"] = "fail"
    per_page: int = 100
    request_timeout_seconds: float = 30

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: Optional[float]) -> Optional[float]:
        """Ensure the fetch timeout is positive when set."""
        if value is not None and value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @field_validator("per_page")
    @classmethod
    def validate_per_page(cls, value: int) -> int:
        """The Integration API accepts between 1 and 100 items per page."""
        if not 1 <= value <= 100:
            raise ValueError(f"per_page must be between 1 and 100, got {value}")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    client_id: str = ""
    client_secret: str = ""
    api_base_url: str = "https://flex-integ-api.sharetribe.com/v1/integration_api"
    auth_url: str = "https://flex-integ-api.sharetribe.com/v1/auth/token"
    timezone: str = "UTC"
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("api_base_url", "auth_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def has_credentials(self) -> bool:
        """Check whether Integration API credentials are configured."""
        return bool(self.client_id and self.client_secret)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
