"""Configuration loading from environment variables and files."""

import json
import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from replayer.ports.storage import RequestConfiguration

__all__ = ["ConfigurationSeed", "Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)


class ConfigurationSeed(BaseModel):
    """One request configuration as written in the seed file."""

    name: str = Field(..., min_length=1, description="Unique configuration name.")
    api_endpoint: str = Field(..., description="Fraud-detection endpoint receiving the POSTs.")
    request_template: str = Field(..., min_length=1, description="Body template with {{tokens}}.")
    bearer_token: str | None = Field(default=None, description="Optional bearer credential.")
    delay_between_requests_ms: int = Field(default=5000, ge=0)
    max_iterations: int = Field(default=10, ge=0, description="0 means unbounded.")
    is_active: bool = False
    trust_ssl_certificate: bool = Field(
        default=False, description="Accept any server certificate (self-signed test endpoints)."
    )

    @field_validator("api_endpoint")
    @classmethod
    def validate_api_endpoint(cls, v: str) -> str:
        """Validate that endpoint is a valid HTTP(S) URL.

        Args:
            v: Endpoint URL to validate.

        Returns:
            The validated URL.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
            if url.scheme not in ("http", "https"):
                raise ValueError("Only http:// and https:// endpoints allowed")
        except Exception as e:
            raise ValueError(f"Invalid API endpoint: {e}") from e
        return v

    def to_configuration(self) -> RequestConfiguration:
        """Convert to the storage DTO; the store assigns the id."""
        return RequestConfiguration(id=0, **self.model_dump())


class Settings(BaseModel):
    """Runtime configuration for the replayer service.

    Attributes:
        database_url: SQLAlchemy URL of the configuration store and result sink.
        listen_host: Bind host of the control surface.
        listen_port: Port of the control surface.
        poll_interval_sec: Supervisory loop interval.
        error_backoff_sec: Wait after a failed pass.
        request_timeout_sec: Total timeout of one outbound request.
        rate_limit_max_requests: Control-surface writes allowed per key per window.
        rate_limit_window_sec: Rate-limit window length.
        configuration_seed_file: Optional JSON file with configurations to seed.
        configurations: Seed configurations (populated from file).
    """

    database_url: str = Field(default="sqlite:///replayer.db", min_length=1)
    listen_host: str = Field(default="127.0.0.1", min_length=1)
    listen_port: int = Field(default=8080, ge=1, le=65535)
    poll_interval_sec: float = Field(default=1.0, gt=0)
    error_backoff_sec: float = Field(default=5.0, gt=0)
    request_timeout_sec: float = Field(default=30.0, gt=0)
    rate_limit_max_requests: int = Field(default=10, gt=0)
    rate_limit_window_sec: float = Field(default=60.0, gt=0)
    configuration_seed_file: str | None = Field(
        default=None,
        description="Optional JSON array of configurations inserted at startup.",
    )
    configurations: list[ConfigurationSeed] = Field(
        default_factory=list,
        description="Configurations to seed (populated from file).",
    )

    def load_configurations(self) -> None:
        """Load and validate seed configurations from the JSON file.

        Raises:
            ValueError: If file not found, invalid JSON, wrong format or invalid entry.
        """
        if not self.configuration_seed_file:
            return

        path = self.configuration_seed_file
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ValueError(f"Configuration seed file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Configuration seed file contains invalid JSON: {path}") from e

        if not isinstance(data, list):
            raise ValueError("Configuration seed file must be a JSON array")
        if not all(isinstance(x, dict) for x in data):
            raise ValueError("Each configuration must be a JSON object")

        try:
            configurations = [ConfigurationSeed(**entry) for entry in data]
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {path}: {e}") from e

        names = [c.name for c in configurations]
        if len(names) != len(set(names)):
            raise ValueError("Configuration names in the seed file must be unique")

        self.configurations = configurations
        logger.debug(f"Loaded {len(configurations)} configurations from {path}")


def _env_number(name: str, default: str, cast: type[int] | type[float]) -> int | float:
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number (got: {raw})") from e


def load_settings() -> Settings:
    """Load and validate settings from environment and files.

    Optional environment variables (defaults in brackets):
    - DATABASE_URL [sqlite:///replayer.db]
    - LISTEN_HOST [127.0.0.1], LISTEN_PORT [8080]
    - POLL_INTERVAL_SECONDS [1.0], ERROR_BACKOFF_SECONDS [5.0]
    - REQUEST_TIMEOUT_SECONDS [30.0]
    - RATE_LIMIT_MAX_REQUESTS [10], RATE_LIMIT_WINDOW_SECONDS [60]
    - CONFIGURATION_SEED_FILE: JSON array of configurations to seed.

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If a numeric env var cannot be parsed.
        ValueError: If configuration is invalid.
    """
    try:
        settings = Settings(
            database_url=os.getenv("DATABASE_URL", "sqlite:///replayer.db"),
            listen_host=os.getenv("LISTEN_HOST", "127.0.0.1"),
            listen_port=_env_number("LISTEN_PORT", "8080", int),
            poll_interval_sec=_env_number("POLL_INTERVAL_SECONDS", "1.0", float),
            error_backoff_sec=_env_number("ERROR_BACKOFF_SECONDS", "5.0", float),
            request_timeout_sec=_env_number("REQUEST_TIMEOUT_SECONDS", "30.0", float),
            rate_limit_max_requests=_env_number("RATE_LIMIT_MAX_REQUESTS", "10", int),
            rate_limit_window_sec=_env_number("RATE_LIMIT_WINDOW_SECONDS", "60", float),
            configuration_seed_file=os.getenv("CONFIGURATION_SEED_FILE") or None,
        )
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e

    settings.load_configurations()

    logger.info(
        f"Replayer configured: database={settings.database_url}, "
        f"listen={settings.listen_host}:{settings.listen_port}, "
        f"poll={settings.poll_interval_sec}s, "
        f"timeout={settings.request_timeout_sec}s, "
        f"seed={settings.configuration_seed_file or '<none>'} "
        f"({len(settings.configurations)} configurations)"
    )

    return settings
