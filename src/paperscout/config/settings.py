"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Explicit overrides passed to ``load_settings``
  2. YAML config file (if specified)
  3. Environment variables (PAPERSCOUT_ prefix) and ``.env``
  4. Default values

Settings are loaded once at process start and treated as immutable
thereafter.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from paperscout import __version__
from paperscout.core.exceptions import ConfigurationError


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="127.0.0.1", description="Server bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Server port")
    workers: int = Field(default=1, ge=1, description="Number of worker processes")


class HttpSettings(BaseModel):
    """Outbound request scheduling configuration.

    One global budget shared by every source: ``max_concurrent`` in-flight
    requests and ``min_interval_ms`` between request start times.
    """

    timeout_ms: int = Field(default=30000, gt=0, description="Per-request timeout in milliseconds")
    retry_count: int = Field(default=5, ge=0, description="Retries for transient failures")
    max_concurrent: int = Field(default=2, gt=0, description="Max simultaneously in-flight requests")
    min_interval_ms: int = Field(default=1000, ge=0, description="Min spacing between request starts")
    user_agent: str = Field(
        default=f"paperscout/{__version__}",
        min_length=1,
        description="Outbound User-Agent header",
    )
    backoff_base_ms: int = Field(default=1000, ge=0, description="Backoff base delay in milliseconds")
    backoff_cap_ms: int = Field(default=30000, ge=0, description="Backoff delay ceiling in milliseconds")
    backoff_jitter_ms: int = Field(default=250, ge=0, description="Max random jitter added to backoff")


class PluginSettings(BaseModel):
    """Enable flags for optional backends (all off by default)."""

    sci_hub: bool = Field(default=False, description="Enable the Sci-Hub plugin")
    libgen: bool = Field(default=False, description="Enable the Library Genesis plugin")
    oa_button: bool = Field(default=False, description="Enable the Open Access Button plugin")
    unpaywall: bool = Field(default=False, description="Enable the Unpaywall plugin")
    science_direct: bool = Field(default=False, description="Enable the ScienceDirect plugin")
    springer_link: bool = Field(default=False, description="Enable the Springer Link plugin")
    ieee_xplore: bool = Field(default=False, description="Enable the IEEE Xplore plugin")


class CredentialSettings(BaseModel):
    """Credentials for sources that need them."""

    semantic_scholar_api_key: str | None = Field(default=None, description="Semantic Scholar API key")
    core_api_key: str | None = Field(default=None, description="CORE API key")
    wos_api_key: str | None = Field(default=None, description="Clarivate Web of Science API key")
    scopus_api_key: str | None = Field(default=None, description="Elsevier Scopus API key")
    microsoft_academic_api_key: str | None = Field(
        default=None, description="Microsoft Academic subscription key"
    )
    unpaywall_email: str | None = Field(default=None, description="Contact email required by Unpaywall")

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class EndpointSettings(BaseModel):
    """Base URLs for mirror-style sources."""

    sci_hub_base_url: str = Field(default="https://sci-hub.se", description="Sci-Hub mirror")
    libgen_base_url: str = Field(default="https://libgen.is", description="Library Genesis mirror")
    oa_button_api_url: str = Field(
        default="https://api.openaccessbutton.org/find",
        description="Open Access Button find endpoint",
    )

    @field_validator("sci_hub_base_url", "libgen_base_url", "oa_button_api_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the PAPERSCOUT_ prefix.
    Nested settings use double underscores: PAPERSCOUT_HTTP__MAX_CONCURRENT=4

    Example:
        PAPERSCOUT_LOG_LEVEL=debug
        PAPERSCOUT_DOWNLOAD_DIR=/data/papers
        PAPERSCOUT_PLUGINS__UNPAYWALL=true
        PAPERSCOUT_CREDENTIALS__UNPAYWALL_EMAIL=me@example.org
    """

    model_config = {
        "env_prefix": "PAPERSCOUT_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="PaperScout", description="Application name")
    version: str = Field(default=__version__, description="Application version")

    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info",
        description="Log level",
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format: json, console")
    download_dir: Path = Field(default=Path("./downloads"), description="Default download directory")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    plugins: PluginSettings = Field(default_factory=PluginSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)
    endpoints: EndpointSettings = Field(default_factory=EndpointSettings)

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _lowercase(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @classmethod
    def from_yaml(cls, path: str | Path, **overrides: Any) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are passed as init arguments, so they win
        over environment variables for the keys they set.

        Args:
            path: Path to the YAML config file.
            **overrides: Top-level values applied over the file before validation.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**{**data, **overrides})


def load_settings(path: str | Path | None = None, **overrides: Any) -> Settings:
    """Load and validate settings, converting failures to ``ConfigurationError``.

    Args:
        path: Optional YAML config file.
        **overrides: Explicit field values (highest precedence).

    Returns:
        Validated Settings.

    Raises:
        ConfigurationError: If the configuration is invalid or the file is missing.
    """
    try:
        if path is not None:
            return Settings.from_yaml(path, **overrides)
        return Settings(**overrides)
    except FileNotFoundError as e:
        raise ConfigurationError(str(e)) from e
    except PydanticValidationError as e:
        issues = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {issues}") from e
