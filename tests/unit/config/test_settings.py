"""Tests for settings loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from paperscout.config.settings import Settings, load_settings
from paperscout.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run from an empty directory so no stray .env file is picked up."""
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_http_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.http.timeout_ms == 30000
        assert settings.http.retry_count == 5
        assert settings.http.max_concurrent == 2
        assert settings.http.min_interval_ms == 1000
        assert settings.http.user_agent.startswith("paperscout/")

    def test_plugins_disabled_by_default(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert not any(settings.plugins.model_dump().values())

    def test_credentials_absent_by_default(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.credentials.semantic_scholar_api_key is None
        assert settings.credentials.core_api_key is None
        assert settings.credentials.unpaywall_email is None


class TestEnvironment:
    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PAPERSCOUT_HTTP__MAX_CONCURRENT", "4")
        monkeypatch.setenv("PAPERSCOUT_PLUGINS__UNPAYWALL", "true")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.http.max_concurrent == 4
        assert settings.plugins.unpaywall is True

    def test_log_level_is_lowercased(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PAPERSCOUT_LOG_LEVEL", "DEBUG")
        assert Settings(_env_file=None).log_level == "debug"  # type: ignore[call-arg]

    def test_blank_credential_is_none(self) -> None:
        settings = Settings(_env_file=None, credentials={"core_api_key": "   "})  # type: ignore[call-arg]
        assert settings.credentials.core_api_key is None

    def test_endpoint_trailing_slash_stripped(self) -> None:
        settings = Settings(_env_file=None, endpoints={"sci_hub_base_url": "https://mirror.example/"})  # type: ignore[call-arg]
        assert settings.endpoints.sci_hub_base_url == "https://mirror.example"


class TestLoadSettings:
    def test_from_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "paperscout.yaml"
        config.write_text(
            "log_level: warning\n"
            "download_dir: /data/papers\n"
            "http:\n"
            "  retry_count: 2\n"
            "  min_interval_ms: 0\n"
            "plugins:\n"
            "  libgen: true\n"
        )
        settings = load_settings(config)
        assert settings.log_level == "warning"
        assert settings.download_dir == Path("/data/papers")
        assert settings.http.retry_count == 2
        assert settings.http.min_interval_ms == 0
        assert settings.plugins.libgen is True

    def test_empty_yaml_gives_defaults(self, tmp_path: Path) -> None:
        config = tmp_path / "empty.yaml"
        config.write_text("")
        assert load_settings(config).http.max_concurrent == 2

    def test_overrides_win(self, tmp_path: Path) -> None:
        config = tmp_path / "paperscout.yaml"
        config.write_text("log_level: warning\n")
        assert load_settings(config, log_level="debug").log_level == "debug"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(tmp_path / "missing.yaml")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"http": {"max_concurrent": 0}},
            {"http": {"timeout_ms": -5}},
            {"http": {"user_agent": ""}},
            {"log_level": "verbose"},
        ],
    )
    def test_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_settings(**overrides)

    def test_invalid_override_with_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "paperscout.yaml"
        config.write_text("log_level: warning\n")
        with pytest.raises(ConfigurationError, match="log_level"):
            load_settings(config, log_level="loud")

    def test_override_is_validated_with_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "paperscout.yaml"
        config.write_text("http:\n  retry_count: 2\n")
        settings = load_settings(config, log_level="ERROR")
        assert settings.log_level == "error"
        assert settings.http.retry_count == 2
