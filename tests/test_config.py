"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from formfill.utils.config import (
    AppConfig,
    ConfigurationError,
    GatewayConfig,
    UploadConfig,
    load_config,
    resolve_api_key,
)


class TestGatewayConfig:
    """Tests for GatewayConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = GatewayConfig()
        assert cfg.url == "https://ai.gateway.lovable.dev/v1/chat/completions"
        assert cfg.model == "google/gemini-2.5-flash"
        assert cfg.api_key_env == "LOVABLE_API_KEY"
        assert cfg.timeout_seconds == 60.0

    def test_override(self) -> None:
        cfg = GatewayConfig(model="other/model", timeout_seconds=5)
        assert cfg.model == "other/model"
        assert cfg.timeout_seconds == 5.0

    def test_frozen(self) -> None:
        cfg = GatewayConfig()
        with pytest.raises(ValidationError):
            cfg.model = "changed"


class TestUploadConfig:
    """Tests for UploadConfig defaults."""

    def test_defaults(self) -> None:
        assert UploadConfig().allowed_content_types == (
            "application/pdf",
            "image/jpeg",
            "image/png",
        )


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.gateway, GatewayConfig)
        assert isinstance(cfg.upload, UploadConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(gateway=GatewayConfig(timeout_seconds=10), log_level="DEBUG")
        assert cfg.gateway.timeout_seconds == 10.0
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_project_config(self, project_root: Path) -> None:
        cfg = load_config(project_root / "configs" / "config.yaml")
        assert cfg.gateway.model == "google/gemini-2.5-flash"
        assert "application/pdf" in cfg.upload.allowed_content_types

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "gateway": {"model": "custom/model", "timeout_seconds": 15},
            "upload": {"allowed_content_types": ["application/pdf"]},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.gateway.model == "custom/model"
        assert cfg.gateway.timeout_seconds == 15.0
        assert cfg.gateway.url == GatewayConfig().url
        assert cfg.upload.allowed_content_types == ("application/pdf",)
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_config(config_file) == AppConfig()

    def test_load_none_defaults_to_standard_path(self) -> None:
        assert isinstance(load_config(), AppConfig)


class TestResolveApiKey:
    """Tests for reading the gateway key from the environment."""

    def test_reads_configured_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FORMFILL_TEST_KEY", " secret ")
        cfg = GatewayConfig(api_key_env="FORMFILL_TEST_KEY")
        assert resolve_api_key(cfg) == "secret"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_key(self, monkeypatch: pytest.MonkeyPatch, value) -> None:
        if value is None:
            monkeypatch.delenv("FORMFILL_TEST_KEY", raising=False)
        else:
            monkeypatch.setenv("FORMFILL_TEST_KEY", value)
        cfg = GatewayConfig(api_key_env="FORMFILL_TEST_KEY")
        with pytest.raises(ConfigurationError, match="FORMFILL_TEST_KEY is not configured"):
            resolve_api_key(cfg)
