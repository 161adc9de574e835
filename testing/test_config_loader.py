"""
Tests for system configuration loading.
"""

import pytest

from chara_inspector.config import (
    ConfigLoader,
    ConfigLoadError,
    ConfigValidationError,
    ProxyConfig,
    SystemConfig,
)


def write_config(tmp_path, text):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    path = config_dir / "system.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestConfigLoader:
    """Test suite for ConfigLoader."""

    def test_defaults_when_file_missing(self, tmp_path):
        config = ConfigLoader(tmp_path).load_system_config()

        assert config == SystemConfig()
        assert config.proxy.max_image_bytes == 10 * 1024 * 1024
        assert config.proxy.timeout_seconds == 30
        assert config.proxy.cache_ttl_seconds == 3600
        assert config.proxy.allowed_schemes == ["http", "https"]

    def test_yaml_overrides(self, tmp_path):
        write_config(tmp_path, """
debug: true
api_port: 9000
proxy:
  max_image_bytes: 2048
  cache_ttl_seconds: 0
upload:
  max_bytes: 4096
unknown_key: ignored
""")

        config = ConfigLoader(tmp_path).load_system_config()

        assert config.debug is True
        assert config.api_port == 9000
        assert config.proxy.max_image_bytes == 2048
        assert config.proxy.cache_ttl_seconds == 0
        assert config.upload.max_bytes == 4096

    def test_empty_file_means_defaults(self, tmp_path):
        write_config(tmp_path, "")

        assert ConfigLoader(tmp_path).load_system_config() == SystemConfig()

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("api_host: 0.0.0.0\n", encoding="utf-8")

        assert ConfigLoader().load_system_config(path).api_host == "0.0.0.0"

    def test_validation_error_names_field(self, tmp_path):
        path = write_config(tmp_path, "api_port: 70000\nproxy:\n  max_image_bytes: -1\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader(tmp_path).load_system_config()

        message = str(exc_info.value)
        assert str(path) in message
        assert "api_port" in message
        assert "proxy → max_image_bytes" in message

    def test_invalid_yaml(self, tmp_path):
        write_config(tmp_path, "proxy: [unclosed\n")

        with pytest.raises(ConfigLoadError, match="Invalid YAML"):
            ConfigLoader(tmp_path).load_system_config()

    def test_top_level_must_be_mapping(self, tmp_path):
        write_config(tmp_path, "- just\n- a list\n")

        with pytest.raises(ConfigLoadError):
            ConfigLoader(tmp_path).load_system_config()


class TestProxyConfig:
    """Test suite for ProxyConfig validation."""

    def test_schemes_are_normalized(self):
        assert ProxyConfig(allowed_schemes=["HTTPS:"]).allowed_schemes == ["https"]

    @pytest.mark.parametrize("schemes", [["ftp"], ["http", "file"], []])
    def test_only_web_schemes_allowed(self, schemes):
        with pytest.raises(ValueError):
            ProxyConfig(allowed_schemes=schemes)
