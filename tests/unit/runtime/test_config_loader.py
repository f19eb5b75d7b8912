"""Unit tests for the config.yaml loader."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.users_api.runtime.config.config_data import ConfigData
from src.users_api.runtime.config.loader import (
    expand_placeholders,
    load_config,
    promote_environment_overrides,
    read_config,
)

REPO_CONFIG = Path(__file__).resolve().parents[3] / "config.yaml"


class TestExpandPlaceholders:
    """Test ${...} placeholder resolution."""

    def test_plain_placeholder(self):
        with patch.dict(os.environ, {"HOST": "api.local"}, clear=True):
            assert expand_placeholders("host: ${HOST}") == "host: api.local"

    def test_several_placeholders_on_one_line(self):
        with patch.dict(os.environ, {"HOST": "localhost", "PORT": "8080"}, clear=True):
            assert (
                expand_placeholders("url: http://${HOST}:${PORT}/users")
                == "url: http://localhost:8080/users"
            )

    def test_fallback_used_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            assert expand_placeholders("${LEVEL:-INFO}") == "INFO"

    def test_fallback_ignored_when_set(self):
        with patch.dict(os.environ, {"LEVEL": "DEBUG"}, clear=True):
            assert expand_placeholders("${LEVEL:-INFO}") == "DEBUG"

    def test_empty_fallback(self):
        with patch.dict(os.environ, {}, clear=True):
            assert expand_placeholders("file: ${LOG_FILE:-}") == "file: "

    def test_missing_required_variable(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Environment variable TOKEN is not set"):
                expand_placeholders("${TOKEN}")

    def test_missing_required_variable_with_hint(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="TOKEN is required: ask ops"):
                expand_placeholders("${TOKEN:?ask ops}")

    def test_comment_lines_are_left_alone(self):
        text = "# use ${ANYTHING} or ${OTHER:?x} here\n  # ${INDENTED}\nport: ${PORT:-8000}\n"
        with patch.dict(os.environ, {}, clear=True):
            assert expand_placeholders(text) == (
                "# use ${ANYTHING} or ${OTHER:?x} here\n  # ${INDENTED}\nport: 8000\n"
            )

    def test_text_without_complete_placeholders_is_unchanged(self):
        text = "This has $MALFORMED and ${UNCLOSED variables"
        assert expand_placeholders(text) == text


class TestPromoteEnvironmentOverrides:
    """Test copying of <ENV>_NAME variables onto NAME."""

    def test_matching_prefix_is_promoted(self):
        environ = {"PRODUCTION_LOG_LEVEL": "WARNING", "TEST_LOG_LEVEL": "DEBUG"}

        promoted = promote_environment_overrides("production", environ)

        assert promoted == ["LOG_LEVEL"]
        assert environ["LOG_LEVEL"] == "WARNING"

    def test_nothing_to_promote(self):
        environ = {"TEST_LOG_LEVEL": "DEBUG"}

        assert promote_environment_overrides("production", environ) == []
        assert "LOG_LEVEL" not in environ


class TestReadConfig:
    """Test loading YAML files into ConfigData."""

    def write(self, tmp_path: Path, content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content)
        return path

    def test_values_are_substituted_and_validated(self, tmp_path):
        path = self.write(
            tmp_path,
            """
config:
  app:
    environment: ${APP_ENVIRONMENT:-development}
    port: ${APP_PORT:-8000}
    https_redirect: ${APP_HTTPS_REDIRECT:-false}
  logging:
    level: ${LOG_LEVEL:-info}
    file: ${LOG_FILE:-}
""",
        )

        with patch.dict(
            os.environ, {"APP_ENVIRONMENT": "production", "APP_PORT": "9000"}, clear=True
        ):
            config = read_config(path)

        assert config.app.environment == "production"
        assert config.app.port == 9000
        assert config.app.https_redirect is False
        assert config.logging.level == "INFO"
        assert config.logging.file is None

    def test_environment_prefixed_variable_wins(self, tmp_path):
        path = self.write(tmp_path, "config:\n  logging:\n    level: ${LOG_LEVEL:-INFO}\n")

        with patch.dict(
            os.environ, {"APP_ENVIRONMENT": "test", "TEST_LOG_LEVEL": "DEBUG"}, clear=True
        ):
            config = read_config(path)

        assert config.logging.level == "DEBUG"

    def test_empty_file_is_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="must contain a mapping"):
            read_config(self.write(tmp_path, ""))

    def test_malformed_yaml_is_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="is not valid YAML"):
            read_config(self.write(tmp_path, "config: [unclosed"))

    def test_invalid_values_are_rejected(self, tmp_path):
        path = self.write(tmp_path, "config:\n  app:\n    environment: staging\n")
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="invalid configuration"):
                read_config(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_config(tmp_path / "absent.yaml")

    def test_load_config_falls_back_to_defaults(self, tmp_path):
        assert load_config(tmp_path / "absent.yaml") == ConfigData()


class TestShippedConfig:
    """The config.yaml at the repository root must load as shipped."""

    def test_loads_with_a_clean_environment(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(REPO_CONFIG)

        assert config.app.environment == "development"
        assert config.app.port == 8000
        assert config.app.https_redirect is False
        assert config.logging.format == "plain"
        assert config.logging.file is None

