"""Unit tests for configuration templating and models."""

import pydantic
import pytest

from ewallet_ums.core.errors import ConfigurationError
from ewallet_ums.runtime.config import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    ConfigData,
    DatabaseConfig,
    load_templated_yaml,
)
from ewallet_ums.runtime.config.config_template import substitute_env_vars
from ewallet_ums.runtime.context import get_config, with_context


@pytest.mark.usefixtures("fresh_environment")
class TestTemplateSubstitution:
    def test_default_used_when_variable_unset(self, monkeypatch):
        monkeypatch.delenv("UMS_TEST_UNSET", raising=False)
        assert substitute_env_vars("port: ${UMS_TEST_UNSET:-8080}") == "port: 8080"

    def test_environment_value_replaces_placeholder(self, monkeypatch):
        monkeypatch.setenv("UMS_TEST_HOST", "db.internal")
        assert substitute_env_vars("host: ${UMS_TEST_HOST:-localhost}") == "host: db.internal"

    def test_required_placeholder_raises_when_missing(self, monkeypatch):
        monkeypatch.delenv("UMS_TEST_SECRET", raising=False)
        with pytest.raises(ConfigurationError, match="UMS_TEST_SECRET"):
            substitute_env_vars("secret: ${UMS_TEST_SECRET}")

    def test_custom_error_message(self, monkeypatch):
        monkeypatch.delenv("UMS_TEST_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="must be provided"):
            substitute_env_vars("key: ${UMS_TEST_KEY:?must be provided}")


@pytest.mark.usefixtures("fresh_environment")
class TestLoadTemplatedYaml:
    def test_bundled_template_defaults(self, monkeypatch):
        for name in (
            "ENVIRONMENT",
            "PORT",
            "HOST",
            "DATABASE_URL",
            "DB_HOST",
            "DB_PORT",
            "DB_NAME",
            "DB_QUERY_TIMEOUT",
            "LOG_LEVEL",
            "REQUEST_TIMEOUT",
            "SHUTDOWN_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)

        config = load_templated_yaml(DEFAULT_CONFIG_PATH)

        assert config.app.environment == "development"
        assert config.app.port == 8080
        assert config.app.host == "0.0.0.0"
        assert config.app.request_timeout == 60
        assert config.app.shutdown_timeout == 30
        assert config.database.host == "localhost"
        assert config.database.port == 5432
        assert config.database.name == "ewallet_ums"
        assert config.database.url is None
        assert config.database.query_timeout is None
        assert config.logging.level is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DB_MAX_OPEN_CONNS", "50")

        config = load_templated_yaml(DEFAULT_CONFIG_PATH)

        assert config.app.port == 9090
        assert config.app.environment == "production"
        assert config.database.max_open_conns == 50

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_templated_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("config: [unterminated\n")
        with pytest.raises(ConfigurationError, match="error parsing YAML"):
            load_templated_yaml(path)

    def test_validation_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("config:\n  app:\n    port: not-a-number\n")
        with pytest.raises(ConfigurationError, match="invalid configuration"):
            load_templated_yaml(path)


class TestDatabaseConfig:
    def test_connection_string_from_fields(self):
        config = DatabaseConfig(
            host="db", port=6543, user="ums", password="s3cret", name="wallet"
        )
        assert config.connection_string == (
            "postgresql+asyncpg://ums:s3cret@db:6543/wallet?ssl=disable"
        )
        assert config.is_postgres

    def test_url_override_switches_to_async_driver(self):
        config = DatabaseConfig(url="postgres://ums:pw@db:5432/wallet")
        assert config.connection_string == "postgresql+asyncpg://ums:pw@db:5432/wallet"

    def test_sqlite_url_is_kept(self):
        config = DatabaseConfig(url="sqlite+aiosqlite:///ums.db")
        assert config.connection_string == "sqlite+aiosqlite:///ums.db"
        assert not config.is_postgres

    def test_idle_connections_cannot_exceed_open(self):
        with pytest.raises(pydantic.ValidationError):
            DatabaseConfig(max_open_conns=5, max_idle_conns=10)


class TestContext:
    def test_with_context_overrides_and_restores(self):
        override = ConfigData(app=AppConfig(port=9000, environment="test"))
        with with_context(override):
            assert get_config().app.port == 9000
        assert get_config() is not override

    def test_with_context_rejects_other_types(self):
        with pytest.raises(ValueError):
            with with_context({"app": {}}):
                pass
