"""Unit tests for the environment snapshot."""

import pytest

from ewallet_ums.core.errors import ConfigurationError
from ewallet_ums.runtime.environment import EnvironmentStore


class TestEnvironmentStore:
    def test_reads_dotenv_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("UMS_TEST_FROM_FILE=file-value\n")
        monkeypatch.delenv("UMS_TEST_FROM_FILE", raising=False)

        store = EnvironmentStore()
        store.load(env_file)

        assert store.get("UMS_TEST_FROM_FILE") == "file-value"

    def test_real_environment_wins_over_dotenv(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("UMS_TEST_PORT=9000\n")
        monkeypatch.setenv("UMS_TEST_PORT", "7000")

        store = EnvironmentStore()
        store.load(env_file)

        assert store.get("UMS_TEST_PORT") == "7000"

    def test_missing_dotenv_is_not_an_error(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UMS_TEST_ONLY_ENV", "present")

        store = EnvironmentStore()
        store.load(tmp_path / "absent.env")

        assert store.loaded
        assert store.get("UMS_TEST_ONLY_ENV") == "present"

    def test_snapshot_is_taken_once(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UMS_TEST_LATE", "before")
        store = EnvironmentStore()
        first = store.load(tmp_path / "absent.env")

        monkeypatch.setenv("UMS_TEST_LATE", "after")
        second = store.load(tmp_path / "absent.env")

        assert first is second
        assert store.get("UMS_TEST_LATE") == "before"

    def test_empty_value_falls_back_to_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UMS_TEST_EMPTY", "")
        store = EnvironmentStore()
        store.load(tmp_path / "absent.env")

        assert store.get("UMS_TEST_EMPTY", "fallback") == "fallback"
        assert store.get("UMS_TEST_NEVER_SET") == ""

    def test_require_raises_for_missing_variable(self, tmp_path, monkeypatch):
        monkeypatch.delenv("UMS_TEST_REQUIRED", raising=False)
        store = EnvironmentStore()
        store.load(tmp_path / "absent.env")

        with pytest.raises(ConfigurationError, match="UMS_TEST_REQUIRED"):
            store.require("UMS_TEST_REQUIRED")

    def test_reset_forces_reload(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UMS_TEST_RELOAD", "one")
        store = EnvironmentStore()
        store.load(tmp_path / "absent.env")

        monkeypatch.setenv("UMS_TEST_RELOAD", "two")
        store.reset()
        store.load(tmp_path / "absent.env")

        assert store.get("UMS_TEST_RELOAD") == "two"
