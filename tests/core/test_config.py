"""Tests for settings and logging configuration."""

from datetime import UTC
from pathlib import Path

import pytest
import structlog
from pydantic import ValidationError

from src.config import (
    configure_logging,
    get_logger,
    get_settings,
    operation_context,
    reset_settings,
)
from src.config.logging import add_app_context


class TestSettings:
    def test_singleton(self):
        assert get_settings() is get_settings()

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ENGINE_MAX_COMMIT_ATTEMPTS", "3")
        monkeypatch.setenv("ENGINE_DEFAULT_LOW_STOCK_THRESHOLD", "10")
        reset_settings()

        settings = get_settings()
        assert settings.engine.max_commit_attempts == 3
        assert settings.engine.default_low_stock_threshold == 10

    def test_defaults(self):
        engine = get_settings().engine
        assert engine.atomic_timeout_seconds == 10.0
        assert engine.recent_transactions_limit == 5
        assert engine.top_selling_limit == 5

    def test_db_path(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("STORAGE_DB_NAME", "shop.db")
        reset_settings()
        assert get_settings().storage.db_path == tmp_path / "shop.db"

    def test_timezone(self, monkeypatch: pytest.MonkeyPatch):
        assert get_settings().engine.zone is UTC

        monkeypatch.setenv("ENGINE_TIMEZONE", "")
        reset_settings()
        assert get_settings().engine.zone is None

    def test_unknown_timezone_rejected(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ENGINE_TIMEZONE", "Mars/Olympus_Mons")
        reset_settings()
        with pytest.raises(ValidationError):
            get_settings()

    def test_backend_from_env(self):
        # Set by the autouse test_settings fixture
        assert get_settings().storage.backend == "memory"


class TestLogging:
    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_console_renderer_in_development(self):
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        get_logger("tests").info("test_event", key="value")

    def test_json_renderer_outside_development(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        reset_settings()
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_app_context_names_store_backend(self):
        event = add_app_context(None, "info", {"event": "x"})
        assert event["app"] == get_settings().app_name
        assert event["store_backend"] == "memory"

    def test_operation_context_binds_and_clears(self):
        with operation_context("restock", actor="owner") as operation_id:
            bound = structlog.contextvars.get_contextvars()
            assert bound["operation"] == "restock"
            assert bound["operation_id"] == operation_id
            assert bound["actor"] == "owner"
        assert "operation" not in structlog.contextvars.get_contextvars()
