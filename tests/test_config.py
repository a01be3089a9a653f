# ============================================================================
# CONFIGURATION TESTS
# ============================================================================
# STATUS: Tests - Environment-driven configuration
# PURPOSE: Verify defaults, env overrides and credential masking
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Tests

Run with:
    pytest tests/test_config.py -v
"""

import pytest

from core.config import (
    AppConfig,
    DocumentStoreConfig,
    RelationalStoreConfig,
    ServerConfig,
    get_config,
    reset_config,
)
from core.contracts import SeedGate


@pytest.fixture(autouse=True)
def _clean_config():
    reset_config()
    yield
    reset_config()


class TestDefaults:

    def test_server_defaults(self):
        server = ServerConfig()

        assert server.port == 3000
        assert server.upload_dir == "./uploads"
        assert server.public_url == "http://localhost:3000"

    def test_app_defaults(self):
        config = AppConfig()

        assert config.seeding.gate == SeedGate.ANCHOR
        assert config.health.probe_timeout_seconds == 5.0
        assert config.relational.schema == "indiec"


class TestFromEnv:

    def test_server_env(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("UPLOAD_DIR", "/var/indiec/uploads")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

        server = ServerConfig.from_env()

        assert server.port == 8080
        assert server.upload_dir == "/var/indiec/uploads"
        assert server.cors_origins == ("https://a.example", "https://b.example")

    def test_cors_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("CORS_ORIGINS", raising=False)

        assert ServerConfig.from_env().cors_origins == ServerConfig().cors_origins

    def test_database_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db.internal:5433/indiec")
        monkeypatch.setenv("POSTGRES_HOST", "ignored")

        config = RelationalStoreConfig.from_env()

        assert config.conninfo == "postgresql://u:p@db.internal:5433/indiec"
        assert config.safe_conninfo == "db.internal:5433/indiec"

    def test_seed_gate(self, monkeypatch):
        monkeypatch.setenv("SEED_GATE", "PER_SET")

        assert AppConfig.from_env().seeding.gate == SeedGate.PER_SET

    def test_invalid_seed_gate(self, monkeypatch):
        monkeypatch.setenv("SEED_GATE", "sometimes")

        with pytest.raises(ValueError):
            AppConfig.from_env()

    def test_log_format(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        config = AppConfig.from_env()

        assert config.log_json is True
        assert config.log_level == "DEBUG"

    def test_get_config_cached(self):
        assert get_config() is get_config()


class TestMasking:

    def test_document_uri_without_credentials(self):
        config = DocumentStoreConfig(uri="mongodb://localhost:27017")

        assert config.safe_uri == "mongodb://localhost:27017"

    def test_keyword_conninfo_password_masked(self):
        config = RelationalStoreConfig(url="host=db dbname=indiec password=secret")

        assert "secret" not in config.safe_conninfo
