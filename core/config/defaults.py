# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for stores, server, seeding and health
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for the service core. Every value can be overridden
via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from core.contracts import SeedGate


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class RelationalStoreConfig:
    """
    PostgreSQL connection settings.

    DATABASE_URL wins over the individual POSTGRES_* components.
    """
    host: str = "localhost"
    port: int = 5432
    database: str = "indiec"
    user: str = "postgres"
    password: str = ""
    sslmode: str = "prefer"
    schema: str = "indiec"
    url: Optional[str] = None

    # Pool
    pool_min_size: int = 1
    pool_max_size: int = 10
    connect_timeout_seconds: float = 10.0

    # Schema sync on connect
    sync_schema: bool = True

    @property
    def conninfo(self) -> str:
        """Connection string for psycopg."""
        if self.url:
            return self.url
        return (
            f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}"
            f"/{self.database}?sslmode={self.sslmode}"
        )

    @property
    def safe_conninfo(self) -> str:
        """Connection target with credentials masked, for logs."""
        conninfo = self.conninfo
        if "@" in conninfo:
            return conninfo.split("@")[-1]
        if "password=" in conninfo:
            return conninfo.split("password=")[0] + "password=***"
        return conninfo

    @classmethod
    def from_env(cls) -> "RelationalStoreConfig":
        """Create from environment variables."""
        return cls(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", 5432)),
            database=os.getenv("POSTGRES_DB", "indiec"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            sslmode=os.getenv("POSTGRES_SSLMODE", "prefer"),
            schema=os.getenv("POSTGRES_SCHEMA", "indiec"),
            url=os.getenv("DATABASE_URL") or None,
            pool_min_size=int(os.getenv("POSTGRES_POOL_MIN", 1)),
            pool_max_size=int(os.getenv("POSTGRES_POOL_MAX", 10)),
            connect_timeout_seconds=float(os.getenv("POSTGRES_CONNECT_TIMEOUT", 10)),
            sync_schema=_env_bool("POSTGRES_SYNC_SCHEMA", True),
        )


@dataclass(frozen=True)
class DocumentStoreConfig:
    """MongoDB connection settings."""
    uri: str = "mongodb://localhost:27017"
    database: str = "indiec"
    server_selection_timeout_ms: int = 10000

    @property
    def safe_uri(self) -> str:
        """URI with credentials masked, for logs."""
        if "@" in self.uri:
            scheme, _, rest = self.uri.partition("://")
            return f"{scheme}://***@{rest.split('@')[-1]}"
        return self.uri

    @classmethod
    def from_env(cls) -> "DocumentStoreConfig":
        """Create from environment variables."""
        return cls(
            uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
            database=os.getenv("MONGODB_DB", "indiec"),
            server_selection_timeout_ms=int(os.getenv("MONGODB_TIMEOUT_MS", 10000)),
        )


@dataclass(frozen=True)
class ServerConfig:
    """
    HTTP server settings.

    The port and environment name are opaque to the lifecycle core;
    they only show up in banners.
    """
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    upload_dir: str = "./uploads"
    cors_origins: Tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")

    @property
    def public_url(self) -> str:
        return f"http://localhost:{self.port}"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create from environment variables."""
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", 3000)),
            environment=os.getenv("APP_ENV", "development"),
            upload_dir=os.getenv("UPLOAD_DIR", "./uploads"),
            cors_origins=(
                tuple(o.strip() for o in origins.split(",") if o.strip())
                if origins else cls.cors_origins
            ),
        )


@dataclass(frozen=True)
class SeedingDefaults:
    """Reference data seeding behaviour."""
    gate: SeedGate = SeedGate.ANCHOR

    @classmethod
    def from_env(cls) -> "SeedingDefaults":
        return cls(gate=SeedGate(os.getenv("SEED_GATE", SeedGate.ANCHOR.value).lower()))


@dataclass(frozen=True)
class HealthDefaults:
    """Health aggregation timeouts."""
    probe_timeout_seconds: float = 5.0

    @classmethod
    def from_env(cls) -> "HealthDefaults":
        return cls(probe_timeout_seconds=float(os.getenv("HEALTH_TIMEOUT_SEC", 5)))


# ============================================================================
# GLOBAL CONFIG INSTANCE
# ============================================================================

@dataclass
class AppConfig:
    """Container for all configuration sections."""
    server: ServerConfig = field(default_factory=ServerConfig)
    relational: RelationalStoreConfig = field(default_factory=RelationalStoreConfig)
    document: DocumentStoreConfig = field(default_factory=DocumentStoreConfig)
    seeding: SeedingDefaults = field(default_factory=SeedingDefaults)
    health: HealthDefaults = field(default_factory=HealthDefaults)
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create all sections from environment variables."""
        return cls(
            server=ServerConfig.from_env(),
            relational=RelationalStoreConfig.from_env(),
            document=DocumentStoreConfig.from_env(),
            seeding=SeedingDefaults.from_env(),
            health=HealthDefaults.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_FORMAT", "").lower() == "json",
        )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get global config instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (for testing)."""
    global _config
    _config = None


__all__ = [
    "RelationalStoreConfig",
    "DocumentStoreConfig",
    "ServerConfig",
    "SeedingDefaults",
    "HealthDefaults",
    "AppConfig",
    "get_config",
    "reset_config",
]
