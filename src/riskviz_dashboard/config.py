"""
Server configuration loaded from environment variables.

- PORT: listen port (default 4000)
- HOST: bind address (default 0.0.0.0)
- ROUTE_PREFIX: prefix for the API routers (default /api)
- MIDDLEWARE: comma-separated middleware set: cors, gzip, request_log
- ROUTE_MODULES: comma-separated route modules loaded at startup
- STORAGE_BACKEND: memory | csv (default csv)
- DATA_DIR: directory for CSV tables (default data)
- CORS_ORIGINS: comma-separated allowed origins (default *)

Loads .env from the working directory when present.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_PORT = 4000
DEFAULT_ROUTE_PREFIX = "/api"
DEFAULT_MIDDLEWARE = ("cors", "request_log")
DEFAULT_ROUTE_MODULES = (
    "riskviz_dashboard.api.routes",
    "riskviz_dashboard.api.data_routes",
)
KNOWN_MIDDLEWARE = frozenset({"cors", "gzip", "request_log"})
STORAGE_BACKENDS = ("memory", "csv")


def _split(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if raw is None or not raw.strip():
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def normalize_prefix(prefix: str) -> str:
    """'/api/' -> '/api', 'api' -> '/api', '/' or '' -> ''."""
    prefix = (prefix or "").strip().strip("/")
    return f"/{prefix}" if prefix else ""


@dataclass(frozen=True)
class ServerConfig:
    """Options for the single API bootstrap."""

    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    route_prefix: str = DEFAULT_ROUTE_PREFIX
    middleware_set: tuple[str, ...] = DEFAULT_MIDDLEWARE
    route_modules: tuple[str, ...] = DEFAULT_ROUTE_MODULES
    storage_backend: str = "csv"
    data_dir: Path = Path("data")
    cors_origins: tuple[str, ...] = ("*",)
    max_upload_bytes: int = 10 * 1024 * 1024
    log_level: str = "info"

    def __post_init__(self) -> None:
        object.__setattr__(self, "route_prefix", normalize_prefix(self.route_prefix))
        unknown = set(self.middleware_set) - KNOWN_MIDDLEWARE
        if unknown:
            raise ValueError(f"Unknown middleware: {', '.join(sorted(unknown))}")
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got {self.storage_backend!r}"
            )
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")

    def with_overrides(self, **overrides) -> "ServerConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(**overrides) -> ServerConfig:
    """Build a ServerConfig from the environment, then apply keyword overrides."""
    load_dotenv(find_dotenv(usecwd=True))
    config = ServerConfig(
        port=int((os.getenv("PORT") or str(DEFAULT_PORT)).strip()),
        host=(os.getenv("HOST") or "0.0.0.0").strip(),
        route_prefix=os.getenv("ROUTE_PREFIX", DEFAULT_ROUTE_PREFIX),
        middleware_set=_split(os.getenv("MIDDLEWARE"), DEFAULT_MIDDLEWARE),
        route_modules=_split(os.getenv("ROUTE_MODULES"), DEFAULT_ROUTE_MODULES),
        storage_backend=(os.getenv("STORAGE_BACKEND") or "csv").strip().lower(),
        data_dir=Path((os.getenv("DATA_DIR") or "data").strip()),
        cors_origins=_split(os.getenv("CORS_ORIGINS"), ("*",)),
        log_level=(os.getenv("LOG_LEVEL") or "info").strip().lower(),
    )
    return config.with_overrides(**overrides)
