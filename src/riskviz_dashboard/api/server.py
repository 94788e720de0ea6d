"""
API server bootstrap.

One configuration-driven startup path: load config, open the store, import
every route module and assemble the routers, then hand the finished app to
uvicorn. A route module that fails to load stops startup; the server never
runs with routes missing.

Run with: riskviz-api --port 4000   (or PORT=4000 riskviz-api)
"""

from __future__ import annotations

import argparse
import importlib
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from types import ModuleType
from typing import Optional, Sequence

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from riskviz_dashboard.config import ServerConfig, load_config
from riskviz_dashboard.db import Store, close_database_connection, connect_to_database
from riskviz_dashboard.errors import RouteLoadError, StorageError, UploadError
from riskviz_dashboard.logger import get_logger

logger = get_logger(__name__)

# Routes advertised by GET /. Kept as documented for dashboard clients even
# though /risk-data and /points are served under the route prefix.
DOCUMENTED_ROUTES = ["/health", "/upload", "/risk-data", "/points"]


@dataclass
class LoadedRoutes:
    """Routers exported by one route module."""

    module: str
    router: Optional[APIRouter]
    root_router: Optional[APIRouter]


@dataclass
class ServerContext:
    """Everything one running server owns. Built once at startup."""

    config: ServerConfig
    store: Store
    app: FastAPI


# -----------------------------------------------------------------------------
# Route loading
# -----------------------------------------------------------------------------

def _load_module(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except Exception as e:
        logger.error("route_module_load_failed", module=name, error=str(e))
        raise RouteLoadError(f"Failed to load routes from {name}: {e}") from e


def load_routers(module_names: Sequence[str]) -> list[LoadedRoutes]:
    """
    Import each route module and collect its ``router`` (mounted under the
    route prefix) and ``root_router`` (mounted at /).

    Raises:
        RouteLoadError: a module cannot be imported or exports neither router.
    """
    loaded = []
    for name in module_names:
        module = _load_module(name)
        router = getattr(module, "router", None)
        root_router = getattr(module, "root_router", None)
        if not isinstance(router, APIRouter) and not isinstance(root_router, APIRouter):
            logger.error("route_module_without_router", module=name)
            raise RouteLoadError(f"Module {name} exports no APIRouter")
        loaded.append(LoadedRoutes(
            module=name,
            router=router if isinstance(router, APIRouter) else None,
            root_router=root_router if isinstance(root_router, APIRouter) else None,
        ))
        logger.info("route_module_loaded", module=name)
    return loaded


# -----------------------------------------------------------------------------
# Middleware and error handling
# -----------------------------------------------------------------------------

def install_middleware(app: FastAPI, config: ServerConfig) -> None:
    if "gzip" in config.middleware_set:
        app.add_middleware(GZipMiddleware, minimum_size=1000)
    if "cors" in config.middleware_set:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(config.cors_origins),
            allow_methods=["*"],
            allow_headers=["*"],
        )
    if "request_log" in config.middleware_set:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response


def register_exception_handlers(app: FastAPI) -> None:
    """Translate errors into ``{"error": "..."}`` bodies."""

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        logger.info("invalid_request_body", path=request.url.path, errors=len(exc.errors()))
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(ValidationError)
    async def model_validation_error(request: Request, exc: ValidationError):
        logger.info("invalid_request_body", path=request.url.path, errors=exc.error_count())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(UploadError)
    async def upload_error(request: Request, exc: UploadError):
        logger.warning("upload_rejected", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=400, content={"error": f"File upload error: {exc}"})

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error("storage_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Storage error"})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content={"error": "An unexpected error occurred"})


# -----------------------------------------------------------------------------
# App assembly
# -----------------------------------------------------------------------------

def create_app(config: ServerConfig, store: Store, routes: Sequence[LoadedRoutes]) -> FastAPI:
    """Assemble the FastAPI app from already-loaded routers."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("server_started", port=config.port, route_prefix=config.route_prefix or "/")
        yield
        close_database_connection(store)
        logger.info("server_stopped")

    app = FastAPI(
        title="RiskViz Automator API",
        description="Survey response ingestion and risk data for the RiskViz dashboard.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = store

    install_middleware(app, config)
    register_exception_handlers(app)

    for loaded in routes:
        if loaded.root_router is not None:
            app.include_router(loaded.root_router)
        if loaded.router is not None:
            app.include_router(loaded.router, prefix=config.route_prefix)

    @app.get("/")
    def root():
        """API status and the routes dashboard clients use."""
        return {
            "status": "ok",
            "message": "RiskViz Automator API is running",
            "availableRoutes": DOCUMENTED_ROUTES,
            "endpoints": sorted({r.path for r in app.routes if isinstance(r, APIRoute) and r.path != "/"}),
        }

    return app


def build_context(config: Optional[ServerConfig] = None) -> ServerContext:
    """Initialization phase: config, store, routers and app, in that order."""
    config = config or load_config()
    routes = load_routers(config.route_modules)
    store = connect_to_database(config)
    app = create_app(config, store, routes)
    logger.info(
        "server_context_built",
        route_modules=list(config.route_modules),
        middleware=list(config.middleware_set),
        storage=config.storage_backend,
    )
    return ServerContext(config=config, store=store, app=app)


def run(context: ServerContext) -> None:
    import uvicorn

    logger.info("server_starting", host=context.config.host, port=context.config.port)
    uvicorn.run(
        context.app,
        host=context.config.host,
        port=context.config.port,
        log_level=context.config.log_level,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="riskviz-api", description="Run the RiskViz API server.")
    parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: PORT or 4000)")
    parser.add_argument("--prefix", dest="route_prefix", default=None, help="Route prefix (default: /api)")
    parser.add_argument(
        "--storage",
        dest="storage_backend",
        choices=["memory", "csv"],
        default=None,
        help="Storage backend (default: STORAGE_BACKEND or csv)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    config = load_config(**vars(args))
    run(build_context(config))


if __name__ == "__main__":
    main()
