from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from . import __version__
from .api.containers import router as containers_router
from .config import Settings, load_settings, validate_settings
from .orchestrator import CommandBuilder, CommandExecutor, default_registry
from .schemas import ApiResult
from .services import ContainerService

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> ContainerService:
    """Build the registry exactly once and wire it into a service."""
    return ContainerService(
        registry=default_registry(),
        builder=CommandBuilder(settings.docker_binary),
        executor=CommandExecutor(default_timeout=settings.command_timeout),
        timeout=settings.command_timeout,
    )


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request."


def create_app(
    settings: Optional[Settings] = None, service: Optional[ContainerService] = None
) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="Craft Gate API", version=__version__)
    app.state.settings = settings
    app.state.service = service or build_service(settings)

    # CORS – keep wide open for now; you can tighten later
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        result = ApiResult(success=False, message=_validation_message(exc))
        return JSONResponse(status_code=400, content=result.model_dump())

    @app.on_event("startup")
    def on_startup() -> None:
        """
        Validate config on process start.
        """
        validate_settings(settings)
        logger.info(
            "Craft Gate managing server types: %s",
            ", ".join(app.state.service.registry.types()),
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await app.state.service.drain()

    # The router defines bare paths; everything lives under /api:
    #   /api/containers, /api/create, /api/stop, ...
    app.include_router(containers_router, prefix="/api")

    # Mounted last so /api routes win over the catch-all static mount.
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning("Static directory %s not found; UI disabled", settings.static_dir)

    return app


def run(
    settings: Optional[Settings] = None,
    reload: Optional[bool] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    settings = settings or load_settings()
    settings = replace(settings, host=host or settings.host, port=port or settings.port)
    validate_settings(settings)
    reload_enabled = settings.reload if reload is None else reload

    logger.info("Docker Manager Web Server running at http://localhost:%s", settings.port)
    if reload_enabled:
        uvicorn.run(
            "craftgate.main:create_app",
            factory=True,
            host=settings.host,
            port=settings.port,
            reload=True,
        )
    else:
        uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    # Local/dev entrypoint: python -m craftgate.main
    logging.basicConfig(level=load_settings().log_level)
    run()
