from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from devops_demo import __version__
from devops_demo.api.health import router as health_router
from devops_demo.api.info import router as info_router
from devops_demo.api.metrics import router as metrics_router
from devops_demo.config import Settings, get_settings
from devops_demo.models.schemas import ErrorResponse
from devops_demo.observability.body import JSONBodyMiddleware
from devops_demo.observability.logging import configure_logging
from devops_demo.observability.metrics import RuntimeSampler
from devops_demo.observability.middleware import RequestContextMiddleware
from devops_demo.observability.security import SecurityHeadersMiddleware


def create_app() -> FastAPI:
    app = FastAPI(title="DevOps Demo Application", version=__version__)
    sampler = RuntimeSampler()
    app.state.runtime_sampler = sampler

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(info_router)

    # Last added runs first: security headers -> request context -> JSON body.
    app.add_middleware(JSONBodyMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(),
            headers=exc.headers,
        )

    @app.on_event("startup")
    async def _startup() -> None:
        settings = get_settings()
        sampler.start()
        base_url = f"http://localhost:{settings.port}"
        structlog.get_logger("server").info(
            "server_started",
            port=settings.port,
            environment=settings.environment,
            metrics_url=f"{base_url}/metrics",
            health_url=f"{base_url}/health",
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await sampler.stop()

    return app


app = create_app()


def build_server(settings: Settings) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        access_log=False,
        server_header=False,
        log_config=None,
    )
    return uvicorn.Server(config)


def run() -> None:
    settings = get_settings()
    configure_logging(settings)
    build_server(settings).run()
