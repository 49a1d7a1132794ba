"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from action_dispatch.apps.api.middleware import CorrelationIdMiddleware
from action_dispatch.core.logging import get_logger
from action_dispatch.services import ServiceContainer, runtime

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Register the service container at startup."""
    logger.info("Initializing action dispatch...")
    services = getattr(app.state, "services", None)
    if isinstance(services, ServiceContainer):
        runtime.set_services(services)
        logger.info("Controllers registered: %s", ", ".join(services.controllers.names()))
    yield


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Build the FastAPI application with configured routers."""
    if services is None:
        raise RuntimeError("Service container must be provided when creating the app.")
    app = FastAPI(lifespan=lifespan)
    app.state.services = services
    runtime.set_services(services)
    app.add_middleware(CorrelationIdMiddleware)

    from .routes import dispatch, health  # pylint: disable=import-outside-toplevel

    app.include_router(health.router)
    app.include_router(dispatch.router)
    return app


__all__ = ["create_app", "lifespan"]
