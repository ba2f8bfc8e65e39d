"""
FastAPI application factory with request tracing, gating, and dependency
lifecycle.
"""

import os
import sys
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Optional

import structlog
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from controlplane import __version__
from controlplane.auth.dependencies import enforce_gates
from controlplane.bus.amqp_bus import AmqpBus
from controlplane.checks import CheckRegistry
from controlplane.config import get_settings
from controlplane.context import AppContext
from controlplane.errors import BusUnavailableError, FanInTimeoutError, StoreUnavailableError
from controlplane.responses import empty_response
from controlplane.routers import checks, clients, events, requests, stashes, system
from controlplane.storage.redis_store import RedisStore
from controlplane.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

FATAL_EXIT_CODE = 2


def terminate() -> None:
    """Fail fast: the API is useless without its store and bus."""
    logger.critical("service_not_running")
    sys.stdout.flush()
    os._exit(FATAL_EXIT_CODE)


async def build_context(on_fatal: Callable[[], None]) -> AppContext:
    """
    Connect the store and bus and assemble the dependency bundle.

    Any connection failure here is fatal.
    """
    settings = get_settings()

    store = RedisStore(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        health_interval=settings.store_health_interval_seconds,
        reconnect_attempts=settings.store_reconnect_attempts,
    )
    logger.debug("connecting_to_redis", url=settings.redis_url)
    try:
        await store.connect()
    except StoreUnavailableError as e:
        logger.critical("cannot_connect_to_redis", url=settings.redis_url, error=str(e))
        on_fatal()
        raise

    def on_bus_disconnect() -> None:
        logger.critical("cannot_connect_to_rabbitmq")
        on_fatal()

    bus = AmqpBus(settings.rabbitmq_url, declare_queues=[settings.results_queue])
    logger.debug("connecting_to_rabbitmq")
    try:
        await bus.connect(on_disconnect=on_bus_disconnect)
    except BusUnavailableError as e:
        logger.critical("cannot_connect_to_rabbitmq", error=str(e))
        await store.close()
        on_fatal()
        raise

    store.start_health_monitor(on_fatal)

    return AppContext(
        settings=settings,
        store=store,
        bus=bus,
        checks=CheckRegistry.from_file(settings.checks_file),
    )


def create_app(
    context: Optional[AppContext] = None,
    on_fatal: Callable[[], None] = terminate,
) -> FastAPI:
    """
    Application factory.

    Args:
        context: Pre-built dependency bundle; when omitted the lifespan
            connects to Redis and RabbitMQ from settings
        on_fatal: Called when a dependency is lost for good
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        if context is None:
            app.state.context = await build_context(on_fatal)
        else:
            app.state.context = context
        ctx: AppContext = app.state.context

        logger.info("application_startup", version=app.version)

        yield

        logger.warning("stopping")
        ctx.deletions.cancel_all()
        await ctx.bus.close()
        await ctx.store.close()
        logger.warning("stopped")

    app = FastAPI(
        title="Monitoring Control-Plane API",
        description="Runtime state, check requests, event resolution, and stashes",
        version=__version__,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def gate_middleware(request: Request, call_next):
        """Credentials, then store health, ahead of route matching."""
        rejection = await enforce_gates(request)
        if rejection is not None:
            return rejection
        return await call_next(request)

    @app.middleware("http")
    async def request_tracing_middleware(request: Request, call_next):
        """Add request ID and log every request."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            remote_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                exc_info=True,
            )
            return empty_response(500, headers={"X-Request-ID": request_id})

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return empty_response(exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(FanInTimeoutError)
    async def fanin_timeout_handler(request: Request, exc: FanInTimeoutError):
        logger.error(
            "fanin_timeout",
            path=request.url.path,
            expected=exc.expected,
            completed=exc.completed,
            timeout=exc.timeout,
        )
        return empty_response(504)

    app.include_router(system.router, tags=["System"])
    app.include_router(clients.router, tags=["Clients"])
    app.include_router(checks.router, tags=["Checks"])
    app.include_router(requests.router, tags=["Check Requests"])
    app.include_router(events.router, tags=["Events"])
    app.include_router(stashes.router, tags=["Stashes"])

    logger.info("application_configured", routers_count=6)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "controlplane.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
