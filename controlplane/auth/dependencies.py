"""
Request gates applied to every request.

Both run from the application middleware, before route matching, in order:
credentials first, then store health. Unrouted paths are therefore gated
too, and a rejection never reaches a handler.
"""

import secrets
from typing import Optional

from fastapi import HTTPException, Request, Response, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from controlplane.context import AppContext, get_context
from controlplane.responses import empty_response
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)
security = HTTPBasic(auto_error=False)

# Always served so operators can observe dependency health.
LIVENESS_PATH = "/info"


async def require_credentials(
    credentials: Optional[HTTPBasicCredentials],
    ctx: AppContext,
) -> None:
    """
    Enforce HTTP Basic auth when API credentials are configured.

    Raises:
        HTTPException: 401 if credentials are missing or wrong
    """
    settings = ctx.settings
    if not settings.auth_enabled:
        return

    if not credentials:
        logger.warning("auth_failed", reason="missing_credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Basic"},
        )

    user_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.api_user.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.api_password.encode("utf-8")
    )
    if not (user_ok and password_ok):
        logger.warning("auth_failed", reason="invalid_credentials", user=credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Basic"},
        )


async def require_healthy_store(request: Request, ctx: AppContext) -> None:
    """
    Short-circuit with 503 while the store is unreachable.

    Reads the store's connectivity flag only; recovery is driven by the
    store's own health monitor, never retried here.

    Raises:
        HTTPException: 503 for every path except the liveness path
    """
    if ctx.store.connected or request.url.path == LIVENESS_PATH:
        return
    logger.warning("store_unhealthy", path=request.url.path)
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


async def enforce_gates(request: Request) -> Optional[Response]:
    """
    Run both gates for a request.

    Returns:
        The empty-bodied rejection, or None when the request may proceed
    """
    ctx = get_context(request)
    try:
        # Malformed Basic headers raise 401 even with auto_error disabled
        credentials = await security(request)
        await require_credentials(credentials, ctx)
        await require_healthy_store(request, ctx)
    except HTTPException as exc:
        return empty_response(exc.status_code, headers=exc.headers)
    return None
