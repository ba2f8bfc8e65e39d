"""
System info router.

``GET /info`` bypasses the store health gate so operators can always see
which dependency is down.
"""

from fastapi import APIRouter, Depends

from controlplane.context import AppContext, get_context
from controlplane.models.enums import DependencyHealth
from controlplane.models.system import ApiInfo, DependencyStatus, InfoResponse

router = APIRouter()


def _health(connected: bool) -> DependencyHealth:
    return DependencyHealth.OK if connected else DependencyHealth.DOWN


@router.get("/info", response_model=InfoResponse)
async def info(ctx: AppContext = Depends(get_context)):
    """API version and dependency connectivity."""
    return InfoResponse(
        api=ApiInfo(version=ctx.version),
        health=DependencyStatus(
            redis=_health(ctx.store.connected),
            rabbitmq=_health(ctx.bus.connected),
        ),
    )
