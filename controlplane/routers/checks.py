"""
Check definition router (read-only, served from static configuration).
"""

from fastapi import APIRouter, Depends

from controlplane import routing  # noqa: F401  registers the "name" convertor
from controlplane.context import AppContext, get_context
from controlplane.responses import empty_response

router = APIRouter()


@router.get("/checks")
async def list_checks(ctx: AppContext = Depends(get_context)):
    return ctx.checks.all()


@router.get("/checks/{check_name:name}")
@router.get("/check/{check_name:name}")
async def get_check(check_name: str, ctx: AppContext = Depends(get_context)):
    definition = ctx.checks.get(check_name)
    if definition is None:
        return empty_response(404)
    return definition
