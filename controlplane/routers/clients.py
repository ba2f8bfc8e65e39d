"""
Client router - list, detail, and cascading delete.

Client records are registered by the executors; this API only reads and
removes them.
"""

import json

from fastapi import APIRouter, Depends

from controlplane import routing  # noqa: F401  registers the "name" convertor
from controlplane.context import AppContext, get_context
from controlplane.engine.fanin import fan_in
from controlplane.responses import empty_response, raw_json_response
from controlplane.storage import keys
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/clients")
async def list_clients(ctx: AppContext = Depends(get_context)):
    """
    Every registered client record.

    Reads the ``clients`` index, then fans out one read per member. Members
    whose record disappeared between the two reads are skipped.
    """
    names = await ctx.store.smembers(keys.CLIENTS)
    records = await fan_in(
        (ctx.store.get(keys.client_key(name)) for name in names),
        timeout=ctx.settings.fanin_timeout_seconds,
    )
    return [json.loads(record) for record in records if record is not None]


@router.get("/clients/{client_name:name}")
@router.get("/client/{client_name:name}")
async def get_client(client_name: str, ctx: AppContext = Depends(get_context)):
    client_json = await ctx.store.get(keys.client_key(client_name))
    if client_json is None:
        return empty_response(404)
    return raw_json_response(client_json)


@router.delete("/clients/{client_name:name}")
@router.delete("/client/{client_name:name}")
async def delete_client(client_name: str, ctx: AppContext = Depends(get_context)):
    """
    Resolve the client's events and schedule removal of its keys.

    Answers 202 as soon as the resolutions are published; the keys go away
    after the grace period.
    """
    if not await ctx.deletions.delete_client(client_name):
        return empty_response(404)
    return empty_response(202)
