"""
Stash router - free-form JSON documents addressed by path.

``stash:<path>`` and membership of ``<path>`` in the ``stashes`` set are
always written and removed together.
"""

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import StrictStr, TypeAdapter, ValidationError

from controlplane.context import AppContext, get_context
from controlplane.engine.fanin import fan_in
from controlplane.responses import empty_response, raw_json_response
from controlplane.storage import keys
from controlplane.storage.base import StoreBackend
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()

_path_list = TypeAdapter(list[StrictStr])


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


async def _read_stash(store: StoreBackend, path: str) -> tuple[str, Optional[str]]:
    return path, await store.get(keys.stash_key(path))


@router.get("/stashes")
async def list_stashes(ctx: AppContext = Depends(get_context)):
    """Every stash path."""
    return await ctx.store.smembers(keys.STASHES)


@router.post("/stashes")
async def read_stashes(request: Request, ctx: AppContext = Depends(get_context)):
    """
    Batch lookup.

    Body: a non-empty JSON array of paths. Returns ``{path: value}`` for the
    paths that hold a value; missing paths are left out.
    """
    try:
        paths = _path_list.validate_json(await request.body())
    except ValidationError:
        return empty_response(400)
    if not paths:
        return empty_response(400)

    found = await fan_in(
        (_read_stash(ctx.store, path) for path in paths),
        timeout=ctx.settings.fanin_timeout_seconds,
    )
    response: dict[str, Any] = {}
    for path, stash_json in found:
        if stash_json is not None:
            response[path] = json.loads(stash_json)
    return response


@router.post("/stashes/{path:path}")
@router.post("/stash/{path:path}")
async def create_stash(path: str, request: Request, ctx: AppContext = Depends(get_context)):
    """
    Create or replace a stash; the body may be any JSON value.

    ``NaN`` and ``Infinity`` are rejected like any other malformed body.
    """
    try:
        content = json.loads(await request.body(), parse_constant=_reject_constant)
    except ValueError:
        return empty_response(400)

    await ctx.store.set(keys.stash_key(path), json.dumps(content))
    await ctx.store.sadd(keys.STASHES, path)
    logger.info("stash_stored", path=path)
    return empty_response(201)


@router.get("/stashes/{path:path}")
@router.get("/stash/{path:path}")
async def get_stash(path: str, ctx: AppContext = Depends(get_context)):
    stash_json = await ctx.store.get(keys.stash_key(path))
    if stash_json is None:
        return empty_response(404)
    return raw_json_response(stash_json)


@router.delete("/stashes/{path:path}")
@router.delete("/stash/{path:path}")
async def delete_stash(path: str, ctx: AppContext = Depends(get_context)):
    if not await ctx.store.exists(keys.stash_key(path)):
        return empty_response(404)
    await ctx.store.srem(keys.STASHES, path)
    await ctx.store.delete(keys.stash_key(path))
    logger.info("stash_deleted", path=path)
    return empty_response(204)
