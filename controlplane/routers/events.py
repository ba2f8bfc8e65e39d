"""
Event router - list, detail, and resolution.

Events live as fields of ``events:<client>`` keyed by check name, so the
stored fragment carries neither the client nor the check; responses add
both. Resolution publishes a message and answers 202; the event record is
left for the result processor to clear.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from controlplane import routing  # noqa: F401  registers the "name" convertor
from controlplane.context import AppContext, get_context
from controlplane.engine.fanin import fan_in
from controlplane.engine.resolution import event_is_open, resolve_event
from controlplane.models.requests import ResolveRequestBody
from controlplane.responses import empty_response
from controlplane.storage import keys
from controlplane.storage.base import StoreBackend
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


def enrich_event(event_json: str, client_name: str, check_name: str) -> dict[str, Any]:
    """Stored event fragment plus its identifying client and check."""
    return {**json.loads(event_json), "client": client_name, "check": check_name}


async def _client_events(store: StoreBackend, client_name: str) -> list[dict[str, Any]]:
    events = await store.hgetall(keys.events_key(client_name))
    return [
        enrich_event(event_json, client_name, check_name)
        for check_name, event_json in events.items()
    ]


@router.get("/events")
async def list_events(ctx: AppContext = Depends(get_context)):
    """Open events across every registered client."""
    names = await ctx.store.smembers(keys.CLIENTS)
    groups = await fan_in(
        (_client_events(ctx.store, name) for name in names),
        timeout=ctx.settings.fanin_timeout_seconds,
    )
    return [event for group in groups for event in group]


@router.get("/events/{client_name:name}")
async def list_client_events(client_name: str, ctx: AppContext = Depends(get_context)):
    """Open events for one client; an unknown client simply has none."""
    return await _client_events(ctx.store, client_name)


@router.get("/events/{client_name:name}/{check_name:name}")
@router.get("/event/{client_name:name}/{check_name:name}")
async def get_event(client_name: str, check_name: str, ctx: AppContext = Depends(get_context)):
    event_json = await ctx.store.hget(keys.events_key(client_name), check_name)
    if event_json is None:
        return empty_response(404)
    return enrich_event(event_json, client_name, check_name)


@router.delete("/events/{client_name:name}/{check_name:name}")
@router.delete("/event/{client_name:name}/{check_name:name}")
async def delete_event(client_name: str, check_name: str, ctx: AppContext = Depends(get_context)):
    """Resolve an open event."""
    if not await event_is_open(ctx.store, client_name, check_name):
        return empty_response(404)
    await resolve_event(ctx.bus, client_name, check_name, queue=ctx.settings.results_queue)
    return empty_response(202)


@router.post("/resolve")
@router.post("/event/resolve")
async def resolve(request: Request, ctx: AppContext = Depends(get_context)):
    """
    Resolve an open event named in the request body.

    Body: ``{"client": str, "check": str}``. A malformed body is rejected
    before any store access.
    """
    try:
        body = ResolveRequestBody.model_validate_json(await request.body())
    except ValidationError:
        return empty_response(400)

    if not await event_is_open(ctx.store, body.client, body.check):
        return empty_response(404)
    await resolve_event(ctx.bus, body.client, body.check, queue=ctx.settings.results_queue)
    return empty_response(202)
