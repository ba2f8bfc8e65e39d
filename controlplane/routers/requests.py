"""
Check request router - ad-hoc check execution.

A request is broadcast once to each subscriber's fanout exchange; every
executor bound to that exchange runs the check.
"""

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from controlplane.context import AppContext, get_context
from controlplane.models.messages import CheckRequestMessage
from controlplane.models.requests import CheckRequestBody
from controlplane.responses import empty_response
from controlplane.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.post("/request")
@router.post("/check/request")
async def request_check(request: Request, ctx: AppContext = Depends(get_context)):
    """
    Publish a check request to each unique subscriber.

    Body: ``{"check": str, "subscribers": [str, ...]}``. Duplicate
    subscribers receive a single message.
    """
    try:
        body = CheckRequestBody.model_validate_json(await request.body())
    except ValidationError:
        return empty_response(400)

    message = CheckRequestMessage(name=body.check)
    payload = message.model_dump()
    subscribers = body.unique_subscribers()
    logger.info("check_request_publishing", payload=payload, subscribers=subscribers)
    for exchange_name in subscribers:
        await ctx.bus.publish_fanout(exchange_name, payload)
    return empty_response(201)
