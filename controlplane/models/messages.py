"""
Bus message models.

These are the payloads the control plane publishes; consumers (the check
executors and the result processor) live in other services.
"""

import time

from pydantic import BaseModel, Field

from .enums import CheckStatus

RESOLVE_OUTPUT = "Resolving on request of the API"


def unix_now() -> int:
    return int(time.time())


class ResolutionCheck(BaseModel):
    """
    Synthetic check result that clears an open event.

    Attributes:
        name: Check being resolved
        output: Fixed human-readable output
        status: Always OK
        issued: Unix timestamp of the resolution request
        force_resolve: Tells the result processor to clear the event even if
            the check would not normally resolve on a single OK
    """

    name: str = Field(description="Check name")
    output: str = Field(default=RESOLVE_OUTPUT, description="Result output")
    status: int = Field(default=int(CheckStatus.OK), description="Check exit status")
    issued: int = Field(default_factory=unix_now, description="Issue time (unix seconds)")
    force_resolve: bool = Field(default=True, description="Force event resolution")


class ResolutionPayload(BaseModel):
    """Message published to the results queue to resolve an event."""

    client: str = Field(description="Client the event belongs to")
    check: ResolutionCheck


class CheckRequestMessage(BaseModel):
    """Message published to a subscriber channel to request a check run."""

    name: str = Field(description="Check name")
    issued: int = Field(default_factory=unix_now, description="Issue time (unix seconds)")
