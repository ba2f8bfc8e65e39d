"""
Pydantic v2 models for the control-plane API.

Model Organization:
    - enums: Check status codes, dependency health, deletion stages
    - messages: Payloads published on the message bus
    - requests: Validated request bodies
    - system: Info/health response
"""

from .enums import CheckStatus, DeletionStage, DependencyHealth
from .messages import RESOLVE_OUTPUT, CheckRequestMessage, ResolutionCheck, ResolutionPayload
from .requests import CheckRequestBody, ResolveRequestBody
from .system import ApiInfo, DependencyStatus, InfoResponse

__all__ = [
    "ApiInfo",
    "CheckRequestBody",
    "CheckRequestMessage",
    "CheckStatus",
    "DeletionStage",
    "DependencyHealth",
    "DependencyStatus",
    "InfoResponse",
    "RESOLVE_OUTPUT",
    "ResolutionCheck",
    "ResolutionPayload",
    "ResolveRequestBody",
]
