"""
System-level models for the control-plane API.
"""

from pydantic import BaseModel, Field

from .enums import DependencyHealth


class ApiInfo(BaseModel):
    version: str = Field(description="Control-plane API version")


class DependencyStatus(BaseModel):
    """Connectivity of the shared dependencies."""

    redis: DependencyHealth
    rabbitmq: DependencyHealth


class InfoResponse(BaseModel):
    """
    Body of ``GET /info``.

    Served even while the store is unreachable so operators can observe
    dependency health.
    """

    api: ApiInfo
    health: DependencyStatus
