"""
Request body models.

Bodies are validated from raw bytes with ``model_validate_json`` so that a
malformed document and a wrongly typed field fail the same way (400, empty
body) instead of FastAPI's 422 detail payload.
"""

from pydantic import BaseModel, ConfigDict, StrictStr


class CheckRequestBody(BaseModel):
    """Body of ``POST /request``."""

    model_config = ConfigDict(extra="ignore")

    check: StrictStr
    subscribers: list[StrictStr]

    def unique_subscribers(self) -> list[str]:
        """Subscribers with duplicates removed, first occurrence wins."""
        return list(dict.fromkeys(self.subscribers))


class ResolveRequestBody(BaseModel):
    """Body of ``POST /resolve``."""

    model_config = ConfigDict(extra="ignore")

    client: StrictStr
    check: StrictStr
