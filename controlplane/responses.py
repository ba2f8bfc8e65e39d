"""
Response helpers.

Every response is ``application/json``. Errors carry no body, only a status
code; stored JSON documents are echoed verbatim without a parse round trip.
"""

from typing import Optional

from fastapi import Response

JSON_MEDIA_TYPE = "application/json"


def empty_response(status_code: int, headers: Optional[dict[str, str]] = None) -> Response:
    return Response(status_code=status_code, media_type=JSON_MEDIA_TYPE, headers=headers)


def raw_json_response(body: str, status_code: int = 200) -> Response:
    """Return an already-serialised JSON document as-is."""
    return Response(content=body, status_code=status_code, media_type=JSON_MEDIA_TYPE)
