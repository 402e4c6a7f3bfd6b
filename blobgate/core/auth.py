"""Bearer token extraction.

Public interface:
    ``extract_token``: pure function over the raw header and query values.
    ``request_token``: FastAPI dependency returning the caller's token
                        ("" when none was supplied). Never raises.

The token is looked for in exactly two places, in priority order:
``Authorization: Bearer <token>`` and then the ``key`` query parameter.
Each is trimmed on its own and the first non-empty one wins.
"""

from typing import Optional

from fastapi import Request

_BEARER_PREFIX = "Bearer "


def extract_token(authorization: Optional[str], query_key: Optional[str]) -> str:
    """Pick the caller's token from the header or the query string.

    A header without the ``Bearer`` scheme is taken as the token itself.
    """
    header = authorization or ""
    if header.startswith(_BEARER_PREFIX):
        header = header[len(_BEARER_PREFIX):]
    bearer = header.strip()
    if bearer:
        return bearer
    return (query_key or "").strip()


def request_token(request: Request) -> str:
    """FastAPI dependency: the token carried by *request*."""
    return extract_token(
        request.headers.get("authorization"),
        request.query_params.get("key"),
    )
