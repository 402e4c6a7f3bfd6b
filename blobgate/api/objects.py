"""Object API: GET/HEAD/PUT/DELETE on the public and restricted partitions.

    /pub/<relpath>   -> settings.public_prefix + relpath
    /priv/<relpath>  -> settings.restricted_prefix + relpath

Both partitions expose the same four verbs and go through the same policy
checks; they differ only in the store prefix. Other verbs get a 405 from
the router.
"""

import logging
import re
from typing import Optional
from urllib.parse import unquote

from fastapi import APIRouter, Depends, Request, Response

from ..core.auth import request_token
from ..core.config import settings
from ..schemas.objects import PutResponse
from ..services.gateway_service import ObjectGateway
from ..storage.base import DEFAULT_CONTENT_TYPE, ObjectMetadata
from .deps import get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["objects"])

# URL mount -> name of the settings field holding the store prefix.
PARTITIONS = {
    "pub": "public_prefix",
    "priv": "restricted_prefix",
}


# A "%" not followed by two hex digits.
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode_relpath(raw: str) -> str:
    """Percent-decode a relative path.

    Any malformed escape, or escapes that do not form valid UTF-8, leave
    the whole path undecoded. A path is never half-decoded.
    """
    if _BAD_ESCAPE.search(raw):
        return raw
    try:
        return unquote(raw, errors="strict")
    except UnicodeDecodeError:
        return raw


def relative_path(request: Request, mount: str, fallback: str) -> str:
    """The part of the request path after ``/<mount>/``, decoded once.

    Works from the undecoded ``raw_path`` so a malformed escape falls back
    to its literal text instead of being replaced.
    """
    raw = request.scope.get("raw_path")
    marker = f"/{mount}/"
    if raw:
        raw_str = raw.decode("latin-1")
        if raw_str.startswith(marker):
            return decode_relpath(raw_str[len(marker):])
    return fallback


async def request_body(request: Request) -> bytes:
    return await request.body()


def _object_headers(meta: ObjectMetadata) -> dict:
    return {
        "ETag": f'"{meta.etag}"',
        "Cache-Control": f"public, max-age={settings.object_cache_seconds}",
    }


def _register_partition(mount: str, prefix_setting: str) -> None:
    path = f"/{mount}/{{relpath:path}}"

    def object_key(request: Request, relpath: str) -> str:
        return getattr(settings, prefix_setting) + relative_path(request, mount, relpath)

    # HEAD is registered before GET so it is never routed to the GET handler.
    @router.head(path, response_class=Response, name=f"head_{mount}_object")
    def head_object(
        key: str = Depends(object_key),
        token: str = Depends(request_token),
        gateway: ObjectGateway = Depends(get_gateway),
    ):
        meta = gateway.head(key, token)
        headers = _object_headers(meta)
        headers["Content-Length"] = str(meta.size)
        return Response(
            status_code=200,
            headers=headers,
            media_type=meta.content_type or DEFAULT_CONTENT_TYPE,
        )

    @router.get(path, response_class=Response, name=f"read_{mount}_object")
    def read_object(
        key: str = Depends(object_key),
        token: str = Depends(request_token),
        gateway: ObjectGateway = Depends(get_gateway),
    ):
        obj = gateway.read(key, token)
        return Response(
            content=obj.body,
            headers=_object_headers(obj.metadata),
            media_type=obj.metadata.content_type or DEFAULT_CONTENT_TYPE,
        )

    @router.put(path, response_model=PutResponse, name=f"write_{mount}_object")
    def write_object(
        request: Request,
        key: str = Depends(object_key),
        body: bytes = Depends(request_body),
        token: str = Depends(request_token),
        gateway: ObjectGateway = Depends(get_gateway),
    ):
        content_type: Optional[str] = request.headers.get("content-type") or None
        result = gateway.write(key, body, content_type, token)
        return PutResponse(key=result.key, etag=result.etag)

    @router.delete(path, status_code=204, response_class=Response, name=f"delete_{mount}_object")
    def delete_object(
        key: str = Depends(object_key),
        token: str = Depends(request_token),
        gateway: ObjectGateway = Depends(get_gateway),
    ):
        gateway.delete(key, token)
        return Response(status_code=204)


for _mount, _setting in PARTITIONS.items():
    _register_partition(_mount, _setting)
