"""Listing endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..core.auth import request_token
from ..core.config import settings
from ..exceptions import ValidationError
from ..schemas.objects import ListingResponse, ObjectEntry
from ..services.gateway_service import ObjectGateway
from .deps import get_gateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["objects"])


@router.get("/ls", response_model=ListingResponse)
def list_objects(
    response: Response,
    prefix: Optional[str] = Query(None, description="Store key prefix; a trailing '/' is added"),
    delimiter: Optional[str] = Query(
        None,
        description="When set, list one level only and roll deeper keys up into 'directories'",
    ),
    token: str = Depends(request_token),
    gateway: ObjectGateway = Depends(get_gateway),
):
    """List every object under *prefix*, following store pagination to the end."""
    if not prefix:
        raise ValidationError("Missing prefix", field="prefix")

    listing = gateway.list_objects(prefix, token, delimiter=delimiter or None)
    response.headers["Cache-Control"] = f"public, max-age={settings.listing_cache_seconds}"
    return ListingResponse(
        prefix=listing.prefix,
        directories=listing.directories,
        objects=[ObjectEntry.model_validate(o) for o in listing.objects],
    )
