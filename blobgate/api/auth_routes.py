"""Token introspection.

    GET /auth/verify: roles carried by the caller's token and the
                       prefixes those roles can read and write
"""

from fastapi import APIRouter, Depends

from ..core.auth import request_token
from ..schemas.objects import VerifyResponse
from ..services.gateway_service import ObjectGateway
from .deps import get_gateway

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get(
    "/verify",
    response_model=VerifyResponse,
    summary="Resolve the caller's token",
    description="401 when the token is missing, unknown or carries no roles.",
)
def verify(
    token: str = Depends(request_token),
    gateway: ObjectGateway = Depends(get_gateway),
):
    return gateway.verify(token)
