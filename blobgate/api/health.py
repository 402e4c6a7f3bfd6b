"""Liveness probe."""

from fastapi import APIRouter, Response

router = APIRouter(tags=["health"])


@router.get("/healthz", status_code=200, response_class=Response)
def healthz():
    """Always 200 with an empty body. No auth, no store access."""
    return Response(status_code=200)
