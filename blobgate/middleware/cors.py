"""CORS handling that answers every OPTIONS request itself.

Starlette's CORSMiddleware only intercepts real preflights (``Origin`` plus
``Access-Control-Request-Method``), replies ``200`` when they pass and
``400`` when they do not. The gateway answers any OPTIONS request with
``204`` and no body, before routing, auth or policy evaluation. A preflight
that fails the origin, method or header check still gets ``204``, just
without any ``Access-Control-Allow-*`` grant, so the browser blocks the
real request.
"""

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

ALLOWED_METHODS = ["GET", "HEAD", "PUT", "DELETE", "OPTIONS"]

# Headers a 200 preflight carries that make no sense on a 204.
_BODY_HEADERS = frozenset({"content-length", "content-type"})


class GatewayCORSMiddleware(CORSMiddleware):
    """CORSMiddleware with ``204`` preflights and bare OPTIONS support."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers=request_headers)
        granted = response.status_code == 200
        headers = {}
        for name, value in response.headers.items():
            name = name.lower()
            if name in _BODY_HEADERS:
                continue
            if not granted and name.startswith("access-control-"):
                continue
            headers[name] = value
        return Response(status_code=204, headers=headers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "OPTIONS":
            headers = Headers(scope=scope)
            if "origin" in headers and "access-control-request-method" in headers:
                response = self.preflight_response(request_headers=headers)
            else:
                response = Response(status_code=204, headers={"Allow": ", ".join(ALLOWED_METHODS)})
            await response(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
