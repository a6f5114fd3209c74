"""
X-HTTP-Method-Override support for clients that can only send GET and POST.
"""

import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from rest_resource.exceptions import BadRequestException

logger = logging.getLogger(__name__)

OVERRIDE_HEADER = b'x-http-method-override'
ALLOWED_OVERRIDES = ('PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS')


class HttpMethodOverrideMiddleware:
    """Replaces the method of POST requests carrying an override header."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http' or scope['method'] != 'POST':
            await self.app(scope, receive, send)
            return

        override = None
        for name, value in scope.get('headers', []):
            if name.lower() == OVERRIDE_HEADER:
                override = value.decode('latin-1').strip().upper()
                break

        if override is None:
            await self.app(scope, receive, send)
            return

        if override not in ALLOWED_OVERRIDES:
            exc = BadRequestException(
                f"Method {override} is not allowed as an override",
                errors={'allowed': list(ALLOWED_OVERRIDES)},
            )
            response = JSONResponse(status_code=exc.status_code, content=exc.to_dict())
            await response(scope, receive, send)
            return

        logger.debug(f"Overriding POST {scope.get('path')} with {override}")
        scope = dict(scope)
        scope['method'] = override
        await self.app(scope, receive, send)
