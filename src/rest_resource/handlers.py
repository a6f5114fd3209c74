"""
FastAPI integration: render HttpException as JSON and translate mapped
application exceptions into HTTP exceptions.
"""

import logging
from typing import Any, Callable, Type

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rest_resource.config import ModuleOptions
from rest_resource.exceptions import HttpException
from rest_resource.middleware import HttpMethodOverrideMiddleware
from rest_resource.resource.reflection import RuntimeReflectionService

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: HttpException) -> JSONResponse:
    """Render an HttpException with its status code, message and error payload."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.status_code} {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


def _translating_handler(http_exception_class: Type[HttpException]) -> Callable[[Request, Exception], Any]:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info(f"Translating {type(exc).__name__} into {http_exception_class.__name__}")
        return await http_exception_handler(request, http_exception_class(str(exc)))
    return handler


def register_exception_handlers(app: FastAPI, options: ModuleOptions) -> None:
    """
    Register the HttpException renderer and one handler per exception_map entry.

    Raises:
        ValueError: If a mapped target is not an HttpException subclass
        ReflectionError: If a mapped class cannot be imported
    """
    app.add_exception_handler(HttpException, http_exception_handler)

    reflection_service = RuntimeReflectionService()
    for source_name, target_name in options.get_exception_map().items():
        source = reflection_service.get_class(source_name)
        target = reflection_service.get_class(target_name)
        if not issubclass(target, HttpException):
            raise ValueError(f"Exception map target {target_name} is not an HttpException")
        app.add_exception_handler(source, _translating_handler(target))
        logger.debug(f"Mapped {source_name} to {target_name}")


def setup(app: FastAPI, options: ModuleOptions) -> FastAPI:
    """Install exception handlers and, if enabled, the HTTP method override middleware."""
    register_exception_handlers(app, options)
    if options.get_register_http_method_override_listener():
        app.add_middleware(HttpMethodOverrideMiddleware)
    return app
