"""
HTTP exception definitions.
Each class carries a fixed status code, a default message and an optional
structured error payload that the exception handlers render as JSON.
"""

from typing import Dict, Any, Optional, Type
from starlette.exceptions import HTTPException


# ==================== Base Exceptions ====================

class HttpException(HTTPException):
    """Base class for all exceptions that map to an HTTP response."""

    DEFAULT_MESSAGE = ''

    def __init__(self, status_code: int, message: str = '', errors: Any = None):
        self.message = message or self.DEFAULT_MESSAGE
        self.errors = errors
        super().__init__(status_code=status_code, detail=self.message)

    def get_status_code(self) -> int:
        return self.status_code

    def get_message(self) -> str:
        return self.message

    def get_errors(self) -> Any:
        return self.errors

    def to_dict(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {
            "status_code": self.status_code,
            "message": self.message,
        }
        if self.errors is not None:
            content["errors"] = self.errors
        return content


class ClientErrorException(HttpException):
    """Base class for 4xx errors"""

    def __init__(self, status_code: int, message: str = '', errors: Any = None):
        if status_code < 400 or status_code > 499:
            raise ValueError(f"Status code for client errors must be between 400 and 499, {status_code} given")
        super().__init__(status_code, message, errors)


class ServerErrorException(HttpException):
    """Base class for 5xx errors"""

    def __init__(self, status_code: int, message: str = '', errors: Any = None):
        if status_code < 500 or status_code > 599:
            raise ValueError(f"Status code for server errors must be between 500 and 599, {status_code} given")
        super().__init__(status_code, message, errors)


# ==================== Client Errors ====================

class BadRequestException(ClientErrorException):
    DEFAULT_MESSAGE = 'The request cannot be fulfilled due to bad syntax'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(400, message, errors)


class UnauthorizedException(ClientErrorException):
    DEFAULT_MESSAGE = 'Authentication is required and has failed or has not yet been provided'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(401, message, errors)


class ForbiddenException(ClientErrorException):
    DEFAULT_MESSAGE = 'The request was a valid request, but the server is refusing to respond to it'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(403, message, errors)


class NotFoundException(ClientErrorException):
    DEFAULT_MESSAGE = 'The requested resource could not be found'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(404, message, errors)


class MethodNotAllowedException(ClientErrorException):
    DEFAULT_MESSAGE = 'A request was made of a resource using a request method not supported by that resource'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(405, message, errors)


class NotAcceptableException(ClientErrorException):
    DEFAULT_MESSAGE = 'The requested resource is only capable of generating content not acceptable according to the Accept headers sent in the request'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(406, message, errors)


class ConflictException(ClientErrorException):
    DEFAULT_MESSAGE = 'The request could not be processed because of conflict in the request'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(409, message, errors)


class GoneException(ClientErrorException):
    DEFAULT_MESSAGE = 'The resource requested is no longer available and will not be available again'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(410, message, errors)


class UnsupportedMediaTypeException(ClientErrorException):
    DEFAULT_MESSAGE = 'The request entity has a media type which the server or resource does not support'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(415, message, errors)


class UnprocessableEntityException(ClientErrorException):
    DEFAULT_MESSAGE = 'The request was well-formed but was unable to be followed due to semantic errors'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(422, message, errors)


# ==================== Server Errors ====================

class InternalServerErrorException(ServerErrorException):
    DEFAULT_MESSAGE = 'An internal server error occurred'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(500, message, errors)


class NotImplementedException(ServerErrorException):
    DEFAULT_MESSAGE = 'The server either does not recognize the request method, or it lacks the ability to fulfill the request'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(501, message, errors)


class ServiceUnavailableException(ServerErrorException):
    DEFAULT_MESSAGE = 'The server is currently unavailable'

    def __init__(self, message: str = '', errors: Any = None):
        super().__init__(503, message, errors)


_STATUS_CODE_MAP: Dict[int, Type[HttpException]] = {
    400: BadRequestException,
    401: UnauthorizedException,
    403: ForbiddenException,
    404: NotFoundException,
    405: MethodNotAllowedException,
    406: NotAcceptableException,
    409: ConflictException,
    410: GoneException,
    415: UnsupportedMediaTypeException,
    422: UnprocessableEntityException,
    500: InternalServerErrorException,
    501: NotImplementedException,
    503: ServiceUnavailableException,
}


def create_from_status_code(status_code: int, message: str = '', errors: Optional[Any] = None) -> HttpException:
    """
    Build the most specific exception for a status code.

    Codes without a dedicated class fall back to the generic client or
    server error base; anything outside 4xx/5xx raises ValueError.
    """
    exception_class = _STATUS_CODE_MAP.get(status_code)
    if exception_class is not None:
        return exception_class(message, errors)
    if 400 <= status_code <= 499:
        return ClientErrorException(status_code, message, errors)
    if 500 <= status_code <= 599:
        return ServerErrorException(status_code, message, errors)
    raise ValueError(f"Status code {status_code} is not an HTTP error code")
