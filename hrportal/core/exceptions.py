"""
Exceptions

Business exceptions and the global exception handlers
"""
from fastapi import Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger

from .response import error_response


class AppException(Exception):
    """Base application exception"""

    def __init__(
        self,
        message: str = "Internal server error",
        code: int = 500,
        data: dict = None
    ):
        self.message = message
        self.code = code
        self.data = data
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found"""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message=message, code=404)


class BadRequestException(AppException):
    """Invalid request"""

    def __init__(self, message: str = "Invalid request", data: dict = None):
        super().__init__(message=message, code=400, data=data)


class UnauthorizedException(AppException):
    """Missing or invalid credentials"""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message=message, code=401)


class ConflictException(AppException):
    """Resource conflict, also used for forbidden state transitions"""

    def __init__(self, message: str = "Resource already exists", data: dict = None):
        super().__init__(message=message, code=409, data=data)


class UpstreamAIException(AppException):
    """The LLM endpoint failed or returned something unusable"""

    def __init__(self, message: str = "AI service returned an invalid response"):
        super().__init__(message=message, code=502)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Application exception handler"""
    logger.warning(f"AppException: {exc.message} | Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.code,
        content=error_response(message=exc.message, code=exc.code, data=exc.data)
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP exception handler"""
    logger.warning(f"HTTPException: {exc.detail} | Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message=str(exc.detail), code=exc.status_code)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request validation handler"""
    errors = exc.errors()
    error_messages = []
    for error in errors:
        loc = " -> ".join(str(l) for l in error["loc"])
        error_messages.append(f"{loc}: {error['msg']}")

    message = "; ".join(error_messages)
    logger.warning(f"ValidationError: {message} | Path: {request.url.path}")

    return JSONResponse(
        status_code=422,
        content=error_response(
            message="Request validation failed",
            code=422,
            data={"errors": jsonable_encoder(errors)}
        )
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler"""
    logger.exception(f"Unhandled Exception: {exc} | Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_response(message="Internal server error", code=500)
    )
