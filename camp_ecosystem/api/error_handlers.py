"""
Error handlers for the API
"""
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from camp_ecosystem.utils.errors import CampEcosystemError, ErrorCode

# Setup logger
logger = structlog.get_logger("camp_ecosystem.api.errors")


def error_body(message: str, code: str, details=None) -> dict:
    """JSON body shared by every error response."""
    body = {"success": False, "error": message, "error_code": code}
    if details:
        body["details"] = details
    return body


def register_error_handlers(app: FastAPI) -> None:
    """Register global error handlers for the application"""

    @app.exception_handler(CampEcosystemError)
    async def camp_error_handler(request: Request, exc: CampEcosystemError):
        """Handle errors from the service layer"""
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "Service error",
            code=exc.code.value,
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path
        )
        error = exc.to_dict()
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(error["message"], error["code"], error["details"])
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies"""
        logger.warning(
            "Request validation failed",
            errors=len(exc.errors()),
            path=request.url.path
        )
        return JSONResponse(
            status_code=400,
            content=error_body(
                "Invalid request",
                ErrorCode.VALIDATION_ERROR.value,
                {"errors": [
                    {"loc": list(error.get("loc", [])), "msg": error.get("msg", "")}
                    for error in exc.errors()
                ]}
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), f"HTTP_{exc.status_code}")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all uncaught exceptions"""
        logger.exception(
            "Uncaught exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                "Internal server error",
                ErrorCode.UNKNOWN_ERROR.value,
                {"detail": str(exc) if app.debug else "An unexpected error occurred"}
            )
        )
