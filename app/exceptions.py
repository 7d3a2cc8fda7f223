from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class MedSyncError(Exception):
    """Base class for errors raised below the HTTP layer"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PersistenceUnavailable(MedSyncError):
    """The storage medium could not be read or written"""


class ServiceUnavailable(MedSyncError):
    """The external AI service failed, returned nothing, or returned garbage"""


def create_error_response(error_message: str) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail)
    )

async def persistence_unavailable_handler(request: Request, exc: PersistenceUnavailable) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content=create_error_response(exc.message)
    )

async def service_unavailable_handler(request: Request, exc: ServiceUnavailable) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content=create_error_response(exc.message)
    )
