# slotbook/core/exceptions.py
"""Domain errors raised by the service layer and mapped to HTTP responses"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    """Base class for errors the API reports back to the caller"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SchedulingError):
    """Resource does not exist, or is not visible to the requester"""
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(SchedulingError):
    """Malformed or inconsistent input; nothing was changed"""
    status_code = status.HTTP_400_BAD_REQUEST


class SlotUnavailableError(SchedulingError):
    """Requested time conflicts with a booking or an external busy time"""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Selected time slot is no longer available. Please pick another time."):
        super().__init__(message)


class GatewayDegradedError(SchedulingError):
    """External calendar unreachable or its credentials could not be refreshed"""
    status_code = status.HTTP_502_BAD_GATEWAY


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    correlation_id = getattr(request.state, "correlation_id", "unknown")
    logger.info(
        f"{type(exc).__name__}: {exc.message}",
        extra={"correlation_id": correlation_id, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI):
    """Attach the domain error handler to the application"""
    app.add_exception_handler(SchedulingError, scheduling_error_handler)
