"""Domain error types for the contact status and timeline services.

Each error carries the HTTP status it maps to and a message that is safe to
show to end users. Storage-level details stay in the logs and the exception
chain (``raise ... from exc``), never in the rendered response.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

GENERIC_RETRY_MESSAGE = "Something went wrong. Please try again."


class CRMError(Exception):
    status_code = 500
    message = GENERIC_RETRY_MESSAGE
    retryable = False

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotAuthorizedError(CRMError):
    """Caller lacks the admin capability required for the operation."""

    status_code = 403
    message = "Admin access required"


class InvalidTransitionError(CRMError):
    """Requested status change is not allowed from the contact's current mode."""

    status_code = 409
    message = "Switch the contact to manual mode before setting its status"


class NotFoundError(CRMError):
    status_code = 404
    message = "Contact not found"


class UpstreamFailureError(CRMError):
    """A write or procedure call failed at the storage layer."""

    status_code = 503
    retryable = True


class PartialAggregationFailureError(CRMError):
    """One of the timeline sources could not be read; no partial list is returned."""

    status_code = 503
    retryable = True


async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "retryable": exc.retryable},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CRMError, crm_error_handler)
