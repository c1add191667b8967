"""
Domain exceptions raised by the service layer.

Endpoints translate these into HTTP errors; the category sync and cleanup
services turn them into user-facing messages instead.
"""

from typing import Optional


class NuachaError(Exception):
    """Base class for service errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(NuachaError):
    status_code = 404


class PermissionDeniedError(NuachaError):
    status_code = 403


class ValidationError(NuachaError):
    status_code = 400


GENERIC_FAILURE_MESSAGE = "Please try again or contact support if the issue persists."


def describe_failure(
    error: BaseException,
    permission_message: str,
    rls_message: Optional[str] = None
) -> str:
    """
    Pick user-facing copy for a failure by looking at the error text.

    Mentions of permission or ownership get ``permission_message``; Row Level
    Security errors get ``rls_message`` when one is given. Everything else gets
    the generic retry message.
    """
    text = getattr(error, "message", None) or str(error)
    if "permission" in text or "ownership" in text:
        return permission_message
    if rls_message and "Row Level Security" in text:
        return rls_message
    return GENERIC_FAILURE_MESSAGE
