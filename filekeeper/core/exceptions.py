"""
Custom exceptions and global exception handlers.

Every failure the hierarchy engine reports is one of the AppException
subclasses below; storage-level errors are re-classified before they reach
a router.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = None,
    ):
        self.message = message
        self.status_code = status_code
        self.detail = detail or message
        super().__init__(self.message)


class ValidationError(AppException):
    """Malformed input (name length, missing required field)."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class UnauthorizedError(AppException):
    """Authentication required."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(AppException):
    """Access denied."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class OwnershipError(ForbiddenError):
    """The acting user does not own the target folder or record."""

    def __init__(self, message: str = "You do not own this item"):
        super().__init__(message)


class ConflictError(AppException):
    """Request conflicts with the current state of the hierarchy."""

    def __init__(self, message: str = "Conflicting request"):
        super().__init__(message, status.HTTP_409_CONFLICT)


class ProtectedFolderError(ConflictError):
    """Attempted mutation of a system folder."""

    def __init__(self, message: str = "System folders cannot be changed"):
        super().__init__(message)


class CycleError(ConflictError):
    """Reparent would make a folder its own ancestor."""

    def __init__(self, message: str = "A folder cannot be moved inside itself"):
        super().__init__(message)


class AlreadyTrashedError(ConflictError):
    """Item is already inside Trash."""

    def __init__(self, message: str = "Item is already in the trash"):
        super().__init__(message)


class NotInTrashError(ConflictError):
    """Restore or permanent delete requested for an item outside Trash."""

    def __init__(self, message: str = "Item is not in the trash"):
        super().__init__(message)


class UnknownVirtualFolderError(NotFoundError):
    """Name is not one of the virtual folders."""

    def __init__(self, name: str):
        super().__init__(f"Unknown virtual folder: {name}")
        self.name = name


class InvariantViolationError(AppException):
    """Internal consistency failure, e.g. a system folder missing after bootstrap."""

    def __init__(self, message: str = "Folder hierarchy is inconsistent"):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


class PartialDeleteError(AppException):
    """A permanent delete stopped part-way; re-invoking it resumes the delete."""

    def __init__(
        self,
        message: str = "Delete was interrupted, retry to finish",
        folders_deleted: int = 0,
        records_deleted: int = 0,
    ):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.folders_deleted = folders_deleted
        self.records_deleted = records_deleted


class StoreUnavailableError(AppException):
    """Database error outside any multi-step operation."""

    def __init__(self, message: str = "Storage is temporarily unavailable"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions."""
    if isinstance(exc, InvariantViolationError):
        logger.error(f"Invariant violation on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "message": exc.message},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle validation errors with user-friendly messages."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        msg = error["msg"]
        errors.append(f"{field}: {msg}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Request body is invalid",
            "errors": errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Server error. Please try again later.",
        },
    )
