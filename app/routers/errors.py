from fastapi import HTTPException

from app.exceptions import (
    DomainError,
    InvalidArgumentError,
    NotFoundError,
    UnauthorizedError,
)

INTERNAL_ERROR = "Internal server error"


def to_http_exception(error: DomainError) -> HTTPException:
    """Map a domain error to the HTTP status of its category."""
    if isinstance(error, InvalidArgumentError):
        detail = {"message": error.message}
        if error.field:
            detail["field"] = error.field
        return HTTPException(status_code=400, detail=detail)
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, UnauthorizedError):
        return HTTPException(status_code=401, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)
