from __future__ import annotations

from fastapi import HTTPException

from ..errors import DuplicateKeyError, NotFoundError, ValidationError
from ..logs import LogContext


def http_error(e: Exception, log: LogContext | None = None) -> HTTPException:
    """Write the failure to the operation log and map it to an HTTP status."""
    if log is not None:
        log.write("ERROR", str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DuplicateKeyError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (ValidationError, ValueError)):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
