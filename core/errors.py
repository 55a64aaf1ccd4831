# core/errors.py
"""
Error taxonomy shared by the fleet service areas.

Views translate these into HTTP responses with to_http_exception():
ValidationError -> 400, NotFoundError -> 404, PersistenceError and
PartialAuditFailure -> 500.
"""
from fastapi import HTTPException, status


class FleetServiceError(Exception):
    """Base class for errors surfaced to callers."""
    pass


class ValidationError(FleetServiceError):
    """Missing, blank or wrong-typed input. Raised before any I/O."""
    pass


class NotFoundError(FleetServiceError):
    """An id did not resolve to a row."""
    pass


class PersistenceError(FleetServiceError):
    """The store call itself failed. Message is the driver's, verbatim."""
    pass


class PartialAuditFailure(FleetServiceError):
    """
    The tractor write was committed but the history insert failed.

    The tractor row is not rolled back, so the audit trail is behind the
    record until someone reconciles it. ``failed_field`` is ``"field:newValue"``
    when exactly one change was being written, otherwise None.
    """

    def __init__(self, message: str, failed_field: str | None = None):
        super().__init__(message)
        self.failed_field = failed_field


def to_http_exception(exc: FleetServiceError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PartialAuditFailure):
        # Distinct from a plain store failure: the record itself was saved
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "partial_audit_failure",
                "message": str(exc),
                "failedField": exc.failed_field,
            },
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
