from __future__ import annotations

from fastapi import HTTPException


class NotFoundError(HTTPException):
    """Referenced company, alert, job or account does not exist."""

    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class InvalidArgument(HTTPException):
    """Caller supplied a malformed or out-of-range argument."""

    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class UpstreamUnavailable(HTTPException):
    """The ledger store could not be reached."""

    def __init__(self, detail: str = "ledger store unavailable"):
        super().__init__(status_code=503, detail=detail)


class RowFailure(ValueError):
    """A single import row could not be parsed, validated or stored."""
