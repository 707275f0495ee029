"""Request errors raised by the write path."""

from __future__ import annotations

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """A referenced province, city/municipality, program or record does not exist."""

    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class RestrictedProgramError(HTTPException):
    """Writes against a restricted program are rejected; reads still include it."""

    def __init__(self, program_name: str, *, kind: str) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Cannot write {kind} records for restricted program {program_name}.",
        )
