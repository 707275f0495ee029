"""Reporting endpoints over the province/district/city/program tree."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tracker.db.dependencies import get_db_session
from tracker.services.reporting_service import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])


def _service(db: Session) -> ReportingService:
    return ReportingService(db)


@router.get("/summary")
def report_summary(
    year: int | None = Query(default=None),
    quarter: int | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).summary(year=year, quarter=quarter)


@router.get("/summary-rows")
def report_summary_rows(
    year: int | None = Query(default=None),
    quarter: int | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).summary_rows(year=year, quarter=quarter)


@router.get("/programs")
def report_programs(
    year: int | None = Query(default=None),
    quarter: int | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _service(db).program_rollups(year=year, quarter=quarter)
