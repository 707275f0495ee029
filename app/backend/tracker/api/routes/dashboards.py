"""Dashboard endpoint: chart series and period cards."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tracker.db.dependencies import get_db_session
from tracker.services.reporting_service import ReportingService

router = APIRouter(tags=["dashboards"])


@router.get("/dashboard")
def get_dashboard(
    year: int | None = Query(default=None),
    quarter: int | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return ReportingService(db).dashboard(year=year, quarter=quarter)
