"""Dimension catalog endpoint used by the write forms."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.db.dependencies import get_db_session
from tracker.services.reporting_service import ReportingService

router = APIRouter(tags=["catalog"])


@router.get("/catalog")
def get_catalog(db: Session = Depends(get_db_session)) -> dict[str, object]:
    return ReportingService(db).catalog()
