"""Activity log endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.db.dependencies import get_db_session
from tracker.services.fact_service import FactService

router = APIRouter(tags=["activity"])


@router.get("/activity-log")
def list_activity_log(db: Session = Depends(get_db_session)) -> dict[str, object]:
    return {"logs": FactService(db).list_activity()}
