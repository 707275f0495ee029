"""Export endpoints for the flat summary and slide-deck models."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from tracker.db.dependencies import get_db_session
from tracker.services.reporting_service import ReportingService

router = APIRouter(prefix="/exports", tags=["exports"])


def _service(db: Session) -> ReportingService:
    return ReportingService(db)


@router.get("/summary")
def export_summary(
    format: str = Query(default="xlsx"),
    year: int | None = Query(default=None),
    quarter: int | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> Response:
    exported = _service(db).export_summary(format_name=format, year=year, quarter=quarter)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.get("/slides/{model_key}")
def export_slide_model(
    model_key: str,
    year: int | None = Query(default=None),
    quarter: int | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    deck = _service(db).slide_deck(model_key=model_key, year=year, quarter=quarter)
    return deck.to_dict()
