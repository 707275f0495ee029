"""Utilization record endpoints."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from tracker.db.dependencies import get_db_session
from tracker.services.fact_service import FactService, UtilizationWriteData
from tracker.services.reporting_service import ReportingService

router = APIRouter(prefix="/utilizations", tags=["utilizations"])


class UtilizationPayload(BaseModel):
    province: str = Field(min_length=1, max_length=255)
    city_municipality: str = Field(min_length=1, max_length=255)
    program: str = Field(min_length=1, max_length=100)
    physical: int = Field(ge=0)
    fund_utilized: Decimal = Field(ge=0, max_digits=15, decimal_places=2)


def _write_data(payload: UtilizationPayload) -> UtilizationWriteData:
    return UtilizationWriteData(
        province=payload.province,
        city_municipality=payload.city_municipality,
        program=payload.program,
        physical=payload.physical,
        fund_utilized=payload.fund_utilized,
    )


@router.get("")
def list_utilizations(db: Session = Depends(get_db_session)) -> dict[str, object]:
    return ReportingService(db).list_utilizations()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_utilization(
    payload: UtilizationPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    utilization = FactService(db).create_utilization(_write_data(payload))
    return ReportingService(db).utilization_record(utilization)


@router.put("/{utilization_id}")
def update_utilization(
    utilization_id: int,
    payload: UtilizationPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    utilization = FactService(db).update_utilization(utilization_id, _write_data(payload))
    return ReportingService(db).utilization_record(utilization)
