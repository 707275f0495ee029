"""Allocation record endpoints."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from tracker.db.dependencies import get_db_session
from tracker.services.fact_service import AllocationWriteData, FactService
from tracker.services.reporting_service import ReportingService

router = APIRouter(prefix="/allocations", tags=["allocations"])


class AllocationPayload(BaseModel):
    province: str = Field(min_length=1, max_length=255)
    city_municipality: str = Field(min_length=1, max_length=255)
    program: str = Field(min_length=1, max_length=100)
    target: int = Field(ge=0)
    fund_allocation: Decimal = Field(ge=0, max_digits=15, decimal_places=2)


def _write_data(payload: AllocationPayload) -> AllocationWriteData:
    return AllocationWriteData(
        province=payload.province,
        city_municipality=payload.city_municipality,
        program=payload.program,
        target=payload.target,
        fund_allocation=payload.fund_allocation,
    )


@router.get("")
def list_allocations(db: Session = Depends(get_db_session)) -> dict[str, object]:
    return ReportingService(db).list_allocations()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_allocation(
    payload: AllocationPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    allocation = FactService(db).create_allocation(_write_data(payload))
    return ReportingService(db).allocation_record(allocation)


@router.put("/{allocation_id}")
def update_allocation(
    allocation_id: int,
    payload: AllocationPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    allocation = FactService(db).update_allocation(allocation_id, _write_data(payload))
    return ReportingService(db).allocation_record(allocation)
