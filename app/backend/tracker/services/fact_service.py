"""Write path for allocation and utilization facts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracker.core.errors import NotFoundError
from tracker.models.entities import ActivityLog, Allocation, FactKind, LogAction, Utilization
from tracker.repositories.tracking_repository import TrackingRepository
from tracker.services.key_resolver import KeyResolver, ResolvedKeys
from tracker.services.labels import NOT_APPLICABLE, CatalogLabels

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AllocationWriteData:
    province: str
    city_municipality: str
    program: str
    target: int
    fund_allocation: Decimal


@dataclass(slots=True)
class UtilizationWriteData:
    province: str
    city_municipality: str
    program: str
    physical: int
    fund_utilized: Decimal


class FactService:
    """Creates and edits facts, one activity-log row per write."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = TrackingRepository(db)
        self.resolver = KeyResolver(self.repo)

    @staticmethod
    def _validate_non_negative(value: int | Decimal, field_name: str) -> None:
        if value < 0:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{field_name} must be greater than or equal to 0.",
            )

    def _resolve(self, *, province: str, city_municipality: str, program: str, kind: FactKind) -> ResolvedKeys:
        return self.resolver.resolve(
            province_name=province,
            city_name=city_municipality,
            program_name=program,
            kind=kind,
        )

    def _log(self, *, kind: FactKind, action: LogAction, record_id: int) -> None:
        self.repo.add_activity(
            ActivityLog(kind=kind, action=action, record_id=record_id, created_at=datetime.utcnow())
        )

    def _commit(self, detail: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail) from exc

    # ---------- Allocations ----------
    def create_allocation(self, data: AllocationWriteData) -> Allocation:
        self._validate_non_negative(data.target, "target")
        self._validate_non_negative(data.fund_allocation, "fund_allocation")
        keys = self._resolve(
            province=data.province,
            city_municipality=data.city_municipality,
            program=data.program,
            kind=FactKind.ALLOCATION,
        )

        now = datetime.utcnow()
        allocation = Allocation(
            province_psgc=keys.province_psgc,
            city_psgc=keys.city_psgc,
            program_id=keys.program_id,
            target=data.target,
            fund_allocation=data.fund_allocation,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_allocation(allocation)
        self._log(kind=FactKind.ALLOCATION, action=LogAction.ADDED, record_id=allocation.id)
        self._commit("Allocation could not be saved.")

        self.db.refresh(allocation)
        logger.info("Allocation %s added for city %s", allocation.id, allocation.city_psgc)
        return allocation

    def update_allocation(self, allocation_id: int, data: AllocationWriteData) -> Allocation:
        allocation = self.repo.get_allocation(allocation_id)
        if allocation is None:
            raise NotFoundError("Allocation not found.")

        self._validate_non_negative(data.target, "target")
        self._validate_non_negative(data.fund_allocation, "fund_allocation")
        keys = self._resolve(
            province=data.province,
            city_municipality=data.city_municipality,
            program=data.program,
            kind=FactKind.ALLOCATION,
        )

        allocation.province_psgc = keys.province_psgc
        allocation.city_psgc = keys.city_psgc
        allocation.program_id = keys.program_id
        allocation.target = data.target
        allocation.fund_allocation = data.fund_allocation
        allocation.updated_at = datetime.utcnow()
        self._log(kind=FactKind.ALLOCATION, action=LogAction.EDITED, record_id=allocation.id)
        self._commit("Allocation could not be saved.")

        self.db.refresh(allocation)
        logger.info("Allocation %s edited", allocation.id)
        return allocation

    # ---------- Utilizations ----------
    def create_utilization(self, data: UtilizationWriteData) -> Utilization:
        self._validate_non_negative(data.physical, "physical")
        self._validate_non_negative(data.fund_utilized, "fund_utilized")
        keys = self._resolve(
            province=data.province,
            city_municipality=data.city_municipality,
            program=data.program,
            kind=FactKind.UTILIZATION,
        )

        now = datetime.utcnow()
        utilization = Utilization(
            province_psgc=keys.province_psgc,
            city_psgc=keys.city_psgc,
            program_id=keys.program_id,
            physical=data.physical,
            fund_utilized=data.fund_utilized,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_utilization(utilization)
        self._log(kind=FactKind.UTILIZATION, action=LogAction.ADDED, record_id=utilization.id)
        self._commit("Utilization could not be saved.")

        self.db.refresh(utilization)
        logger.info("Utilization %s added for city %s", utilization.id, utilization.city_psgc)
        return utilization

    def update_utilization(self, utilization_id: int, data: UtilizationWriteData) -> Utilization:
        utilization = self.repo.get_utilization(utilization_id)
        if utilization is None:
            raise NotFoundError("Utilization not found.")

        self._validate_non_negative(data.physical, "physical")
        self._validate_non_negative(data.fund_utilized, "fund_utilized")
        keys = self._resolve(
            province=data.province,
            city_municipality=data.city_municipality,
            program=data.program,
            kind=FactKind.UTILIZATION,
        )

        utilization.province_psgc = keys.province_psgc
        utilization.city_psgc = keys.city_psgc
        utilization.program_id = keys.program_id
        utilization.physical = data.physical
        utilization.fund_utilized = data.fund_utilized
        utilization.updated_at = datetime.utcnow()
        self._log(kind=FactKind.UTILIZATION, action=LogAction.EDITED, record_id=utilization.id)
        self._commit("Utilization could not be saved.")

        self.db.refresh(utilization)
        logger.info("Utilization %s edited", utilization.id)
        return utilization

    # ---------- Activity log ----------
    def list_activity(self) -> list[dict[str, object]]:
        labels = CatalogLabels(
            self.repo.list_provinces(),
            self.repo.list_cities_with_district(),
            self.repo.list_programs(),
        )
        rows: list[dict[str, object]] = []
        for entry in self.repo.list_activity():
            if entry.kind is FactKind.ALLOCATION:
                record = self.repo.get_allocation(entry.record_id)
            else:
                record = self.repo.get_utilization(entry.record_id)

            if record is None:
                province = city = program = NOT_APPLICABLE
            else:
                province = labels.province_name(record.province_psgc)
                city = labels.city_name(record.city_psgc)
                program = labels.program_name(record.program_id)

            rows.append(
                {
                    "id": entry.id,
                    "kind": entry.kind.value,
                    "action": entry.action.value,
                    "record_id": entry.record_id,
                    "created_at": entry.created_at.isoformat(),
                    "province": province,
                    "city_municipality": city,
                    "program": program,
                    "description": f"{city}, {province}",
                }
            )
        return rows
