"""Repository helpers for the dimension catalog and fact tables."""

from __future__ import annotations

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from tracker.models.entities import (
    ActivityLog,
    Allocation,
    CityMunicipality,
    Program,
    Province,
    Utilization,
)
from tracker.services.periods import PeriodFilter


class TrackingRepository:
    """Persistence operations used by the write path and report builders."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Dimension catalog ----------
    def list_provinces(self) -> list[Province]:
        return self.db.scalars(
            select(Province).order_by(Province.sequence_no.asc(), Province.psgc.asc())
        ).all()

    def list_cities_with_district(self) -> list[CityMunicipality]:
        return self.db.scalars(
            select(CityMunicipality).order_by(
                CityMunicipality.province_psgc.asc(),
                CityMunicipality.sequence_no.asc(),
                CityMunicipality.psgc.asc(),
            )
        ).all()

    def list_programs(self) -> list[Program]:
        return self.db.scalars(select(Program).order_by(Program.sequence_no.asc(), Program.id.asc())).all()

    def get_province_by_name(self, name: str) -> Province | None:
        return self.db.scalar(select(Province).where(Province.name == name))

    def get_city_by_name(self, name: str, province_psgc: str) -> CityMunicipality | None:
        return self.db.scalar(
            select(CityMunicipality).where(
                and_(
                    CityMunicipality.name == name,
                    CityMunicipality.province_psgc == province_psgc,
                )
            )
        )

    def get_program_by_name(self, name: str) -> Program | None:
        return self.db.scalar(select(Program).where(Program.name == name))

    def add_province(self, province: Province) -> Province:
        self.db.add(province)
        self.db.flush()
        return province

    def add_city(self, city: CityMunicipality) -> CityMunicipality:
        self.db.add(city)
        self.db.flush()
        return city

    def add_program(self, program: Program) -> Program:
        self.db.add(program)
        self.db.flush()
        return program

    # ---------- Facts ----------
    def list_allocations(self, period: PeriodFilter | None = None) -> list[Allocation]:
        query = select(Allocation)
        if period is not None:
            query = query.where(
                and_(
                    Allocation.created_at >= period.start,
                    Allocation.created_at < period.end,
                )
            )
        return self.db.scalars(query.order_by(Allocation.created_at.asc(), Allocation.id.asc())).all()

    def list_utilizations(self, period: PeriodFilter | None = None) -> list[Utilization]:
        query = select(Utilization)
        if period is not None:
            query = query.where(
                and_(
                    Utilization.created_at >= period.start,
                    Utilization.created_at < period.end,
                )
            )
        return self.db.scalars(query.order_by(Utilization.created_at.asc(), Utilization.id.asc())).all()

    def get_allocation(self, allocation_id: int) -> Allocation | None:
        return self.db.scalar(select(Allocation).where(Allocation.id == allocation_id))

    def get_utilization(self, utilization_id: int) -> Utilization | None:
        return self.db.scalar(select(Utilization).where(Utilization.id == utilization_id))

    def add_allocation(self, allocation: Allocation) -> Allocation:
        self.db.add(allocation)
        self.db.flush()
        return allocation

    def add_utilization(self, utilization: Utilization) -> Utilization:
        self.db.add(utilization)
        self.db.flush()
        return utilization

    # ---------- Activity log ----------
    def add_activity(self, entry: ActivityLog) -> ActivityLog:
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_activity(self) -> list[ActivityLog]:
        return self.db.scalars(
            select(ActivityLog).order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        ).all()
