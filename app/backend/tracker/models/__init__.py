"""ORM model package."""

from tracker.models.entities import (
    ActivityLog,
    Allocation,
    CityMunicipality,
    FactKind,
    LogAction,
    Program,
    ProgramStatus,
    Province,
    Utilization,
)

__all__ = [
    "ActivityLog",
    "Allocation",
    "CityMunicipality",
    "FactKind",
    "LogAction",
    "Program",
    "ProgramStatus",
    "Province",
    "Utilization",
]
