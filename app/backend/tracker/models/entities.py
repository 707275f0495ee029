"""ORM entities for the allocation tracker schema."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from tracker.db.base import Base


class ProgramStatus(str, enum.Enum):
    ACTIVE = "active"
    RESTRICTED = "restricted"


class FactKind(str, enum.Enum):
    ALLOCATION = "allocation"
    UTILIZATION = "utilization"


class LogAction(str, enum.Enum):
    ADDED = "added"
    EDITED = "edited"


class Province(Base):
    __tablename__ = "provinces"

    psgc: Mapped[str] = mapped_column(String(10), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    sequence_no: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CityMunicipality(Base):
    __tablename__ = "city_municipalities"
    __table_args__ = (Index("ix_city_municipalities_province_psgc", "province_psgc"),)

    psgc: Mapped[str] = mapped_column(String(10), primary_key=True)
    province_psgc: Mapped[str] = mapped_column(String(10), ForeignKey("provinces.psgc"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Raw congressional district value; blank/null for undistricted cities.
    district: Mapped[str | None] = mapped_column(String(16), nullable=True)
    sequence_no: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Program(Base):
    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    status: Mapped[ProgramStatus] = mapped_column(
        SQLEnum(
            ProgramStatus,
            name="program_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=ProgramStatus.ACTIVE,
    )
    logo: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sequence_no: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Allocation(Base):
    __tablename__ = "allocations"
    __table_args__ = (
        CheckConstraint("target >= 0", name="ck_allocations_target_non_negative"),
        CheckConstraint("fund_allocation >= 0", name="ck_allocations_fund_allocation_non_negative"),
        Index("ix_allocations_city_psgc", "city_psgc"),
        Index("ix_allocations_program_id", "program_id"),
        Index("ix_allocations_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    province_psgc: Mapped[str] = mapped_column(String(10), ForeignKey("provinces.psgc"), nullable=False)
    city_psgc: Mapped[str] = mapped_column(String(10), ForeignKey("city_municipalities.psgc"), nullable=False)
    program_id: Mapped[int | None] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("programs.id", ondelete="SET NULL"),
        nullable=True,
    )
    target: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fund_allocation: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Utilization(Base):
    __tablename__ = "utilizations"
    __table_args__ = (
        CheckConstraint("physical >= 0", name="ck_utilizations_physical_non_negative"),
        CheckConstraint("fund_utilized >= 0", name="ck_utilizations_fund_utilized_non_negative"),
        Index("ix_utilizations_city_psgc", "city_psgc"),
        Index("ix_utilizations_program_id", "program_id"),
        Index("ix_utilizations_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    province_psgc: Mapped[str] = mapped_column(String(10), ForeignKey("provinces.psgc"), nullable=False)
    city_psgc: Mapped[str] = mapped_column(String(10), ForeignKey("city_municipalities.psgc"), nullable=False)
    program_id: Mapped[int | None] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        ForeignKey("programs.id", ondelete="SET NULL"),
        nullable=True,
    )
    physical: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fund_utilized: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class ActivityLog(Base):
    """One write against a fact table, tagged with the fact kind."""

    __tablename__ = "activity_logs"
    __table_args__ = (
        Index("ix_activity_logs_kind_record", "kind", "record_id"),
        Index("ix_activity_logs_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    kind: Mapped[FactKind] = mapped_column(
        SQLEnum(
            FactKind,
            name="fact_kind",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    action: Mapped[LogAction] = mapped_column(
        SQLEnum(
            LogAction,
            name="log_action",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    record_id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
