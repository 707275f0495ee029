from __future__ import annotations

from collections.abc import Generator
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tracker.db.base import Base
from tracker.db.dependencies import get_db_session
import tracker.models.entities  # noqa: F401
from tracker.main import create_app
from tracker.models.entities import (
    ActivityLog,
    Allocation,
    CityMunicipality,
    Program,
    ProgramStatus,
    Province,
    Utilization,
)

TEST_TABLES = [
    Province.__table__,
    CityMunicipality.__table__,
    Program.__table__,
    Allocation.__table__,
    Utilization.__table__,
    ActivityLog.__table__,
]


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine, tables=TEST_TABLES)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=TEST_TABLES)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def seed_catalog(db: Session) -> dict[str, object]:
    """Two provinces, four cities (one undistricted), three programs (one restricted)."""

    provinces = [
        Province(psgc="0102800000", name="Ilocos Norte", sequence_no=1),
        Province(psgc="0102900000", name="Ilocos Sur", sequence_no=2),
    ]
    cities = [
        CityMunicipality(psgc="0102801000", province_psgc="0102800000", name="Adams", district="1", sequence_no=1),
        CityMunicipality(psgc="0102802000", province_psgc="0102800000", name="Bacarra", district="1", sequence_no=2),
        CityMunicipality(psgc="0102803000", province_psgc="0102800000", name="Badoc", district="2", sequence_no=3),
        CityMunicipality(psgc="0102901000", province_psgc="0102900000", name="Vigan City", district=None, sequence_no=1),
    ]
    programs = [
        Program(name="AICS", status=ProgramStatus.ACTIVE, logo="logos/aics.png", sequence_no=1),
        Program(name="SLP", status=ProgramStatus.ACTIVE, logo=None, sequence_no=2),
        Program(name="Legacy Aid", status=ProgramStatus.RESTRICTED, logo=None, sequence_no=3),
    ]
    db.add_all(provinces)
    db.add_all(cities)
    db.add_all(programs)
    db.commit()
    return {
        "provinces": provinces,
        "cities": cities,
        "programs": {program.name: program for program in programs},
    }


def make_allocation(
    *,
    province: str,
    city: str,
    program_id: int | None,
    target: int,
    fund: str,
    created_at: datetime = datetime(2026, 2, 10, 9, 0, 0),
) -> Allocation:
    return Allocation(
        province_psgc=province,
        city_psgc=city,
        program_id=program_id,
        target=target,
        fund_allocation=Decimal(fund),
        created_at=created_at,
        updated_at=created_at,
    )


def make_utilization(
    *,
    province: str,
    city: str,
    program_id: int | None,
    physical: int,
    fund: str,
    created_at: datetime = datetime(2026, 2, 10, 9, 0, 0),
) -> Utilization:
    return Utilization(
        province_psgc=province,
        city_psgc=city,
        program_id=program_id,
        physical=physical,
        fund_utilized=Decimal(fund),
        created_at=created_at,
        updated_at=created_at,
    )
