from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from conftest import seed_catalog
from tracker.core.errors import NotFoundError, RestrictedProgramError
from tracker.models.entities import CityMunicipality, FactKind
from tracker.repositories.tracking_repository import TrackingRepository
from tracker.services.key_resolver import KeyResolver


def test_resolves_names_to_codes(db_session: Session) -> None:
    seeded = seed_catalog(db_session)
    resolver = KeyResolver(TrackingRepository(db_session))

    keys = resolver.resolve(province_name="Ilocos Norte", city_name="Badoc", program_name="SLP")

    assert keys.province_psgc == "0102800000"
    assert keys.city_psgc == "0102803000"
    assert keys.program_id == seeded["programs"]["SLP"].id


def test_missing_dimension_raises_not_found(db_session: Session) -> None:
    seed_catalog(db_session)
    resolver = KeyResolver(TrackingRepository(db_session))

    with pytest.raises(NotFoundError) as program_error:
        resolver.resolve(province_name="Ilocos Norte", city_name="Badoc", program_name="Nope")
    assert program_error.value.status_code == 404
    assert "Program not found" in program_error.value.detail

    with pytest.raises(NotFoundError) as province_error:
        resolver.resolve(province_name="Nowhere", city_name="Badoc", program_name="SLP")
    assert "Province not found" in province_error.value.detail

    with pytest.raises(NotFoundError) as city_error:
        resolver.resolve(province_name="Ilocos Norte", city_name="Atlantis", program_name="SLP")
    assert "City/municipality not found" in city_error.value.detail


def test_city_must_belong_to_the_named_province(db_session: Session) -> None:
    seed_catalog(db_session)
    resolver = KeyResolver(TrackingRepository(db_session))

    with pytest.raises(NotFoundError) as error:
        resolver.resolve(province_name="Ilocos Sur", city_name="Adams", program_name="SLP")

    assert error.value.detail == "City/municipality not found in Ilocos Sur: Adams."


def test_same_city_name_resolves_within_its_province(db_session: Session) -> None:
    seed_catalog(db_session)
    repo = TrackingRepository(db_session)
    repo.add_city(
        CityMunicipality(psgc="0102902000", province_psgc="0102900000", name="Badoc", district=None, sequence_no=2)
    )
    resolver = KeyResolver(repo)

    north = resolver.resolve(province_name="Ilocos Norte", city_name="Badoc", program_name="SLP")
    south = resolver.resolve(province_name="Ilocos Sur", city_name="Badoc", program_name="SLP")

    assert (north.province_psgc, north.city_psgc) == ("0102800000", "0102803000")
    assert (south.province_psgc, south.city_psgc) == ("0102900000", "0102902000")


def test_lookup_is_exact_without_case_folding(db_session: Session) -> None:
    seed_catalog(db_session)
    resolver = KeyResolver(TrackingRepository(db_session))

    with pytest.raises(NotFoundError):
        resolver.resolve(province_name="ilocos norte", city_name="Badoc", program_name="SLP")


def test_restricted_program_is_rejected_for_writes(db_session: Session) -> None:
    seed_catalog(db_session)
    resolver = KeyResolver(TrackingRepository(db_session))

    with pytest.raises(RestrictedProgramError) as error:
        resolver.resolve(
            province_name="Ilocos Norte",
            city_name="Badoc",
            program_name="Legacy Aid",
            kind=FactKind.UTILIZATION,
        )

    assert error.value.status_code == 422
    assert error.value.detail == "Cannot write utilization records for restricted program Legacy Aid."
