"""Display names for catalog codes, with sentinels for dangling references."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tracker.models.entities import CityMunicipality, Program, Province

logger = logging.getLogger(__name__)

UNKNOWN_PROVINCE = "Unknown Province"
UNKNOWN_CITY = "Unknown City/Municipality"
UNKNOWN_PROGRAM = "Unknown Program"
NOT_APPLICABLE = "N/A"


class CatalogLabels:
    """Code → name lookups over one catalog snapshot.

    A null code renders as ``N/A``; a code missing from the snapshot renders
    as the matching ``Unknown ...`` sentinel and is logged once.
    """

    def __init__(
        self,
        provinces: Iterable[Province],
        cities: Iterable[CityMunicipality],
        programs: Iterable[Program],
    ) -> None:
        self.provinces = {row.psgc: row for row in provinces}
        self.cities = {row.psgc: row for row in cities}
        self.programs = {row.id: row for row in programs}
        self._reported: set[tuple[str, object]] = set()

    def _report_dangling(self, dimension: str, code: object) -> None:
        key = (dimension, code)
        if key in self._reported:
            return
        self._reported.add(key)
        logger.warning("Fact references %s %r missing from catalog snapshot", dimension, code)

    def province_name(self, psgc: str | None) -> str:
        if not psgc:
            return NOT_APPLICABLE
        province = self.provinces.get(psgc)
        if province is None:
            self._report_dangling("province", psgc)
            return UNKNOWN_PROVINCE
        return province.name

    def city_name(self, psgc: str | None) -> str:
        if not psgc:
            return NOT_APPLICABLE
        city = self.cities.get(psgc)
        if city is None:
            self._report_dangling("city", psgc)
            return UNKNOWN_CITY
        return city.name

    def program_name(self, program_id: int | None) -> str:
        if program_id is None:
            return NOT_APPLICABLE
        program = self.programs.get(program_id)
        if program is None:
            self._report_dangling("program", program_id)
            return UNKNOWN_PROGRAM
        return program.name

    def program_logo(self, program_id: int | None) -> str | None:
        program = self.programs.get(program_id) if program_id is not None else None
        return program.logo if program is not None else None

    def has_province(self, psgc: str | None) -> bool:
        return psgc in self.provinces

    def has_city(self, psgc: str | None) -> bool:
        return psgc in self.cities

    def has_program(self, program_id: int | None) -> bool:
        return program_id in self.programs
