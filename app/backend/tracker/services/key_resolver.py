"""Resolve user-facing names on the write path into canonical catalog codes."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tracker.core.errors import NotFoundError, RestrictedProgramError
from tracker.models.entities import FactKind, ProgramStatus
from tracker.repositories.tracking_repository import TrackingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedKeys:
    province_psgc: str
    city_psgc: str
    program_id: int


class KeyResolver:
    """Exact-name lookups against the dimension catalog.

    Only the write path resolves names. Report builders work on codes that
    are already stored on the facts.
    """

    def __init__(self, repo: TrackingRepository) -> None:
        self.repo = repo

    def resolve(
        self,
        *,
        province_name: str,
        city_name: str,
        program_name: str,
        kind: FactKind = FactKind.ALLOCATION,
    ) -> ResolvedKeys:
        program = self.repo.get_program_by_name(program_name)
        if program is None:
            logger.info("Program not found: %s", program_name)
            raise NotFoundError(f"Program not found: {program_name}.")
        if program.status is ProgramStatus.RESTRICTED:
            logger.info("Rejected %s write for restricted program %s", kind.value, program.name)
            raise RestrictedProgramError(program.name, kind=kind.value)

        province = self.repo.get_province_by_name(province_name)
        if province is None:
            raise NotFoundError(f"Province not found: {province_name}.")
        city = self.repo.get_city_by_name(city_name, province.psgc)
        if city is None:
            raise NotFoundError(f"City/municipality not found in {province.name}: {city_name}.")

        return ResolvedKeys(province_psgc=province.psgc, city_psgc=city.psgc, program_id=program.id)
