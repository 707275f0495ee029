"""Hierarchical aggregation of allocation and utilization facts.

``build_tree`` folds two independently keyed fact lists against the province,
city/municipality and program catalog into an immutable report tree::

    Province -> District -> City/Municipality -> Program

plus a per-program roll-up across all geography and grand totals. The
function is pure: every call re-reads its inputs and returns new frozen
nodes, so it can run for independent requests in parallel.

Policies applied here:

* A missing fact side is zero, never null (``merge_fact``).
* Every catalog province and city appears, with zero totals if it has no
  facts.
* District buckets keep first-seen order of the catalog city list; a blank
  or null district collapses into one bucket keyed ``None``.
* Facts pointing outside the catalog keep their numeric contribution. They
  are placed under sentinel nodes (see ``tracker.services.labels``).
* No rounding happens during aggregation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from decimal import Decimal
from functools import reduce
from itertools import chain
from typing import TypeVar

from tracker.models.entities import Allocation, CityMunicipality, Program, Province, Utilization
from tracker.services.labels import UNKNOWN_PROGRAM, UNKNOWN_PROVINCE, CatalogLabels
from tracker.services.periods import PeriodFilter

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def q2(value: Decimal) -> Decimal:
    return Decimal(value).quantize(Q2)


@dataclass(frozen=True, slots=True)
class Totals:
    target: int = 0
    allocation: Decimal = ZERO
    physical: int = 0
    utilization: Decimal = ZERO

    def __add__(self, other: Totals) -> Totals:
        return Totals(
            target=self.target + other.target,
            allocation=self.allocation + other.allocation,
            physical=self.physical + other.physical,
            utilization=self.utilization + other.utilization,
        )

    @classmethod
    def from_allocations(cls, rows: Iterable[Allocation]) -> Totals:
        return sum_totals(cls(target=row.target, allocation=Decimal(row.fund_allocation)) for row in rows)

    @classmethod
    def from_utilizations(cls, rows: Iterable[Utilization]) -> Totals:
        return sum_totals(cls(physical=row.physical, utilization=Decimal(row.fund_utilized)) for row in rows)


def sum_totals(items: Iterable[Totals]) -> Totals:
    return reduce(Totals.__add__, items, Totals())


def merge_fact(allocation_side: Totals | None, utilization_side: Totals | None) -> Totals:
    """Combine the allocation and utilization sides of one key.

    This is the single zero-default rule of the engine: whichever side has no
    matching fact contributes zeros.
    """

    allocated = allocation_side if allocation_side is not None else Totals()
    utilized = utilization_side if utilization_side is not None else Totals()
    return Totals(
        target=allocated.target,
        allocation=allocated.allocation,
        physical=utilized.physical,
        utilization=utilized.utilization,
    )


@dataclass(frozen=True, slots=True)
class ProgramNode:
    program_id: int | None
    name: str
    logo: str | None
    totals: Totals


@dataclass(frozen=True, slots=True)
class CityNode:
    psgc: str
    name: str
    district: str | None
    totals: Totals
    programs: tuple[ProgramNode, ...]
    in_catalog: bool = True

    def program(self, program_id: int | None) -> ProgramNode | None:
        for node in self.programs:
            if node.program_id == program_id:
                return node
        return None

    def program_totals(self, program_id: int | None) -> Totals:
        node = self.program(program_id)
        return node.totals if node is not None else Totals()


@dataclass(frozen=True, slots=True)
class DistrictNode:
    district: str | None
    totals: Totals
    cities: tuple[CityNode, ...]


@dataclass(frozen=True, slots=True)
class ProvinceNode:
    psgc: str | None
    name: str
    totals: Totals
    districts: tuple[DistrictNode, ...]
    in_catalog: bool = True

    def iter_cities(self) -> Iterator[CityNode]:
        for district in self.districts:
            yield from district.cities


@dataclass(frozen=True, slots=True)
class ProgramCityNode:
    city_psgc: str
    city_name: str
    province_psgc: str | None
    province_name: str
    totals: Totals


@dataclass(frozen=True, slots=True)
class ProgramRollup:
    program_id: int | None
    name: str
    logo: str | None
    status: str | None
    totals: Totals
    cities: tuple[ProgramCityNode, ...]


@dataclass(frozen=True, slots=True)
class ReportTree:
    provinces: tuple[ProvinceNode, ...]
    programs: tuple[ProgramRollup, ...]
    totals: Totals
    period: PeriodFilter | None = None

    def program_rollup(self, program_id: int | None) -> ProgramRollup | None:
        for rollup in self.programs:
            if rollup.program_id == program_id:
                return rollup
        return None


def _group_by(rows: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    grouped: dict[K, list[T]] = {}
    for row in rows:
        grouped.setdefault(key(row), []).append(row)
    return grouped


def _district_key(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None


def _side(rows: Sequence | None, builder: Callable[[Sequence], Totals]) -> Totals | None:
    if not rows:
        return None
    return builder(rows)


def _ordered_program_ids(
    program_ids: Iterable[int | None],
    catalog_order: dict[int, int],
) -> list[int | None]:
    """Catalog order first, then programs missing from the catalog as first seen."""

    seen = list(dict.fromkeys(program_ids))
    known = sorted((pid for pid in seen if pid in catalog_order), key=lambda pid: catalog_order[pid])
    unknown = [pid for pid in seen if pid not in catalog_order]
    return known + unknown


def _program_label(labels: CatalogLabels, program_id: int | None) -> str:
    if program_id is None:
        return UNKNOWN_PROGRAM
    return labels.program_name(program_id)


def _build_city(
    *,
    psgc: str,
    name: str,
    district: str | None,
    allocations: Sequence[Allocation],
    utilizations: Sequence[Utilization],
    labels: CatalogLabels,
    catalog_order: dict[int, int],
    in_catalog: bool,
) -> CityNode:
    allocations_by_program = _group_by(allocations, lambda row: row.program_id)
    utilizations_by_program = _group_by(utilizations, lambda row: row.program_id)
    program_ids = _ordered_program_ids(
        chain(allocations_by_program.keys(), utilizations_by_program.keys()),
        catalog_order,
    )
    programs = tuple(
        ProgramNode(
            program_id=program_id,
            name=_program_label(labels, program_id),
            logo=labels.program_logo(program_id),
            totals=merge_fact(
                _side(allocations_by_program.get(program_id), Totals.from_allocations),
                _side(utilizations_by_program.get(program_id), Totals.from_utilizations),
            ),
        )
        for program_id in program_ids
    )
    return CityNode(
        psgc=psgc,
        name=name,
        district=district,
        totals=sum_totals(node.totals for node in programs),
        programs=programs,
        in_catalog=in_catalog,
    )


def _build_districts(cities: Sequence[CityNode]) -> tuple[DistrictNode, ...]:
    by_district = _group_by(cities, lambda city: city.district)
    return tuple(
        DistrictNode(
            district=district,
            totals=sum_totals(city.totals for city in members),
            cities=tuple(members),
        )
        for district, members in by_district.items()
    )


def _build_province(
    *,
    psgc: str | None,
    name: str,
    city_nodes: Sequence[CityNode],
    in_catalog: bool = True,
) -> ProvinceNode:
    districts = _build_districts(city_nodes)
    return ProvinceNode(
        psgc=psgc,
        name=name,
        totals=sum_totals(district.totals for district in districts),
        districts=districts,
        in_catalog=in_catalog,
    )


def _build_program_rollups(
    *,
    allocations: Sequence[Allocation],
    utilizations: Sequence[Utilization],
    programs: Sequence[Program],
    cities: Sequence[CityMunicipality],
    labels: CatalogLabels,
    catalog_order: dict[int, int],
) -> tuple[ProgramRollup, ...]:
    allocations_by_program = _group_by(allocations, lambda row: row.program_id)
    utilizations_by_program = _group_by(utilizations, lambda row: row.program_id)
    city_order = {city.psgc: index for index, city in enumerate(cities)}
    program_ids = _ordered_program_ids(
        chain(
            (program.id for program in programs),
            allocations_by_program.keys(),
            utilizations_by_program.keys(),
        ),
        catalog_order,
    )

    rollups: list[ProgramRollup] = []
    for program_id in program_ids:
        program_allocations = allocations_by_program.get(program_id, [])
        program_utilizations = utilizations_by_program.get(program_id, [])
        allocations_by_city = _group_by(program_allocations, lambda row: row.city_psgc)
        utilizations_by_city = _group_by(program_utilizations, lambda row: row.city_psgc)

        seen_cities = list(dict.fromkeys(chain(allocations_by_city.keys(), utilizations_by_city.keys())))
        known_cities = sorted((code for code in seen_cities if code in city_order), key=city_order.__getitem__)
        city_codes = known_cities + [code for code in seen_cities if code not in city_order]

        city_nodes: list[ProgramCityNode] = []
        for city_psgc in city_codes:
            city_allocations = allocations_by_city.get(city_psgc)
            city_utilizations = utilizations_by_city.get(city_psgc)
            first_row = (city_allocations or city_utilizations)[0]
            province_psgc = first_row.province_psgc
            if labels.has_city(city_psgc):
                province_psgc = labels.cities[city_psgc].province_psgc
            city_nodes.append(
                ProgramCityNode(
                    city_psgc=city_psgc,
                    city_name=labels.city_name(city_psgc),
                    province_psgc=province_psgc,
                    province_name=labels.province_name(province_psgc),
                    totals=merge_fact(
                        _side(city_allocations, Totals.from_allocations),
                        _side(city_utilizations, Totals.from_utilizations),
                    ),
                )
            )

        program = labels.programs.get(program_id) if program_id is not None else None
        rollups.append(
            ProgramRollup(
                program_id=program_id,
                name=_program_label(labels, program_id),
                logo=program.logo if program is not None else None,
                status=program.status.value if program is not None else None,
                totals=merge_fact(
                    _side(program_allocations, Totals.from_allocations),
                    _side(program_utilizations, Totals.from_utilizations),
                ),
                cities=tuple(city_nodes),
            )
        )
    return tuple(rollups)


def filter_period(rows: Iterable[T], period: PeriodFilter | None) -> list[T]:
    if period is None:
        return list(rows)
    return [row for row in rows if period.contains(row.created_at)]


def build_tree(
    allocations: Iterable[Allocation],
    utilizations: Iterable[Utilization],
    provinces: Sequence[Province],
    cities: Sequence[CityMunicipality],
    programs: Sequence[Program],
    period: PeriodFilter | None = None,
) -> ReportTree:
    """Build the province/district/city/program report tree."""

    allocations = filter_period(allocations, period)
    utilizations = filter_period(utilizations, period)
    labels = CatalogLabels(provinces, cities, programs)
    catalog_order = {program.id: index for index, program in enumerate(programs)}

    # Facts on a catalog city are keyed by the city alone. Facts whose city is
    # not in the snapshot are keyed by (province bucket, city code) so each
    # one lands in exactly one sentinel city.
    def fact_key(row: Allocation | Utilization) -> tuple[str | None, str]:
        if labels.has_city(row.city_psgc):
            return (labels.cities[row.city_psgc].province_psgc, row.city_psgc)
        province_key = row.province_psgc if labels.has_province(row.province_psgc) else None
        return (province_key, row.city_psgc)

    allocations_by_city = _group_by(allocations, fact_key)
    utilizations_by_city = _group_by(utilizations, fact_key)

    def city_node(key: tuple[str | None, str], name: str, district: str | None, in_catalog: bool) -> CityNode:
        return _build_city(
            psgc=key[1],
            name=name,
            district=district,
            allocations=allocations_by_city.get(key, []),
            utilizations=utilizations_by_city.get(key, []),
            labels=labels,
            catalog_order=catalog_order,
            in_catalog=in_catalog,
        )

    # Catalog cities under their catalog province; cities whose province is
    # not in the snapshot fall through to the sentinel province.
    cities_by_province = _group_by(
        cities,
        lambda city: city.province_psgc if labels.has_province(city.province_psgc) else None,
    )

    orphan_cities_by_province: dict[str | None, list[str]] = {}
    for province_key, city_psgc in dict.fromkeys(chain(allocations_by_city, utilizations_by_city)):
        if not labels.has_city(city_psgc):
            orphan_cities_by_province.setdefault(province_key, []).append(city_psgc)

    def province_city_nodes(province_key: str | None) -> list[CityNode]:
        nodes = [
            city_node((city.province_psgc, city.psgc), city.name, _district_key(city.district), True)
            for city in cities_by_province.get(province_key, [])
        ]
        nodes.extend(
            city_node((province_key, code), labels.city_name(code), None, False)
            for code in orphan_cities_by_province.get(province_key, [])
        )
        return nodes

    province_nodes = [
        _build_province(psgc=province.psgc, name=province.name, city_nodes=province_city_nodes(province.psgc))
        for province in provinces
    ]
    if None in cities_by_province or None in orphan_cities_by_province:
        logger.warning("Report tree includes cities or facts outside the province catalog")
        province_nodes.append(
            _build_province(
                psgc=None,
                name=UNKNOWN_PROVINCE,
                city_nodes=province_city_nodes(None),
                in_catalog=False,
            )
        )

    program_rollups = _build_program_rollups(
        allocations=allocations,
        utilizations=utilizations,
        programs=programs,
        cities=cities,
        labels=labels,
        catalog_order=catalog_order,
    )

    return ReportTree(
        provinces=tuple(province_nodes),
        programs=program_rollups,
        totals=sum_totals(province.totals for province in province_nodes),
        period=period,
    )
