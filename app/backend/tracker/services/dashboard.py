"""Dashboard summary: unfiltered chart series plus period-filtered cards."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from datetime import datetime
from decimal import Decimal
from itertools import chain
from typing import TypeVar

from tracker.models.entities import Allocation, Program, Province, Utilization
from tracker.services.aggregation import Totals, filter_period, merge_fact, q2, sum_totals
from tracker.services.labels import UNKNOWN_PROGRAM, CatalogLabels
from tracker.services.periods import PeriodFilter, quarter_of

H = TypeVar("H", bound=Hashable)


def _chart_point(
    labels: CatalogLabels,
    province_psgc: str,
    amount: Decimal,
    created_at: datetime,
) -> dict[str, object]:
    return {
        "province": labels.province_name(province_psgc),
        "amount": str(q2(amount)),
        "year": created_at.year,
        "quarter": quarter_of(created_at),
    }


def _ordered_keys(keys: Iterable[H], catalog_order: dict[H, int]) -> list[H]:
    seen = list(dict.fromkeys(keys))
    known = sorted((key for key in seen if key in catalog_order), key=catalog_order.__getitem__)
    return known + [key for key in seen if key not in catalog_order]


def _sides_by(
    allocations: Sequence[Allocation],
    utilizations: Sequence[Utilization],
    key_name: str,
) -> tuple[dict[object, Totals], dict[object, Totals]]:
    allocated: dict[object, Totals] = {}
    utilized: dict[object, Totals] = {}
    for row in allocations:
        key = getattr(row, key_name)
        allocated[key] = allocated.get(key, Totals()) + Totals(
            target=row.target, allocation=Decimal(row.fund_allocation)
        )
    for row in utilizations:
        key = getattr(row, key_name)
        utilized[key] = utilized.get(key, Totals()) + Totals(
            physical=row.physical, utilization=Decimal(row.fund_utilized)
        )
    return allocated, utilized


def _merged_series(
    allocations: Sequence[Allocation],
    utilizations: Sequence[Utilization],
    *,
    key_name: str,
    catalog_order: dict[object, int],
) -> list[tuple[object, Totals]]:
    """Totals per key, with keys seen on only one side defaulted to zero on the other."""

    allocated, utilized = _sides_by(allocations, utilizations, key_name)
    keys = _ordered_keys(chain(allocated.keys(), utilized.keys()), catalog_order)
    return [(key, merge_fact(allocated.get(key), utilized.get(key))) for key in keys]


def build_dashboard(
    allocations: Sequence[Allocation],
    utilizations: Sequence[Utilization],
    provinces: Sequence[Province],
    programs: Sequence[Program],
    year: int,
    quarter: int,
) -> dict[str, object]:
    labels = CatalogLabels(provinces, [], programs)
    period = PeriodFilter(year=year, quarter=quarter)
    province_order = {province.psgc: index for index, province in enumerate(provinces)}
    program_order = {program.id: index for index, program in enumerate(programs)}

    chart_allocations = [
        _chart_point(labels, row.province_psgc, Decimal(row.fund_allocation), row.created_at) for row in allocations
    ]
    chart_utilizations = [
        _chart_point(labels, row.province_psgc, Decimal(row.fund_utilized), row.created_at) for row in utilizations
    ]

    province_chart = [
        {
            "province_psgc": psgc,
            "province": labels.province_name(psgc),
            "total_allocation": str(q2(totals.allocation)),
            "total_utilization": str(q2(totals.utilization)),
        }
        for psgc, totals in _merged_series(
            allocations, utilizations, key_name="province_psgc", catalog_order=province_order
        )
    ]

    period_allocations = filter_period(allocations, period)
    period_utilizations = filter_period(utilizations, period)

    province_data = [
        {
            "province_psgc": psgc,
            "province": labels.province_name(psgc),
            "total_allocation": str(q2(totals.allocation)),
            "total_utilization": str(q2(totals.utilization)),
        }
        for psgc, totals in _merged_series(
            period_allocations, period_utilizations, key_name="province_psgc", catalog_order=province_order
        )
    ]
    program_data = [
        {
            "program_id": program_id,
            "program": labels.program_name(program_id) if program_id is not None else UNKNOWN_PROGRAM,
            "total_allocation": str(q2(totals.allocation)),
            "total_utilization": str(q2(totals.utilization)),
        }
        for program_id, totals in _merged_series(
            period_allocations, period_utilizations, key_name="program_id", catalog_order=program_order
        )
    ]

    period_totals = sum_totals(
        chain(
            (Totals(target=row.target, allocation=Decimal(row.fund_allocation)) for row in period_allocations),
            (Totals(physical=row.physical, utilization=Decimal(row.fund_utilized)) for row in period_utilizations),
        )
    )

    return {
        "provinceData": province_data,
        "programData": program_data,
        "provinceChart": province_chart,
        "allocations": chart_allocations,
        "utilizations": chart_utilizations,
        "totalAllocation": str(q2(period_totals.allocation)),
        "totalUtilization": str(q2(period_totals.utilization)),
        "totalTarget": period_totals.target,
        "totalServed": period_totals.physical,
        "selectedYear": year,
        "selectedQuarter": quarter,
    }
