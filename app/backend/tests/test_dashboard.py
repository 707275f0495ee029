from __future__ import annotations

from datetime import datetime

from conftest import make_allocation, make_utilization
from tracker.models.entities import Program, ProgramStatus, Province
from tracker.services.dashboard import build_dashboard

Q1 = datetime(2026, 2, 1, 8, 0)
Q2 = datetime(2026, 5, 1, 8, 0)


def _catalog() -> tuple[list[Province], list[Program]]:
    provinces = [Province(psgc="P1", name="Ilocos Norte"), Province(psgc="P2", name="Ilocos Sur")]
    programs = [
        Program(id=1, name="AICS", status=ProgramStatus.ACTIVE),
        Program(id=2, name="SLP", status=ProgramStatus.ACTIVE),
    ]
    return provinces, programs


def test_dashboard_filters_cards_but_not_chart_series() -> None:
    provinces, programs = _catalog()
    allocations = [
        make_allocation(province="P1", city="C1", program_id=1, target=10, fund="1000", created_at=Q1),
        make_allocation(province="P2", city="C2", program_id=1, target=5, fund="500", created_at=Q2),
    ]
    utilizations = [
        make_utilization(province="P1", city="C1", program_id=1, physical=4, fund="400", created_at=Q1),
    ]

    payload = build_dashboard(allocations, utilizations, provinces, programs, 2026, 1)

    assert payload["selectedYear"] == 2026
    assert payload["selectedQuarter"] == 1
    assert payload["totalAllocation"] == "1000.00"
    assert payload["totalUtilization"] == "400.00"
    assert payload["totalTarget"] == 10
    assert payload["totalServed"] == 4
    assert payload["allocations"] == [
        {"province": "Ilocos Norte", "amount": "1000.00", "year": 2026, "quarter": 1},
        {"province": "Ilocos Sur", "amount": "500.00", "year": 2026, "quarter": 2},
    ]
    assert [row["province"] for row in payload["provinceChart"]] == ["Ilocos Norte", "Ilocos Sur"]
    assert [row["province"] for row in payload["provinceData"]] == ["Ilocos Norte"]


def test_program_data_merges_one_sided_programs_with_zero() -> None:
    provinces, programs = _catalog()
    allocations = [make_allocation(province="P1", city="C1", program_id=1, target=1, fund="100", created_at=Q1)]
    utilizations = [make_utilization(province="P2", city="C2", program_id=2, physical=1, fund="50", created_at=Q1)]

    payload = build_dashboard(allocations, utilizations, provinces, programs, 2026, 1)

    assert payload["programData"] == [
        {"program_id": 1, "program": "AICS", "total_allocation": "100.00", "total_utilization": "0.00"},
        {"program_id": 2, "program": "SLP", "total_allocation": "0.00", "total_utilization": "50.00"},
    ]
    assert payload["provinceData"] == [
        {"province_psgc": "P1", "province": "Ilocos Norte", "total_allocation": "100.00", "total_utilization": "0.00"},
        {"province_psgc": "P2", "province": "Ilocos Sur", "total_allocation": "0.00", "total_utilization": "50.00"},
    ]


def test_empty_period_yields_zero_cards() -> None:
    provinces, programs = _catalog()
    allocations = [make_allocation(province="P1", city="C1", program_id=1, target=1, fund="100", created_at=Q1)]

    payload = build_dashboard(allocations, [], provinces, programs, 2025, 4)

    assert payload["totalAllocation"] == "0.00"
    assert payload["totalTarget"] == 0
    assert payload["programData"] == []
    assert payload["provinceData"] == []
    assert len(payload["allocations"]) == 1
