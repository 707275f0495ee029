from __future__ import annotations

from datetime import date
from decimal import Decimal

from conftest import make_allocation, make_utilization
from tracker.models.entities import CityMunicipality, Program, ProgramStatus, Province
from tracker.services.aggregation import build_tree
from tracker.services.export_models import (
    ImageSpec,
    TableSpec,
    TextBlock,
    format_amount,
    format_peso,
    ordinal,
    serialize_tree,
    to_overview_model,
    to_program_brief_model,
    to_province_brief_model,
    to_summary_rows,
)
from tracker.services.labels import UNKNOWN_CITY

AS_OF = date(2026, 10, 19)


def _fixture_tree():
    provinces = [Province(psgc="P1", name="Ilocos Norte")]
    cities = [
        CityMunicipality(psgc="C1", province_psgc="P1", name="Adams", district="1"),
        CityMunicipality(psgc="C2", province_psgc="P1", name="Bacarra", district="1"),
        CityMunicipality(psgc="C3", province_psgc="P1", name="Laoag City", district=None),
    ]
    programs = [
        Program(id=1, name="AICS", status=ProgramStatus.ACTIVE, logo="logos/aics.png"),
        Program(id=2, name="SLP", status=ProgramStatus.ACTIVE),
    ]
    allocations = [
        make_allocation(province="P1", city="C1", program_id=1, target=100, fund="5000"),
        make_allocation(province="P1", city="C2", program_id=2, target=1200, fund="1234567.5"),
        make_allocation(province="P1", city="C3", program_id=1, target=7, fund="700"),
    ]
    utilizations = [
        make_utilization(province="P1", city="C1", program_id=1, physical=80, fund="4000"),
        make_utilization(province="P1", city="C3", program_id=2, physical=3, fund="300.25"),
    ]
    tree = build_tree(allocations, utilizations, provinces, cities, programs)
    return tree, programs


def _tables(slide) -> list[TableSpec]:
    return [element for element in slide.elements if isinstance(element, TableSpec)]


def _texts(slide) -> list[str]:
    return [element.text for element in slide.elements if isinstance(element, TextBlock)]


def test_formatting_helpers() -> None:
    assert format_amount(Decimal("1234567.5")) == "1,234,567.50"
    assert format_amount(Decimal("0")) == "0.00"
    assert format_peso(Decimal("1234")) == "₱1,234.00"
    assert format_peso(Decimal("5"), "PHP ") == "PHP 5.00"


def test_ordinal_suffixes() -> None:
    assert [ordinal(str(number)) for number in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101, 111)] == [
        "1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "101st", "111th",
    ]
    assert ordinal("Lone") == "Lone"


def test_summary_rows_follow_tree_order_with_two_decimal_strings() -> None:
    tree, _ = _fixture_tree()

    rows = to_summary_rows(tree)

    assert [(row["city_municipality"], row["program"]) for row in rows] == [
        ("Adams", "AICS"),
        ("Bacarra", "SLP"),
        ("Laoag City", "AICS"),
        ("Laoag City", "SLP"),
    ]
    assert rows[0]["fund_allocation"] == "5000.00"
    assert rows[0]["fund_utilized"] == "4000.00"
    assert rows[1]["fund_allocation"] == "1234567.50"
    assert rows[3]["target"] == 0
    assert rows[3]["fund_utilized"] == "300.25"
    assert rows[2]["district"] is None


def test_summary_rows_keep_cities_without_facts() -> None:
    provinces = [Province(psgc="P1", name="Ilocos Norte")]
    cities = [CityMunicipality(psgc="C1", province_psgc="P1", name="Adams", district="1")]

    rows = to_summary_rows(build_tree([], [], provinces, cities, []))

    assert len(rows) == 1
    assert rows[0]["program"] is None
    assert rows[0]["fund_allocation"] == "0.00"


def test_serialize_tree_nests_totals_and_headings() -> None:
    tree, _ = _fixture_tree()

    payload = serialize_tree(tree)

    assert payload["period"] is None
    assert payload["totals"]["allocation"] == "1240267.50"
    province = payload["provinces"][0]
    assert [district["heading"] for district in province["districts"]] == ["1st Congressional District", None]
    assert province["districts"][0]["cities"][0]["programs"][0]["totals"] == {
        "target": 100,
        "allocation": "5000.00",
        "physical": 80,
        "utilization": "4000.00",
    }
    assert [program["name"] for program in payload["programs"]] == ["AICS", "SLP"]


def test_province_brief_slide_sequence_and_titles() -> None:
    tree, programs = _fixture_tree()

    deck = to_province_brief_model(tree, programs, AS_OF)

    # title, total, two per city (3 cities), two municipality summaries
    assert len(deck.slides) == 2 + 2 * 3 + 2
    assert _texts(deck.slides[0]) == ["ILOCOS NORTE", "TARGET AND ACCOMPLISHMENT", "As of October 19, 2026"]
    assert _texts(deck.slides[1]) == ["TOTAL FUND UTILIZED FOR ILOCOS NORTE", "₱4,300.25"]
    assert _texts(deck.slides[2]) == ["ADAMS, ILOCOS NORTE", "SUMMARY PER PROGRAM"]
    assert deck.slides[0].background == "ppd-images/ppt-bg.png"


def test_province_brief_city_tables_cover_catalog_programs_with_zero_default() -> None:
    tree, programs = _fixture_tree()

    deck = to_province_brief_model(tree, programs, AS_OF)

    target_table = _tables(deck.slides[2])[0]
    assert [cell.text for cell in target_table.header_rows[0]] == ["Program", "Physical Target", "Fund Allocated (Php)"]
    assert [[cell.text for cell in row] for row in target_table.data_rows] == [
        ["AICS", "100", "5,000.00"],
        ["SLP", "0", "0.00"],
    ]
    assert [cell.text for cell in target_table.total_row] == ["Total", "100", "5,000.00"]
    assert target_table.column_widths == (2.5, 2.0, 2.0)

    served_table = _tables(deck.slides[3])[0]
    assert [cell.text for cell in served_table.header_rows[0]] == ["Program", "Physical Served", "Fund Utilized (Php)"]
    assert [cell.text for cell in served_table.total_row] == ["Total", "80", "4,000.00"]


def test_province_brief_municipality_summary_has_district_headings_and_total() -> None:
    tree, programs = _fixture_tree()

    deck = to_province_brief_model(tree, programs, AS_OF)

    target_summary = deck.slides[-2]
    assert _texts(target_summary) == ["SUMMARY PER MUNICIPALITY"]
    table = _tables(target_summary)[0]
    assert [cell.text for cell in table.header_rows[0]] == ["ILOCOS NORTE", "TARGET"]
    assert table.header_rows[0][1].colspan == 2
    assert [[cell.text for cell in row] for row in table.data_rows] == [
        ["1st Congressional District"],
        ["Adams", "100", "5,000.00"],
        ["Bacarra", "1,200", "1,234,567.50"],
        ["Laoag City", "7", "700.00"],
    ]
    assert table.data_rows[0][0].colspan == 3
    assert [cell.text for cell in table.total_row] == ["TOTAL", "1,307", "1,240,267.50"]

    served_table = _tables(deck.slides[-1])[0]
    assert [cell.text for cell in served_table.header_rows[0]] == ["ILOCOS NORTE", "SERVED"]
    assert [cell.text for cell in served_table.total_row] == ["TOTAL", "83", "4,300.25"]


def test_program_brief_tables_are_scoped_to_one_program() -> None:
    tree, programs = _fixture_tree()

    deck = to_program_brief_model(tree, programs, AS_OF)

    # title, total, two per program (2 programs), allocation and utilization summaries
    assert len(deck.slides) == 2 + 2 * 2 + 2
    aics_target = deck.slides[2]
    assert _texts(aics_target) == ["AICS", "ILOCOS NORTE"]
    images = [element for element in aics_target.elements if isinstance(element, ImageSpec)]
    assert images == [ImageSpec(path="logos/aics.png", x=0.5, y=0.5, w=1.0, h=1.0)]
    table = _tables(aics_target)[0]
    assert [cell.text for cell in table.total_row] == ["TOTAL", "107", "5,700.00"]

    slp_slide = deck.slides[4]
    assert not [element for element in slp_slide.elements if isinstance(element, ImageSpec)]
    assert [cell.text for cell in _tables(slp_slide)[0].total_row] == ["TOTAL", "1,200", "1,234,567.50"]

    allocation_summary = deck.slides[-2]
    assert _texts(allocation_summary) == ["ALLOCATION SUMMARY FOR ILOCOS NORTE"]
    summary_table = _tables(allocation_summary)[0]
    assert [[cell.text for cell in row] for row in summary_table.data_rows] == [
        ["AICS", "5,700.00"],
        ["SLP", "1,234,567.50"],
    ]
    assert [cell.text for cell in summary_table.total_row] == ["TOTAL", "1,240,267.50"]
    assert _texts(deck.slides[-1]) == ["UTILIZATION SUMMARY FOR ILOCOS NORTE"]


def test_overview_model_uses_program_rollups() -> None:
    tree, programs = _fixture_tree()

    deck = to_overview_model(tree, programs)

    assert len(deck.slides) == 1
    table = _tables(deck.slides[0])[0]
    assert [[cell.text for cell in row] for row in table.data_rows] == [
        ["AICS", "107", "5,700.00", "80", "4,000.00"],
        ["SLP", "1,200", "1,234,567.50", "3", "300.25"],
    ]
    assert [cell.text for cell in table.total_row] == ["TOTAL", "1,307", "1,240,267.50", "83", "4,300.25"]


def test_unknown_city_shows_sentinel_name_but_keeps_numbers() -> None:
    provinces = [Province(psgc="P1", name="Ilocos Norte")]
    cities = [CityMunicipality(psgc="C1", province_psgc="P1", name="Adams", district="1")]
    programs = [Program(id=1, name="AICS", status=ProgramStatus.ACTIVE)]
    allocations = [make_allocation(province="P1", city="C404", program_id=1, target=9, fund="900")]

    tree = build_tree(allocations, [], provinces, cities, programs)
    rows = to_summary_rows(tree)
    deck = to_province_brief_model(tree, programs, AS_OF)

    assert rows[-1]["city_municipality"] == UNKNOWN_CITY
    assert rows[-1]["fund_allocation"] == "900.00"
    summary = _tables(deck.slides[-2])[0]
    assert [cell.text for cell in summary.data_rows[-1]] == [UNKNOWN_CITY, "9", "900.00"]
    assert [cell.text for cell in summary.total_row] == ["TOTAL", "9", "900.00"]


def test_slide_deck_serializes_to_plain_dicts() -> None:
    tree, programs = _fixture_tree()

    payload = to_overview_model(tree, programs).to_dict()

    slide = payload["slides"][0]
    assert slide["elements"][0]["type"] == "text"
    assert slide["elements"][0]["font_size"] == 26
    assert slide["elements"][1]["type"] == "table"
    assert slide["elements"][1]["total_row"][0]["text"] == "TOTAL"
