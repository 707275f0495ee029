"""Flatten a report tree into summary rows and slide-deck models.

Everything here is a pure function of its inputs. Currency and thousands
formatting is applied at this layer only; the tree keeps exact values.
Layout constants (positions, widths, colors, font sizes) are passed through
to the document generator unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal

from tracker.models.entities import Program
from tracker.services.aggregation import ZERO, CityNode, ProvinceNode, ReportTree, Totals, q2, sum_totals

DEFAULT_CURRENCY_SYMBOL = "₱"

BG_TITLE = "ppd-images/ppt-bg.png"
BG_TOTAL = "ppd-images/ppt-total.png"
BG_TABLE = "ppd-images/ppt-table.png"

NAVY = "00072D"
DARK_BLUE = "000991"
BLUE = "0000FF"
WHITE = "FFFFFF"
HEADER_FILL = "0070C0"
TOTAL_FILL = "FFD700"
PROGRAM_TOTAL_FILL = "ADD8E6"
STRIPE_FILLS = ("BDE0FE", "DDEFFA")


# ---------- Formatting ----------
def format_amount(value: Decimal) -> str:
    return f"{q2(value):,.2f}"


def format_peso(value: Decimal, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    return f"{currency_symbol}{format_amount(value)}"


def format_count(value: int) -> str:
    return f"{value:,}"


def format_as_of(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def ordinal(district: str) -> str:
    """``"1"`` -> ``"1st"``, ``"12"`` -> ``"12th"``; non-numeric values pass through."""

    if not district.isdigit():
        return district
    number = int(district)
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def district_heading(district: str | None) -> str | None:
    if district is None:
        return None
    return f"{ordinal(district)} Congressional District"


# ---------- Slide spec shapes ----------
@dataclass(frozen=True, slots=True)
class TextBlock:
    text: str
    x: float | str
    y: float | str
    w: float | str
    font_size: int
    bold: bool = True
    color: str = DARK_BLUE
    align: str = "center"
    type: str = field(default="text", init=False)


@dataclass(frozen=True, slots=True)
class TableCell:
    text: str
    colspan: int = 1
    bold: bool = False
    align: str = "center"
    font_size: int = 10
    color: str | None = None
    fill: str | None = None


@dataclass(frozen=True, slots=True)
class TableSpec:
    header_rows: tuple[tuple[TableCell, ...], ...]
    data_rows: tuple[tuple[TableCell, ...], ...]
    total_row: tuple[TableCell, ...]
    column_widths: tuple[float, ...]
    x: float
    y: float
    w: float
    type: str = field(default="table", init=False)


@dataclass(frozen=True, slots=True)
class ImageSpec:
    path: str
    x: float
    y: float
    w: float
    h: float
    type: str = field(default="image", init=False)


@dataclass(frozen=True, slots=True)
class Slide:
    background: str
    elements: tuple[TextBlock | TableSpec | ImageSpec, ...]


@dataclass(frozen=True, slots=True)
class SlideDeck:
    file_name: str
    slides: tuple[Slide, ...]

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class _Line:
    """One data row of a three-column table before formatting."""

    label: str
    count: int
    amount: Decimal
    heading: bool = False


# ---------- Table builders ----------
def _header_cell(text: str, *, font_size: int = 12, colspan: int = 1) -> TableCell:
    return TableCell(
        text=text,
        colspan=colspan,
        bold=True,
        align="center",
        font_size=font_size,
        color=WHITE,
        fill=HEADER_FILL,
    )


def _three_column_table(
    *,
    header_rows: tuple[tuple[TableCell, ...], ...],
    lines: Sequence[_Line],
    total_label: str,
    total_fill: str,
    label_align: str,
    value_align: str,
    label_bold: bool,
    font_size: int,
    total_font_size: int,
    column_widths: tuple[float, ...],
    x: float,
    y: float,
    w: float,
) -> TableSpec:
    data_rows: list[tuple[TableCell, ...]] = []
    stripe = 0
    for line in lines:
        if line.heading:
            data_rows.append(
                (
                    TableCell(
                        text=line.label,
                        colspan=3,
                        bold=True,
                        align="left",
                        font_size=font_size,
                        color=BLUE,
                    ),
                )
            )
            continue
        fill = STRIPE_FILLS[stripe % 2]
        stripe += 1
        data_rows.append(
            (
                TableCell(text=line.label, bold=label_bold, align=label_align, font_size=font_size, fill=fill),
                TableCell(text=format_count(line.count), align=value_align, font_size=font_size, fill=fill),
                TableCell(text=format_amount(line.amount), align=value_align, font_size=font_size, fill=fill),
            )
        )

    data_lines = [line for line in lines if not line.heading]
    total_count = sum(line.count for line in data_lines)
    total_amount = sum((line.amount for line in data_lines), ZERO)
    total_row = (
        TableCell(text=total_label, bold=True, align=value_align, font_size=total_font_size, fill=total_fill),
        TableCell(text=format_count(total_count), bold=True, align=value_align, font_size=total_font_size, fill=total_fill),
        TableCell(text=format_amount(total_amount), bold=True, align=value_align, font_size=total_font_size, fill=total_fill),
    )
    return TableSpec(
        header_rows=header_rows,
        data_rows=tuple(data_rows),
        total_row=total_row,
        column_widths=column_widths,
        x=x,
        y=y,
        w=w,
    )


def _two_column_table(
    *,
    headers: tuple[str, str],
    rows: Sequence[tuple[str, Decimal]],
) -> TableSpec:
    data_rows = tuple(
        (
            TableCell(text=label, align="left", font_size=8),
            TableCell(text=format_amount(amount), align="right", font_size=8),
        )
        for label, amount in rows
    )
    total_amount = sum((amount for _, amount in rows), ZERO)
    return TableSpec(
        header_rows=((_header_cell(headers[0], font_size=10), _header_cell(headers[1], font_size=10)),),
        data_rows=data_rows,
        total_row=(
            TableCell(text="TOTAL", bold=True, align="right", font_size=8, fill=PROGRAM_TOTAL_FILL),
            TableCell(text=format_amount(total_amount), bold=True, align="right", font_size=8, fill=PROGRAM_TOTAL_FILL),
        ),
        column_widths=(4.0, 2.5),
        x=0.5,
        y=1.5,
        w=7.5,
    )


def _municipality_lines(
    province: ProvinceNode,
    *,
    served: bool,
    program_id: int | None = None,
    scoped: bool = False,
) -> list[_Line]:
    """District heading rows followed by one row per city, in tree order."""

    lines: list[_Line] = []
    for district in province.districts:
        heading = district_heading(district.district)
        if heading is not None:
            lines.append(_Line(label=heading, count=0, amount=ZERO, heading=True))
        for city in district.cities:
            totals = city.program_totals(program_id) if scoped else city.totals
            if served:
                lines.append(_Line(label=city.name, count=totals.physical, amount=totals.utilization))
            else:
                lines.append(_Line(label=city.name, count=totals.target, amount=totals.allocation))
    return lines


def _deck_programs(tree: ReportTree, programs: Sequence[Program]) -> list[tuple[int | None, str, str | None]]:
    """Catalog programs in order, then programs only the tree knows about."""

    entries: list[tuple[int | None, str, str | None]] = [
        (program.id, program.name, program.logo) for program in programs
    ]
    catalog_ids = {program.id for program in programs}
    for rollup in tree.programs:
        if rollup.program_id not in catalog_ids:
            entries.append((rollup.program_id, rollup.name, rollup.logo))
    return entries


def _city_program_lines(
    city: CityNode,
    entries: Iterable[tuple[int | None, str, str | None]],
    *,
    served: bool,
) -> list[_Line]:
    lines: list[_Line] = []
    seen: set[int | None] = set()
    for program_id, name, _logo in entries:
        seen.add(program_id)
        totals = city.program_totals(program_id)
        if served:
            lines.append(_Line(label=name, count=totals.physical, amount=totals.utilization))
        else:
            lines.append(_Line(label=name, count=totals.target, amount=totals.allocation))
    for node in city.programs:
        if node.program_id in seen:
            continue
        if served:
            lines.append(_Line(label=node.name, count=node.totals.physical, amount=node.totals.utilization))
        else:
            lines.append(_Line(label=node.name, count=node.totals.target, amount=node.totals.allocation))
    return lines


# ---------- Shared slides ----------
def _title_slide(province: ProvinceNode, as_of: date) -> Slide:
    return Slide(
        background=BG_TITLE,
        elements=(
            TextBlock(text=province.name.upper(), x="-10%", y="42%", w="100%", font_size=44, color=NAVY),
            TextBlock(text="TARGET AND ACCOMPLISHMENT", x="-10%", y="52%", w="100%", font_size=28, color=NAVY),
            TextBlock(text=f"As of {format_as_of(as_of)}", x="-10%", y="62%", w="100%", font_size=22, color=BLUE),
        ),
    )


def _total_utilized_slide(province: ProvinceNode, currency_symbol: str) -> Slide:
    total_utilized = sum((city.totals.utilization for city in province.iter_cities()), ZERO)
    return Slide(
        background=BG_TOTAL,
        elements=(
            TextBlock(
                text=f"TOTAL FUND UTILIZED FOR {province.name.upper()}",
                x="-5%",
                y="42%",
                w="90%",
                font_size=23,
                color=NAVY,
            ),
            TextBlock(
                text=format_peso(total_utilized, currency_symbol),
                x="-10%",
                y="52%",
                w="90%",
                font_size=50,
                color=BLUE,
            ),
        ),
    )


# ---------- Province brief ----------
def _city_slide(
    province: ProvinceNode,
    city: CityNode,
    entries: Sequence[tuple[int | None, str, str | None]],
    *,
    served: bool,
) -> Slide:
    headers = ("Program", "Physical Served", "Fund Utilized (Php)") if served else (
        "Program",
        "Physical Target",
        "Fund Allocated (Php)",
    )
    table = _three_column_table(
        header_rows=(tuple(_header_cell(text) for text in headers),),
        lines=_city_program_lines(city, entries, served=served),
        total_label="Total",
        total_fill=TOTAL_FILL,
        label_align="center",
        value_align="center",
        label_bold=True,
        font_size=10,
        total_font_size=10,
        column_widths=(2.5, 2.0, 2.0),
        x=1.0,
        y=1.5,
        w=8.0,
    )
    return Slide(
        background=BG_TABLE,
        elements=(
            TextBlock(text=f"{city.name.upper()}, {province.name.upper()}", x=0.5, y=0.5, w="70%", font_size=24),
            TextBlock(text="SUMMARY PER PROGRAM", x=0.5, y=1.0, w="70%", font_size=20),
            table,
        ),
    )


def _municipality_summary_slide(province: ProvinceNode, *, served: bool) -> Slide:
    side_label = "SERVED" if served else "TARGET"
    columns = ("Municipality", "Physical Served", "Fund Utilized (Php)") if served else (
        "Municipality",
        "Physical",
        "Fund Allocated (Php)",
    )
    table = _three_column_table(
        header_rows=(
            (_header_cell(province.name.upper()), _header_cell(side_label, colspan=2)),
            tuple(_header_cell(text) for text in columns),
        ),
        lines=_municipality_lines(province, served=served),
        total_label="TOTAL",
        total_fill=TOTAL_FILL,
        label_align="left",
        value_align="right",
        label_bold=False,
        font_size=10,
        total_font_size=10,
        column_widths=(2.5, 2.0, 2.0),
        x=1.0,
        y=1.0,
        w=7.0,
    )
    return Slide(
        background=BG_TABLE,
        elements=(
            TextBlock(text="SUMMARY PER MUNICIPALITY", x=0.5, y=0.5, w="70%", font_size=24),
            table,
        ),
    )


def to_province_brief_model(
    tree: ReportTree,
    programs: Sequence[Program],
    as_of: date,
    *,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    file_name: str = "Province_Report.pptx",
) -> SlideDeck:
    """Per-province deck: title, total utilized, two slides per city, two summaries."""

    entries = _deck_programs(tree, programs)
    slides: list[Slide] = []
    for province in tree.provinces:
        slides.append(_title_slide(province, as_of))
        slides.append(_total_utilized_slide(province, currency_symbol))
        for city in province.iter_cities():
            slides.append(_city_slide(province, city, entries, served=False))
            slides.append(_city_slide(province, city, entries, served=True))
        slides.append(_municipality_summary_slide(province, served=False))
        slides.append(_municipality_summary_slide(province, served=True))
    return SlideDeck(file_name=file_name, slides=tuple(slides))


# ---------- Program brief ----------
def _program_municipality_slide(
    province: ProvinceNode,
    program_id: int | None,
    program_name: str,
    logo: str | None,
    *,
    served: bool,
) -> Slide:
    side_label = "UTILIZATION" if served else "TARGET"
    amount_label = "Fund Utilized (Php)" if served else "Fund Allocated (Php)"
    table = _three_column_table(
        header_rows=(
            (_header_cell(province.name.upper(), font_size=10), _header_cell(side_label, font_size=10, colspan=2)),
            (
                _header_cell("Municipality", font_size=10),
                _header_cell("Physical", font_size=10),
                _header_cell(amount_label, font_size=10),
            ),
        ),
        lines=_municipality_lines(province, served=served, program_id=program_id, scoped=True),
        total_label="TOTAL",
        total_fill=PROGRAM_TOTAL_FILL,
        label_align="left",
        value_align="right",
        label_bold=False,
        font_size=8,
        total_font_size=8,
        column_widths=(3.5, 1.5, 2.5),
        x=0.5,
        y=1.5,
        w=7.5,
    )
    elements: list[TextBlock | TableSpec | ImageSpec] = [
        TextBlock(text=program_name, x=0.9, y=0.5, w="60%", font_size=20),
        TextBlock(text=province.name.upper(), x=0.9, y=1.0, w="60%", font_size=16),
    ]
    if logo:
        elements.append(ImageSpec(path=logo, x=0.5, y=0.5, w=1.0, h=1.0))
    elements.append(table)
    return Slide(background=BG_TABLE, elements=tuple(elements))


def _province_program_totals(province: ProvinceNode, program_id: int | None) -> Totals:
    return sum_totals(city.program_totals(program_id) for city in province.iter_cities())


def _program_summary_slide(
    province: ProvinceNode,
    entries: Sequence[tuple[int | None, str, str | None]],
    *,
    served: bool,
) -> Slide:
    rows: list[tuple[str, Decimal]] = []
    for program_id, name, _logo in entries:
        totals = _province_program_totals(province, program_id)
        rows.append((name, totals.utilization if served else totals.allocation))
    title = "UTILIZATION SUMMARY FOR" if served else "ALLOCATION SUMMARY FOR"
    headers = ("PROGRAM NAME", "TOTAL UTILIZED (Php)") if served else ("PROGRAM NAME", "TOTAL ALLOCATED (Php)")
    return Slide(
        background=BG_TABLE,
        elements=(
            TextBlock(text=f"{title} {province.name.upper()}", x="0%", y="5%", w="100%", font_size=26, color=NAVY),
            _two_column_table(headers=headers, rows=rows),
        ),
    )


def to_program_brief_model(
    tree: ReportTree,
    programs: Sequence[Program],
    as_of: date,
    *,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    file_name: str = "Program_Report.pptx",
) -> SlideDeck:
    """Per-province deck with two municipality slides per program and two program summaries."""

    entries = _deck_programs(tree, programs)
    slides: list[Slide] = []
    for province in tree.provinces:
        slides.append(_title_slide(province, as_of))
        slides.append(_total_utilized_slide(province, currency_symbol))
        for program_id, name, logo in entries:
            slides.append(_program_municipality_slide(province, program_id, name, logo, served=False))
            slides.append(_program_municipality_slide(province, program_id, name, logo, served=True))
        slides.append(_program_summary_slide(province, entries, served=False))
        slides.append(_program_summary_slide(province, entries, served=True))
    return SlideDeck(file_name=file_name, slides=tuple(slides))


# ---------- Overview ----------
def to_overview_model(
    tree: ReportTree,
    programs: Sequence[Program],
    *,
    file_name: str = "Overview_Report.pptx",
) -> SlideDeck:
    """Single slide with one cross-program table built from the program roll-ups."""

    data_rows: list[tuple[TableCell, ...]] = []
    line_totals: list[Totals] = []
    for index, (program_id, name, _logo) in enumerate(_deck_programs(tree, programs)):
        rollup = tree.program_rollup(program_id)
        totals = rollup.totals if rollup is not None else Totals()
        line_totals.append(totals)
        fill = STRIPE_FILLS[index % 2]
        data_rows.append(
            (
                TableCell(text=name, bold=True, align="left", fill=fill),
                TableCell(text=format_count(totals.target), align="right", fill=fill),
                TableCell(text=format_amount(totals.allocation), align="right", fill=fill),
                TableCell(text=format_count(totals.physical), align="right", fill=fill),
                TableCell(text=format_amount(totals.utilization), align="right", fill=fill),
            )
        )

    grand = sum_totals(line_totals)
    total_row = tuple(
        TableCell(text=text, bold=True, align="right", fill=TOTAL_FILL)
        for text in (
            "TOTAL",
            format_count(grand.target),
            format_amount(grand.allocation),
            format_count(grand.physical),
            format_amount(grand.utilization),
        )
    )
    table = TableSpec(
        header_rows=(
            tuple(
                _header_cell(text)
                for text in (
                    "Program",
                    "Physical Target",
                    "Fund Allocated (Php)",
                    "Physical Served",
                    "Fund Utilized (Php)",
                )
            ),
        ),
        data_rows=tuple(data_rows),
        total_row=total_row,
        column_widths=(2.5, 1.5, 2.0, 1.5, 2.0),
        x=0.5,
        y=1.5,
        w=9.5,
    )
    slide = Slide(
        background=BG_TABLE,
        elements=(
            TextBlock(text="PROGRAM OVERVIEW", x="0%", y="5%", w="100%", font_size=26, color=NAVY),
            table,
        ),
    )
    return SlideDeck(file_name=file_name, slides=(slide,))


# ---------- JSON / flat views ----------
def serialize_totals(totals: Totals) -> dict[str, object]:
    return {
        "target": totals.target,
        "allocation": str(q2(totals.allocation)),
        "physical": totals.physical,
        "utilization": str(q2(totals.utilization)),
    }


def to_summary_rows(tree: ReportTree) -> list[dict[str, object]]:
    """One flat row per (province, district, city, program) in tree order.

    Cities without any fact still produce one zero row with no program, so
    every catalog city shows up in the flat export.
    """

    rows: list[dict[str, object]] = []
    for province in tree.provinces:
        for district in province.districts:
            for city in district.cities:
                base = {
                    "province_psgc": province.psgc,
                    "province": province.name,
                    "district": district.district,
                    "city_psgc": city.psgc,
                    "city_municipality": city.name,
                }
                if not city.programs:
                    rows.append(base | {"program_id": None, "program": None} | _flat_measures(Totals()))
                    continue
                for program in city.programs:
                    rows.append(
                        base
                        | {"program_id": program.program_id, "program": program.name}
                        | _flat_measures(program.totals)
                    )
    return rows


def _flat_measures(totals: Totals) -> dict[str, object]:
    return {
        "target": totals.target,
        "fund_allocation": str(q2(totals.allocation)),
        "physical": totals.physical,
        "fund_utilized": str(q2(totals.utilization)),
    }


def serialize_tree(tree: ReportTree) -> dict[str, object]:
    """Nested JSON view of the tree for the summary page."""

    return {
        "period": (
            {"year": tree.period.year, "quarter": tree.period.quarter} if tree.period is not None else None
        ),
        "totals": serialize_totals(tree.totals),
        "provinces": [
            {
                "psgc": province.psgc,
                "name": province.name,
                "in_catalog": province.in_catalog,
                "totals": serialize_totals(province.totals),
                "districts": [
                    {
                        "district": district.district,
                        "heading": district_heading(district.district),
                        "totals": serialize_totals(district.totals),
                        "cities": [
                            {
                                "psgc": city.psgc,
                                "name": city.name,
                                "in_catalog": city.in_catalog,
                                "totals": serialize_totals(city.totals),
                                "programs": [
                                    {
                                        "program_id": program.program_id,
                                        "name": program.name,
                                        "logo": program.logo,
                                        "totals": serialize_totals(program.totals),
                                    }
                                    for program in city.programs
                                ],
                            }
                            for city in district.cities
                        ],
                    }
                    for district in province.districts
                ],
            }
            for province in tree.provinces
        ],
        "programs": serialize_program_rollups(tree),
    }


def serialize_program_rollups(tree: ReportTree) -> list[dict[str, object]]:
    return [
        {
            "program_id": rollup.program_id,
            "name": rollup.name,
            "logo": rollup.logo,
            "status": rollup.status,
            "totals": serialize_totals(rollup.totals),
            "cities": [
                {
                    "city_psgc": city.city_psgc,
                    "city_municipality": city.city_name,
                    "province_psgc": city.province_psgc,
                    "province": city.province_name,
                    "totals": serialize_totals(city.totals),
                }
                for city in rollup.cities
            ],
        }
        for rollup in tree.programs
    ]
