"""Read path: report tree, record listings, dashboard and exports."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from tracker.core.config import get_settings
from tracker.models.entities import Allocation, Utilization
from tracker.repositories.tracking_repository import TrackingRepository
from tracker.services.aggregation import ReportTree, build_tree, q2
from tracker.services.dashboard import build_dashboard
from tracker.services.export_models import (
    SlideDeck,
    serialize_program_rollups,
    serialize_tree,
    to_overview_model,
    to_program_brief_model,
    to_province_brief_model,
    to_summary_rows,
)
from tracker.services.labels import CatalogLabels
from tracker.services.periods import PeriodFilter

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "province_psgc",
    "province",
    "district",
    "city_psgc",
    "city_municipality",
    "program_id",
    "program",
    "target",
    "fund_allocation",
    "physical",
    "fund_utilized",
]

SLIDE_MODELS = ("province-brief", "program-brief", "overview")


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


class ReportingService:
    """Builds report payloads from full catalog and fact snapshots."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = TrackingRepository(db)

    @staticmethod
    def resolve_period(year: int | None, quarter: int | None) -> PeriodFilter | None:
        if year is None and quarter is None:
            return None
        if year is None or quarter is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="year and quarter must be provided together.",
            )
        try:
            return PeriodFilter(year=year, quarter=quarter)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    def _labels(self) -> CatalogLabels:
        return CatalogLabels(
            self.repo.list_provinces(),
            self.repo.list_cities_with_district(),
            self.repo.list_programs(),
        )

    # ---------- Catalog ----------
    def catalog(self) -> dict[str, object]:
        return {
            "provinces": [
                {"psgc": row.psgc, "name": row.name} for row in self.repo.list_provinces()
            ],
            "cities": [
                {
                    "psgc": row.psgc,
                    "name": row.name,
                    "province_psgc": row.province_psgc,
                    "district": row.district,
                }
                for row in self.repo.list_cities_with_district()
            ],
            "programs": [
                {"id": row.id, "name": row.name, "status": row.status.value, "logo": row.logo}
                for row in self.repo.list_programs()
            ],
        }

    # ---------- Record listings ----------
    @staticmethod
    def serialize_allocation(row: Allocation, labels: CatalogLabels) -> dict[str, object]:
        return {
            "id": row.id,
            "province_psgc": row.province_psgc,
            "province": labels.province_name(row.province_psgc),
            "city_psgc": row.city_psgc,
            "city_municipality": labels.city_name(row.city_psgc),
            "program_id": row.program_id,
            "program": labels.program_name(row.program_id),
            "target": row.target,
            "fund_allocation": str(q2(row.fund_allocation)),
            "created_at": row.created_at.isoformat(),
            "updated_at": row.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_utilization(row: Utilization, labels: CatalogLabels) -> dict[str, object]:
        return {
            "id": row.id,
            "province_psgc": row.province_psgc,
            "province": labels.province_name(row.province_psgc),
            "city_psgc": row.city_psgc,
            "city_municipality": labels.city_name(row.city_psgc),
            "program_id": row.program_id,
            "program": labels.program_name(row.program_id),
            "physical": row.physical,
            "fund_utilized": str(q2(row.fund_utilized)),
            "created_at": row.created_at.isoformat(),
            "updated_at": row.updated_at.isoformat(),
        }

    def allocation_record(self, row: Allocation) -> dict[str, object]:
        return self.serialize_allocation(row, self._labels())

    def utilization_record(self, row: Utilization) -> dict[str, object]:
        return self.serialize_utilization(row, self._labels())

    def list_allocations(self) -> dict[str, object]:
        labels = self._labels()
        return {"allocations": [self.serialize_allocation(row, labels) for row in self.repo.list_allocations()]}

    def list_utilizations(self) -> dict[str, object]:
        labels = self._labels()
        return {"utilizations": [self.serialize_utilization(row, labels) for row in self.repo.list_utilizations()]}

    # ---------- Report tree ----------
    def report_tree(self, period: PeriodFilter | None = None) -> ReportTree:
        tree = build_tree(
            self.repo.list_allocations(period),
            self.repo.list_utilizations(period),
            self.repo.list_provinces(),
            self.repo.list_cities_with_district(),
            self.repo.list_programs(),
            period=period,
        )
        logger.info(
            "Built report tree: %d provinces, %d programs, period=%s",
            len(tree.provinces),
            len(tree.programs),
            period,
        )
        return tree

    def summary(self, *, year: int | None = None, quarter: int | None = None) -> dict[str, object]:
        return serialize_tree(self.report_tree(self.resolve_period(year, quarter)))

    def summary_rows(self, *, year: int | None = None, quarter: int | None = None) -> dict[str, object]:
        return {"rows": to_summary_rows(self.report_tree(self.resolve_period(year, quarter)))}

    def program_rollups(self, *, year: int | None = None, quarter: int | None = None) -> dict[str, object]:
        return {"programs": serialize_program_rollups(self.report_tree(self.resolve_period(year, quarter)))}

    # ---------- Slide decks ----------
    def slide_deck(
        self,
        *,
        model_key: str,
        year: int | None = None,
        quarter: int | None = None,
        as_of: date | None = None,
    ) -> SlideDeck:
        normalized_key = model_key.strip().lower()
        if normalized_key not in SLIDE_MODELS:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Unknown slide model.",
            )

        settings = get_settings()
        period = self.resolve_period(year, quarter)
        tree = self.report_tree(period)
        programs = self.repo.list_programs()
        as_of = as_of or date.today()

        if normalized_key == "province-brief":
            return to_province_brief_model(tree, programs, as_of, currency_symbol=settings.currency_symbol)
        if normalized_key == "program-brief":
            return to_program_brief_model(tree, programs, as_of, currency_symbol=settings.currency_symbol)
        return to_overview_model(tree, programs)

    # ---------- Dashboard ----------
    def dashboard(
        self,
        *,
        year: int | None = None,
        quarter: int | None = None,
        today: date | None = None,
    ) -> dict[str, object]:
        current = PeriodFilter.for_date(today or date.today())
        selected_year = year if year is not None else current.year
        selected_quarter = quarter if quarter is not None else current.quarter
        if selected_quarter not in (1, 2, 3, 4):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="quarter must be within 1..4.",
            )

        return build_dashboard(
            self.repo.list_allocations(),
            self.repo.list_utilizations(),
            self.repo.list_provinces(),
            self.repo.list_programs(),
            selected_year,
            selected_quarter,
        )

    # ---------- Exports ----------
    def export_summary(
        self,
        *,
        format_name: str,
        year: int | None = None,
        quarter: int | None = None,
    ) -> ExportFilePayload:
        normalized_format = format_name.strip().lower()
        if normalized_format not in {"csv", "xlsx"}:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="format must be one of: csv, xlsx.",
            )

        period = self.resolve_period(year, quarter)
        rows = to_summary_rows(self.report_tree(period))

        base_filename = get_settings().export_filename_prefix
        if period is not None:
            base_filename = f"{base_filename}-{period.year}-q{period.quarter}"

        if normalized_format == "csv":
            sio = io.StringIO()
            writer = csv.DictWriter(sio, fieldnames=SUMMARY_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
            return ExportFilePayload(
                media_type="text/csv; charset=utf-8",
                filename=f"{base_filename}.csv",
                content=sio.getvalue().encode("utf-8"),
            )

        # XLSX
        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "summary"
        sheet.append(SUMMARY_COLUMNS)
        for row in rows:
            sheet.append([row.get(column) for column in SUMMARY_COLUMNS])

        output = io.BytesIO()
        workbook.save(output)
        return ExportFilePayload(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename=f"{base_filename}.xlsx",
            content=output.getvalue(),
        )
