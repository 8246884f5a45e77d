"""Covenant test bulk import domain service."""

from __future__ import annotations
import csv
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covtrack.database.base import Database
from covtrack.domain.column_mapping import auto_detect_mapping
from covtrack.domain.covenant_validator import (
    ThresholdBasis,
    summarize_import,
    validate_tests,
)
from covtrack.domain.entities import (
    ColumnMapping,
    ImportSummary,
    ValidatedCovenantTest,
)
from covtrack.domain.errors import ValidationError, missing_required_mappings
from covtrack.domain.row_normalizer import RawRow, apply_mapping
from covtrack.domain.thresholds import evaluate_test
from covtrack.utils.date_parser import parse_iso_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportPreview:
    """Everything the import wizard shows before the user confirms."""

    headers: tuple[str, ...]
    mapping: ColumnMapping
    tests: tuple[ValidatedCovenantTest, ...]
    summary: ImportSummary


class CovenantImportService:
    """Service for importing covenant test results from CSV files."""

    def __init__(self, db: Database):
        """Initialize covenant import service.

        Args:
            db: Database instance
        """
        self.db = db

    def read_rows(self, csv_file_path: str) -> tuple[list[str], list[RawRow]]:
        """Read a CSV file into headers and raw rows.

        Rows are numbered as in the file, so the first data row is row 2.

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            ValidationError: If the file has no header row
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            # Try to detect delimiter
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                raise ValidationError("CSV file has no columns")
            headers = [h.strip() for h in reader.fieldnames]
            reader.fieldnames = headers

            rows = []
            for row_num, row in enumerate(reader, start=2):  # Start at 2 (header is row 1)
                if not any(value and value.strip() for value in row.values() if isinstance(value, str)):
                    continue
                rows.append(RawRow(row_index=row_num, data=row))

        logger.debug("Read %d rows from %s", len(rows), csv_path.name)
        return headers, rows

    def detect_mapping(
        self,
        headers: list[str],
        overrides: Optional[Mapping[str, Optional[str]]] = None,
    ) -> ColumnMapping:
        """Auto-detect a mapping and apply the user's corrections.

        Args:
            headers: CSV header row
            overrides: Field name to header (None to unmap)

        Raises:
            ValidationError: If an override names an unknown field or header
        """
        mapping = auto_detect_mapping(headers)
        for field_name, header in (overrides or {}).items():
            if header is not None and header not in headers:
                raise ValidationError(f"Column '{header}' not found in file")
            try:
                mapping = mapping.with_field(field_name, header)
            except ValueError as e:
                raise ValidationError(str(e))
        return mapping

    def preview(
        self,
        csv_file_path: str,
        overrides: Optional[Mapping[str, Optional[str]]] = None,
        as_of: Optional[date | datetime] = None,
        threshold_basis: ThresholdBasis = ThresholdBasis.CURRENT,
        facility_id: Optional[int] = None,
    ) -> ImportPreview:
        """Read, map and validate a file without saving anything.

        Args:
            csv_file_path: Path to CSV file
            overrides: Mapping corrections (field name to header)
            as_of: Validation date (defaults to today)
            threshold_basis: Date thresholds are resolved at
            facility_id: Restrict matching to one facility's covenants

        Returns:
            ImportPreview

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            ValidationError: If the mapping lacks required fields
        """
        headers, rows = self.read_rows(csv_file_path)
        mapping = self.detect_mapping(headers, overrides)
        missing = mapping.missing_required()
        if missing:
            raise ValidationError(missing_required_mappings(missing))

        if as_of is None:
            as_of = date.today()
        covenants = self.db.list_covenants(facility_id=facility_id)
        validated = validate_tests(
            apply_mapping(rows, mapping), covenants, as_of, threshold_basis
        )
        return ImportPreview(
            headers=tuple(headers),
            mapping=mapping,
            tests=tuple(validated),
            summary=summarize_import(validated),
        )

    def import_tests(
        self,
        csv_file_path: str,
        overrides: Optional[Mapping[str, Optional[str]]] = None,
        as_of: Optional[date | datetime] = None,
        threshold_basis: ThresholdBasis = ThresholdBasis.CURRENT,
        facility_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Validate a file and save every valid row as a covenant test.

        Returns:
            Dict with import statistics:
            - imported: number of tests saved
            - skipped: number of valid rows that could not be saved
            - errors: list of row error messages
            - warnings: list of row warning messages
            - summary: ImportSummary of the validated batch

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            ValidationError: If the mapping lacks required fields
        """
        result = self.preview(
            csv_file_path,
            overrides=overrides,
            as_of=as_of,
            threshold_basis=threshold_basis,
            facility_id=facility_id,
        )

        imported = 0
        skipped = 0
        errors = []
        warnings = []
        for item in result.tests:
            row_num = item.test.row_index
            validation = item.validation
            warnings.extend(f"Row {row_num}: {w}" for w in validation.warnings)
            if not validation.is_valid:
                errors.extend(f"Row {row_num}: {e}" for e in validation.errors)
                continue

            matched = validation.matched_covenant
            if matched.threshold_value is None:
                skipped += 1
                continue

            evaluation = evaluate_test(
                matched.threshold_type,
                matched.threshold_value,
                calculated_ratio=item.test.calculated_value,
            )
            self.db.create_covenant_test(
                covenant_id=matched.id,
                facility_id=matched.facility_id,
                test_date=parse_iso_date(item.test.test_date),
                calculated_ratio=evaluation.calculated_ratio,
                threshold_value=evaluation.threshold_value,
                test_result=evaluation.test_result.value,
                headroom_absolute=evaluation.headroom_absolute,
                headroom_percentage=validation.calculated_headroom,
                breach_amount=evaluation.breach_amount,
                notes=item.test.notes,
                source="bulk_import",
            )
            imported += 1

        logger.info(
            "Imported %d covenant tests from %s (%d invalid, %d skipped)",
            imported,
            Path(csv_file_path).name,
            result.summary.invalid,
            skipped,
        )
        return {
            "imported": imported,
            "skipped": skipped,
            "errors": errors,
            "warnings": warnings,
            "summary": result.summary,
        }
