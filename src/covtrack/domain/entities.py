"""Domain model entities for covtrack.

These are pure data classes representing compliance concepts, independent of
database schema. The rule engine only ever sees these types, so it stays
unaware of how facilities, covenants and obligations are stored.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class Frequency(str, Enum):
    """Reporting frequency of an obligation."""

    ANNUAL = "annual"
    SEMI_ANNUAL = "semi_annual"
    QUARTERLY = "quarterly"
    MONTHLY = "monthly"
    ONE_TIME = "one_time"
    OTHER = "other"


class EventStatus(str, Enum):
    """Lifecycle status of a compliance event."""

    UPCOMING = "upcoming"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WAIVED = "waived"


class ThresholdType(str, Enum):
    """Direction of a covenant threshold."""

    MAXIMUM = "maximum"
    MINIMUM = "minimum"


class TestResult(str, Enum):
    """Outcome of a covenant test."""

    __test__ = False

    PASS = "pass"
    FAIL = "fail"
    CURED = "cured"
    WAIVED = "waived"


class MatchKind(str, Enum):
    """How confidently an import row was resolved to a covenant."""

    UNIQUE = "unique"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


COVENANT_TYPES = (
    "leverage_ratio",
    "interest_coverage",
    "fixed_charge_coverage",
    "debt_service_coverage",
    "current_ratio",
    "net_worth",
    "tangible_net_worth",
    "capex",
    "minimum_liquidity",
    "maximum_debt",
    "other",
)


@dataclass(frozen=True)
class Facility:
    """Credit facility domain entity."""

    id: int
    facility_name: str
    borrower_name: str
    created_at: datetime


@dataclass(frozen=True)
class Obligation:
    """Recurring reporting obligation attached to a facility.

    ``frequency`` is kept as a plain string: obligations are often entered by
    hand or extracted from documents, so unknown values must survive until the
    event generator decides to skip them.
    """

    id: Optional[int]
    facility_id: Optional[int]
    name: str
    frequency: str
    deadline_days: int = 90
    grace_period_days: int = 0
    obligation_type: str = "other"
    is_active: bool = True


@dataclass(frozen=True)
class ComplianceEvent:
    """One deadline instance of an obligation."""

    reference_period_start: date
    reference_period_end: date
    deadline_date: date
    grace_deadline_date: date
    status: EventStatus
    obligation_id: Optional[int] = None
    facility_id: Optional[int] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class ThresholdStep:
    """A threshold value that applies from ``effective_from`` onwards."""

    effective_from: date
    threshold_value: Decimal


@dataclass(frozen=True)
class Covenant:
    """Financial covenant with a (possibly stepped) threshold schedule."""

    id: str
    facility_id: Optional[int]
    name: str
    threshold_type: ThresholdType
    threshold_schedule: tuple[ThresholdStep, ...] = ()
    covenant_type: str = "other"
    facility_name: Optional[str] = None
    testing_frequency: str = "quarterly"
    is_active: bool = True


@dataclass(frozen=True)
class CovenantTest:
    """Recorded covenant test."""

    __test__ = False

    id: int
    covenant_id: str
    facility_id: Optional[int]
    test_date: date
    calculated_ratio: Optional[Decimal]
    threshold_value: Decimal
    test_result: TestResult
    headroom_absolute: Optional[Decimal]
    headroom_percentage: Optional[Decimal]
    breach_amount: Optional[Decimal]
    notes: Optional[str]
    source: str
    created_at: datetime


@dataclass(frozen=True)
class TestEvaluation:
    """Directional evaluation of one value against one threshold."""

    __test__ = False

    test_result: TestResult
    calculated_ratio: Decimal
    threshold_value: Decimal
    headroom_absolute: Optional[Decimal]
    headroom_percentage: Optional[Decimal]
    breach_amount: Optional[Decimal]


MAPPING_FIELDS = (
    "covenant_id",
    "facility_id",
    "facility_name",
    "covenant_name",
    "covenant_type",
    "test_date",
    "calculated_value",
    "test_result",
    "notes",
)


@dataclass(frozen=True)
class ColumnMapping:
    """Spreadsheet header assigned to each logical import field."""

    covenant_id: Optional[str] = None
    facility_id: Optional[str] = None
    facility_name: Optional[str] = None
    covenant_name: Optional[str] = None
    covenant_type: Optional[str] = None
    test_date: Optional[str] = None
    calculated_value: Optional[str] = None
    test_result: Optional[str] = None
    notes: Optional[str] = None

    def with_field(self, field_name: str, header: Optional[str]) -> "ColumnMapping":
        """Return a copy with one field remapped (``None`` unmaps it)."""
        if field_name not in MAPPING_FIELDS:
            raise ValueError(
                f"Unknown mapping field '{field_name}'. "
                f"Must be one of: {', '.join(MAPPING_FIELDS)}"
            )
        return replace(self, **{field_name: header})

    def as_dict(self) -> dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in MAPPING_FIELDS}

    def missing_required(self) -> list[str]:
        """Fields that must be mapped before validation can run."""
        missing = []
        if not self.covenant_id and not self.covenant_name:
            missing.append("covenant_id or covenant_name")
        if not self.test_date:
            missing.append("test_date")
        if not self.calculated_value:
            missing.append("calculated_value")
        return missing


@dataclass(frozen=True)
class ParsedCovenantTest:
    """Typed projection of one spreadsheet row."""

    row_index: int
    test_date: str = ""
    calculated_value: Optional[Decimal] = None
    covenant_id: Optional[str] = None
    facility_id: Optional[str] = None
    facility_name: Optional[str] = None
    covenant_name: Optional[str] = None
    covenant_type: Optional[str] = None
    test_result: Optional[TestResult] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class MatchedCovenant:
    """Snapshot of the covenant an import row was matched to."""

    id: str
    name: str
    facility_id: Optional[int]
    facility_name: Optional[str]
    threshold_type: ThresholdType
    threshold_value: Optional[Decimal]
    covenant_type: str


@dataclass(frozen=True)
class CovenantMatch:
    """Tagged outcome of resolving an import row to a covenant."""

    kind: MatchKind
    candidates: tuple[Covenant, ...] = ()

    @property
    def covenant(self) -> Optional[Covenant]:
        """Best-effort match: the first candidate in input order."""
        return self.candidates[0] if self.candidates else None


@dataclass(frozen=True)
class ValidationResult:
    """Per-row validation outcome."""

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    matched_covenant: Optional[MatchedCovenant] = None
    predicted_result: Optional[TestResult] = None
    calculated_headroom: Optional[Decimal] = None


@dataclass(frozen=True)
class ValidatedCovenantTest:
    """Parsed row together with its validation result."""

    test: ParsedCovenantTest
    validation: ValidationResult


@dataclass(frozen=True)
class ImportSummary:
    """Totals over a validated import batch."""

    total: int = 0
    valid: int = 0
    invalid: int = 0
    warnings: int = 0
    passing_tests: int = 0
    failing_tests: int = 0
    facilities: tuple[str, ...] = field(default_factory=tuple)
    covenants: tuple[str, ...] = field(default_factory=tuple)
