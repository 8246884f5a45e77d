"""Heuristic detection of spreadsheet column mappings."""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from covtrack.domain.entities import ColumnMapping


@dataclass(frozen=True)
class DetectionRule:
    """Maps a normalized header to a logical field.

    A header matches when it contains any of ``contains`` or equals any of
    ``equals``.
    """

    field: str
    contains: tuple[str, ...] = ()
    equals: tuple[str, ...] = ()

    def matches(self, normalized_header: str) -> bool:
        if normalized_header in self.equals:
            return True
        return any(token in normalized_header for token in self.contains)


# Order matters: identifier rules run before name rules ("covenantid" also
# contains "covenant") and the result rule before the value rule. A bare
# "covenant" token only names the covenant once every other field has had
# its turn, so "Covenant Status" is a result column.
DEFAULT_DETECTION_RULES: tuple[DetectionRule, ...] = (
    DetectionRule("covenant_id", contains=("covenantid",), equals=("cid",)),
    DetectionRule("facility_id", contains=("facilityid",), equals=("fid",)),
    DetectionRule("facility_name", contains=("facilityname", "facility", "loan", "borrower")),
    DetectionRule("covenant_type", contains=("covenanttype",), equals=("type",)),
    DetectionRule("covenant_name", contains=("covenantname",), equals=("name", "covenant")),
    DetectionRule("test_date", contains=("testdate", "date", "period")),
    DetectionRule("test_result", contains=("testresult", "result", "pass", "status", "outcome")),
    DetectionRule("calculated_value", contains=("calculatedvalue", "value", "ratio", "actual")),
    DetectionRule("notes", contains=("note", "comment", "remark")),
    DetectionRule("covenant_name", contains=("covenant",)),
)


def normalize_header(header: str) -> str:
    """Lowercase a header and strip underscores, spaces and hyphens."""
    return header.lower().replace("_", "").replace(" ", "").replace("-", "")


def _detect_field(normalized: str, rules: Iterable[DetectionRule]) -> Optional[str]:
    for rule in rules:
        if rule.matches(normalized):
            return rule.field
    return None


def auto_detect_mapping(
    headers: Sequence[str],
    rules: Sequence[DetectionRule] = DEFAULT_DETECTION_RULES,
) -> ColumnMapping:
    """Propose a column mapping from spreadsheet headers.

    Each header is assigned to the first rule it matches. A field keeps the
    first header assigned to it; later headers for the same field are left
    unmapped.

    Args:
        headers: Header row in column order
        rules: Ordered detection rules

    Returns:
        Best-effort mapping; fields with no matching header are None
    """
    assigned: dict[str, str] = {}
    for header in headers:
        if header is None:
            continue
        field_name = _detect_field(normalize_header(str(header)), rules)
        if field_name is not None and field_name not in assigned:
            assigned[field_name] = header
    return ColumnMapping(**assigned)
