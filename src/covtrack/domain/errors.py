"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


def facility_not_found(facility_id: int) -> str:
    """Return message for missing facility."""
    return f"Facility {facility_id} not found"


def obligation_not_found(obligation_id: int) -> str:
    """Return message for missing obligation."""
    return f"Obligation {obligation_id} not found"


def covenant_not_found(covenant_id: str) -> str:
    """Return message for missing covenant."""
    return f"Covenant '{covenant_id}' not found"


def duplicate_covenant_id(covenant_id: str) -> str:
    """Return message for duplicate covenant ID."""
    return f"Covenant with id '{covenant_id}' already exists"


def missing_required_mappings(missing: list[str]) -> str:
    """Return message when the column mapping cannot be validated yet."""
    return f"Column mapping is missing required fields: {', '.join(missing)}"


# Row-level validation messages. These end up in ValidationResult.errors and
# ValidationResult.warnings, never in raised exceptions.

TEST_DATE_REQUIRED = "Test date is required"
CALCULATED_VALUE_REQUIRED = "Calculated value is required"
COVENANT_IDENTIFIER_REQUIRED = "Either covenant ID or covenant name is required"


def invalid_test_date(value: str) -> str:
    return f"Invalid test date '{value}' (expected YYYY-MM-DD)"


def future_test_date(value: str) -> str:
    return f"Test date {value} is in the future"


def invalid_calculated_value(value: object) -> str:
    return f"Calculated value '{value}' is not a number"


def covenant_id_not_matched(covenant_id: str) -> str:
    return f"No covenant found with ID '{covenant_id}'"


def covenant_name_not_matched(covenant_name: str) -> str:
    return f"No covenant found matching '{covenant_name}'"


def multiple_covenants_matched(covenant_name: str, count: int, chosen: str) -> str:
    return (
        f"Multiple covenants match '{covenant_name}' ({count} found); "
        f"using '{chosen}'. Add a facility name or covenant ID to disambiguate"
    )


def no_effective_threshold(covenant_name: str) -> str:
    return f"Covenant '{covenant_name}' has no effective threshold; result cannot be predicted"


def zero_threshold(covenant_name: str) -> str:
    return f"Covenant '{covenant_name}' has a zero threshold; headroom cannot be calculated"


def result_mismatch(stated: str, predicted: str) -> str:
    return f"Stated result '{stated}' differs from predicted result '{predicted}'"


def low_headroom(headroom: object) -> str:
    return f"Low headroom: {headroom}% to threshold"
