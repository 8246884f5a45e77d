"""Domain layer for covtrack application."""

from covtrack.domain.facility import FacilityService
from covtrack.domain.obligation import ObligationService
from covtrack.domain.covenant import CovenantService
from covtrack.domain.covenant_import import CovenantImportService

__all__ = [
    "FacilityService",
    "ObligationService",
    "CovenantService",
    "CovenantImportService",
]
