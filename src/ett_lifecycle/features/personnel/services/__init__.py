"""Personnel services: corrections and stale vacancy handling."""

from .correction_service import CorrectionResult, EntityCorrectionService
from .vacancy import EntityStaffingState, StaleVacancyHandler, VacancyOutcome

__all__ = [
    "CorrectionResult",
    "EntityCorrectionService",
    "EntityStaffingState",
    "StaleVacancyHandler",
    "VacancyOutcome",
]
