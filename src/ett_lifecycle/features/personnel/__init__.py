"""Personnel feature: correcting who represents an entity."""

from .entities.personnel import Personnel
from .services import (
    CorrectionResult,
    EntityCorrectionService,
    EntityStaffingState,
    StaleVacancyHandler,
    VacancyOutcome,
)

__all__ = [
    "Personnel",
    "CorrectionResult",
    "EntityCorrectionService",
    "EntityStaffingState",
    "StaleVacancyHandler",
    "VacancyOutcome",
]
