"""Demolition feature: cascading removal of an entity."""

from .entities.record import DemolitionRecord
from .services.demolition_service import EntityDemolitionService

__all__ = ["DemolitionRecord", "EntityDemolitionService"]
