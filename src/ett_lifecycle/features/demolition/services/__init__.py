"""Demolition services."""

from .demolition_service import EntityDemolitionService

__all__ = ["EntityDemolitionService"]
