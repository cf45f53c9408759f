"""Keycloak identity directory integration."""

from .identity_directory import KeycloakIdentityDirectory

__all__ = ["KeycloakIdentityDirectory"]
