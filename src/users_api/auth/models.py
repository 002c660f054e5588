"""
users_api.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity. Anonymous callers are represented by `None`, not by a Principal.
    """

    id: int
    role_id: int


# --- Module Notes -----------------------------------------------------------
# Principals are built per request from the database row behind the bearer token and discarded
# with the request.
