"""
clubhouse.errors — Service-level error taxonomy
================================================

Services raise these; the API layer maps them to HTTP status codes
(see :mod:`clubhouse.api.main`).
"""

from __future__ import annotations


class ClubhouseError(Exception):
    """Base class for every error a service raises on purpose."""


class NotFound(ClubhouseError):
    """The user, post, comment, message or reward does not exist."""


class PermissionDenied(ClubhouseError):
    """The caller is neither the owner nor an admin."""


class InvalidOperation(ClubhouseError):
    """The request is well-formed but not allowed (e.g. deleting an admin)."""


class TransientStoreFailure(ClubhouseError):
    """The database could not be reached or timed out.  Safe to re-issue."""
