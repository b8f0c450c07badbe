"""Exceptions raised by relate_orm.

Every error carries a human readable message plus an optional details dict
with machine readable context (entity names, attribute names, ...).
Storage errors coming from aiosqlite are never wrapped.
"""

from __future__ import annotations


class OrmError(Exception):
    """Base class for all relate_orm errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AssociationError(OrmError):
    """Invalid association configuration."""


class CompositeKeyArityError(AssociationError):
    """foreign_key and target_key lists differ in shape or length."""

    def __init__(self, foreign_key, target_key):
        super().__init__(
            "composite key arity mismatch: target_key must be a list of equal "
            "length when foreign_key is a list, and vice versa",
            {"foreign_key": foreign_key, "target_key": target_key},
        )


class MissingTargetKeyError(AssociationError):
    """A target key is not an attribute of the target entity."""

    def __init__(self, target_name: str, target_key, foreign_key: str):
        super().__init__(
            f"Missing target key '{target_key}' on {target_name} "
            f"for foreign key '{foreign_key}'",
            {"target": target_name, "target_key": target_key, "foreign_key": foreign_key},
        )


class NamingCollisionError(AssociationError):
    """Association alias or accessor clashes with an existing name."""


class ValidationError(OrmError):
    """Instance values violate the entity definition."""


class EntityStateError(OrmError, ValueError):
    """Operation not possible in the current persistence state of an instance."""
