"""Domain-level exceptions shared across bounded contexts.

These carry no HTTP or transport semantics; the API layer maps them to
status codes.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain errors."""


class InvalidArgumentError(DomainError, ValueError):
    """A constructor or operation received arguments it cannot work with."""


class EntityNotFoundError(DomainError):
    """A named entity (model, schema, record) does not exist."""

    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier!r} not found")


__all__ = [
    "DomainError",
    "InvalidArgumentError",
    "EntityNotFoundError",
]
