"""Domain exceptions raised by services and translated by the API layer."""
from __future__ import annotations


class DailyStrideError(Exception):
    """Base class for domain errors."""


class NotFound(DailyStrideError):
    """A goal, task or user identifier does not resolve."""

    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} with ID {identifier} not found")


class InvalidInput(DailyStrideError):
    """Malformed identifiers, dates or filters."""


class Conflict(InvalidInput):
    """The request collides with existing state (e.g. a duplicate email)."""


class GeneratorUnavailable(DailyStrideError):
    """The content generator failed, timed out or returned unusable output."""


class PersistenceFailure(DailyStrideError):
    """A write to the database failed and was rolled back."""
