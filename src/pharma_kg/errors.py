"""
Exception types.

Read paths raise NotFoundError for unknown names; callers fall back to the
literal search term. Invalid entities raise ValidationError. Low-confidence
updates and unreachable paths are results, not exceptions
(UpdateStatus.REJECTED_LOW_CONFIDENCE and a None path respectively).
"""


class PharmaKGError(Exception):
    """Base class for pharma_kg errors."""


class ValidationError(PharmaKGError):
    """Entity or edge data failed validation."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(PharmaKGError, LookupError):
    """A name, alias or id did not resolve to a graph node."""

    def __init__(self, ref: str, message: str | None = None):
        self.ref = ref
        super().__init__(message or f"Not found in knowledge graph: {ref!r}")
