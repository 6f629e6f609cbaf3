"""
Error taxonomy for the factory pipeline.

Clients translate third-party failures into these types so the orchestrator
can decide, per type, whether to retry, fall back or abort the cycle.
"""


class ArchitectError(Exception):
    """Base class for every error raised by the factory."""


class ValidationError(ArchitectError, ValueError):
    """Malformed constructor or call arguments; raised before any network call."""


class CompletionError(ArchitectError):
    """The text generation backend failed or returned an unusable envelope."""


class StoreError(ArchitectError):
    """The record store (or the local fallback store) rejected an operation."""


class ParseError(ArchitectError):
    """Structured output from the generation backend could not be parsed."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class CycleCancelled(ArchitectError):
    """The cancellation token was set while a cycle was running."""


class CycleTimeoutError(ArchitectError):
    """A whole cycle exceeded its configured time budget."""
