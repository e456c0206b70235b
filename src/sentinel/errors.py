"""Error taxonomy shared by the registry, store, dispatcher, and normalizer."""

from __future__ import annotations


class SentinelError(Exception):
    """Base class for all Sentinel errors."""


class ConfigurationError(SentinelError):
    """Invalid scan type / mode pairing or malformed submission."""


class AnalysisUnavailable(SentinelError):
    """The analysis service failed, timed out, or returned unparseable output."""


class SchemaViolation(SentinelError):
    """The analysis service returned a document that breaks the result contract."""

    def __init__(self, field: str, detail: str = "missing or invalid") -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"Schema violation at '{field}': {detail}")


class InvalidTransition(SentinelError):
    """A job was already resolved when a state change was attempted."""

    def __init__(self, job_id: str, current: str, requested: str) -> None:
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Job {job_id} is {current}; cannot transition to {requested}"
        )


class JobNotFound(SentinelError):
    """No job is stored under the given identifier."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")
