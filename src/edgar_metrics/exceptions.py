"""Exception hierarchy for run-level failures.

Row-level problems (a bad field, a dangling foreign key) never raise; rows
are dropped instead. Everything here is terminal for the call that raised it.
"""

from __future__ import annotations


class EdgarMetricsError(Exception):
    """Base exception for the package."""


class LoadError(EdgarMetricsError):
    """Raised when a CSV resource cannot be fetched or fails its schema contract.

    Attributes:
        resource: Path or URL that was being loaded.
        detail: What went wrong.
    """

    def __init__(self, resource: str, detail: str) -> None:
        self.resource = resource
        self.detail = detail
        super().__init__(f"{detail} ({resource})")


class ProcessingError(EdgarMetricsError):
    """Raised when a run produces no usable dataset."""


class InvalidFilterParameters(EdgarMetricsError):
    """Raised when filter arguments fail revalidation."""


class InvalidRange(EdgarMetricsError):
    """Raised when a quarter axis cannot be built for the requested years."""
