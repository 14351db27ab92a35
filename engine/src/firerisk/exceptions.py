"""Exception hierarchy for firerisk.

Exception Hierarchy:
    FireRiskError (base)
    ├── InvalidInputError - Malformed polygons, non-finite coordinates,
    │                       out-of-range options that cannot be clamped
    └── ExternalServiceError - Weather / elevation provider failures

The risk analyzer recovers from bad input locally (clamping, radial
fallback) and never raises InvalidInputError. The simulator is fail-fast:
provider errors propagate to the caller unchanged.
"""

from __future__ import annotations


class FireRiskError(Exception):
    """Base exception for all firerisk errors."""


class InvalidInputError(FireRiskError, ValueError):
    """Raised when input cannot be repaired by clamping or fallback."""


class ExternalServiceError(FireRiskError):
    """Raised when a weather or elevation provider call fails.

    Attributes:
        service: Name of the failing service (e.g. "weather", "elevation").
        status_code: HTTP status of the failed response, if there was one.
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.service = service
        self.status_code = status_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.service:
            parts.append(f"service: {self.service}")
        if self.status_code is not None:
            parts.append(f"status: {self.status_code}")
        if len(parts) == 1:
            return self.message
        return f"{parts[0]} ({', '.join(parts[1:])})"
