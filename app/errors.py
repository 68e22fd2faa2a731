"""Failure types raised while serving a forecast request.

Each error knows the HTTP status and short label it maps to, so the
exception handlers in ``app.main`` can render the ``{error, message}``
envelope without inspecting the exception type.
"""

from __future__ import annotations

from typing import Any, Optional


class ForecastError(Exception):
    """Base class for request failures rendered as a JSON error envelope."""

    status_code: int = 500
    error: str = "Server error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict:
        """Serialize into the response envelope."""
        payload = {"error": self.error, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ConfigurationError(ForecastError):
    """Server-side configuration is incomplete (e.g. no CWA API key)."""

    status_code = 500
    error = "Server configuration error"


class InvalidLocationError(ForecastError):
    """The requested location code is not in the lookup table."""

    status_code = 400
    error = "Unsupported location"


class UpstreamError(ForecastError):
    """The CWA API failed, timed out, or answered with something unusable."""

    status_code = 502
    error = "CWA API error"


class DataShapeError(UpstreamError):
    """The upstream payload lacks the expected records/elements/time arrays."""

    status_code = 502
    error = "Unexpected CWA response"


class ElementNotFoundError(DataShapeError):
    """A requested weather element code is absent from the location's series."""

    def __init__(self, code: str, available: Optional[list[str]] = None) -> None:
        super().__init__(
            f"Weather element '{code}' not found in upstream data",
            details={"element": code, "available": available or []},
        )
        self.code = code


class LocationNotFoundError(DataShapeError):
    """The upstream answered but returned no data for the location."""

    status_code = 404
    error = "No data"
