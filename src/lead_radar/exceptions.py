"""Exception types raised across the Lead Radar package."""

from typing import Optional


class LeadRadarError(Exception):
    """Base class for Lead Radar errors."""


class ScoringSchemaError(LeadRadarError, ValueError):
    """Raised when the lead scoring rule configuration is malformed."""


class PlacesAPIError(LeadRadarError):
    """Raised when the Google Places API rejects a request or is unreachable."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            return f"{base} (status={self.status_code})"
        return base
