"""Google Places (New) text-search client for lead sourcing.

This module wraps the ``places:searchText`` endpoint and converts the
returned places into lead records ready for enrichment and scoring.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import RequestException

from .config import config
from .exceptions import PlacesAPIError
from .models import LeadRecord

logger = logging.getLogger(__name__)

# Constants
PHOTO_MEDIA_URL = "https://places.googleapis.com/v1/{photo_name}/media"
DEFAULT_PHOTO_MAX_WIDTH = 400
DEFAULT_TIMEOUT_SECONDS = 10

SEARCH_FIELD_MASK = ",".join([
    "places.displayName",
    "places.formattedAddress",
    "places.priceLevel",
    "places.nationalPhoneNumber",
    "places.generativeSummary",
    "places.location",
    "places.photos",
])

LEAD_FIELD_MASK = ",".join([
    "places.displayName",
    "places.formattedAddress",
    "places.priceLevel",
    "places.nationalPhoneNumber",
    "places.websiteUri",
])

# Places carries no firmographics; these stand in until another source fills them
PLACEHOLDER_EMPLOYEES = 20
PLACEHOLDER_FOUNDED_YEAR = 2020


def display_name(place: Dict[str, Any]) -> str:
    """Return the plain-text display name of a place."""
    name = place.get("displayName")
    if isinstance(name, dict):
        return str(name.get("text", ""))
    return str(name or "")


class PlacesClient:
    """Client for the Google Places text-search API.

    Attributes:
        api_key: Google Places API key.
        base_url: searchText endpoint URL.
        timeout: Request timeout in seconds.

    Example:
        >>> with PlacesClient() as client:
        ...     leads = client.search_leads("62701", 10, "dentist")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the Places client.

        Args:
            api_key: API key. Defaults to GOOGLE_PLACES_API_KEY.
            base_url: Endpoint URL. Defaults to GOOGLE_PLACES_URL.
            timeout: Request timeout in seconds.

        Raises:
            ValueError: If no API key is configured.
        """
        self.api_key = api_key or config.get_places_api_key()
        self.base_url = base_url or config.GOOGLE_PLACES_URL
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
        })

    def build_photo_url(
        self,
        photo_name: str,
        max_width: int = DEFAULT_PHOTO_MAX_WIDTH,
    ) -> str:
        """Build the media URL for a place photo resource name."""
        url = PHOTO_MEDIA_URL.format(photo_name=photo_name)
        return f"{url}?maxWidthPx={max_width}&key={self.api_key}"

    def search_text(
        self,
        text_query: str,
        field_mask: str = SEARCH_FIELD_MASK,
    ) -> List[Dict[str, Any]]:
        """Run a text search and return the matching places.

        Each place is returned as the API sent it, plus a ``photoUrls`` list
        built from its photo resource names.

        Args:
            text_query: Free-text query, e.g. "dentist near 62701".
            field_mask: Comma-separated response fields to request.

        Returns:
            List of place dicts (empty when nothing matched).

        Raises:
            ValueError: If text_query is empty.
            PlacesAPIError: If the request fails or the API returns an error.
        """
        if not text_query or not text_query.strip():
            raise ValueError("textQuery is required")

        try:
            response = self.session.post(
                self.base_url,
                json={"textQuery": text_query},
                headers={"X-Goog-FieldMask": field_mask},
                timeout=self.timeout,
            )
        except RequestException as e:
            raise PlacesAPIError("Google API request failed", details=str(e)) from e

        if not response.ok:
            raise PlacesAPIError(
                "Google API error",
                status_code=response.status_code,
                details=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PlacesAPIError(
                "Google API returned invalid JSON",
                status_code=response.status_code,
                details=response.text,
            ) from e

        places = data.get("places") or []
        logger.info(
            "Places search completed",
            extra={"query": text_query, "count": len(places)},
        )

        return [
            {
                **place,
                "photoUrls": [
                    self.build_photo_url(photo["name"])
                    for photo in place.get("photos") or []
                    if photo.get("name")
                ],
            }
            for place in places
        ]

    def search_leads(
        self,
        zip_code: str,
        radius: float,
        category: str,
    ) -> List[Dict[str, Any]]:
        """Search for businesses of a category around a zip code.

        Args:
            zip_code: Target zip code.
            radius: Search radius in miles.
            category: Business category, used as the lead industry.

        Returns:
            Lead dicts, one per place found.

        Raises:
            ValueError: If zip_code, radius or category is missing.
            PlacesAPIError: If the search fails.
        """
        if not zip_code or not radius or not category:
            raise ValueError("zip, radius, and category are required")

        places = self.search_text(
            f"{category} near {zip_code} within {radius} miles",
            field_mask=LEAD_FIELD_MASK,
        )
        return [self.place_to_lead(place, category) for place in places]

    @staticmethod
    def place_to_lead(place: Dict[str, Any], category: str) -> Dict[str, Any]:
        """Convert a Places result into a lead record."""
        record = LeadRecord(
            name=display_name(place),
            address=place.get("formattedAddress"),
            phone=place.get("nationalPhoneNumber"),
            websiteUri=place.get("websiteUri"),
            employees=PLACEHOLDER_EMPLOYEES,
            foundedYear=PLACEHOLDER_FOUNDED_YEAR,
            industry=category,
        )
        return record.to_lead()

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()

    def __enter__(self) -> "PlacesClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
