# config.py
import logging
import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_PLACES_URL = "https://places.googleapis.com/v1/places:searchText"


class LeadRadarConfig:
    """Lead Radar configuration class that loads settings from environment variables."""

    def __init__(self):
        """Initialize the Lead Radar configuration with environment variables."""
        self.logger = logging.getLogger(__name__)

        # Application environment
        self.APP_ENV = self._get_required("APP_ENV", "dev")

        # Google Places (New) settings
        self.GOOGLE_PLACES_API_KEY = self._get_optional("GOOGLE_PLACES_API_KEY")
        self.GOOGLE_PLACES_URL = self._get_optional(
            "GOOGLE_PLACES_URL", DEFAULT_PLACES_URL
        )

        # Lead scoring rules
        self.LEAD_SCORING_SCHEMA_PATH = self._get_optional("LEAD_SCORING_SCHEMA_PATH")
        self.LEAD_SCORING_ALLOW_UNKNOWN_CONDITIONS = self._get_bool(
            "LEAD_SCORING_ALLOW_UNKNOWN_CONDITIONS"
        )

        # Website enrichment
        self.ENRICH_FETCH_TIMEOUT = float(
            self._get_optional("ENRICH_FETCH_TIMEOUT", "5")
        )
        self.ENRICH_MAX_WORKERS = int(self._get_optional("ENRICH_MAX_WORKERS", "5"))
        self.ENRICH_USER_AGENT = self._get_optional(
            "ENRICH_USER_AGENT", "LeadRadar/1.0"
        )

    def get_places_api_key(self) -> str:
        """Return the Google Places API key.

        Raises:
            ValueError: If GOOGLE_PLACES_API_KEY is not configured
        """
        if not self.GOOGLE_PLACES_API_KEY:
            raise ValueError(
                "Environment variable GOOGLE_PLACES_API_KEY not found and no default provided"
            )
        return self.GOOGLE_PLACES_API_KEY

    def _get_required(self, name: str, default: Optional[str] = None) -> str:
        """Get a required configuration value from environment variables.

        Args:
            name: The name of the environment variable
            default: Optional default value if not found

        Returns:
            The value of the environment variable or default if provided

        Raises:
            ValueError: If the environment variable is not found and no default is provided
        """
        if name in os.environ:
            return os.environ[name]
        if default is not None:
            logging.warning(
                "Environment variable %s not found, using default value", name
            )
            return default
        raise ValueError(
            f"Environment variable {name} not found and no default provided"
        )

    def _get_optional(self, name: str, default: str = "") -> str:
        """Get an optional configuration value from environment variables.

        Args:
            name: The name of the environment variable
            default: Default value if not found (default: "")

        Returns:
            The value of the environment variable or the default value
        """
        if name in os.environ:
            return os.environ[name]
        return default

    def _get_bool(self, name: str) -> bool:
        """Get a boolean configuration value from environment variables.

        Args:
            name: The name of the environment variable

        Returns:
            True if the environment variable exists and is set to 'true' or '1', False otherwise
        """
        return name in os.environ and os.environ[name].lower() in ["true", "1"]


# Create a global instance of LeadRadarConfig
config = LeadRadarConfig()
