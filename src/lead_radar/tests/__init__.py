"""
Lead Radar Test Package.

This package contains unit tests for the Lead Radar modules.

Test categories:
- test_config.py: Configuration and environment variable loading
- test_logging_utils.py: Log formatters and logger helpers
- test_models.py: Pydantic model validation
- test_scoring.py: Rule evaluation and scoring schema loading
- test_fetcher.py: HTTP page fetching and failure handling
- test_extractor.py: Website signal extraction and batch processing
- test_places_client.py: Google Places search and lead conversion
- test_main.py: Pipeline orchestration and CLI
"""

__all__ = []
