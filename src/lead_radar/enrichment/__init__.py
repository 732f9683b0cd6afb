"""Enrichment package for Lead Radar.

This package scrapes business websites for hiring, expansion and
facility-condition signals and attaches them to lead records.
"""

from lead_radar.enrichment.extractor import (
    SignalExtractor,
    enrich_lead,
    process_leads,
    score_enriched_signals,
)
from lead_radar.enrichment.fetcher import PageFetcher
from lead_radar.enrichment.keywords import (
    CAREER_KEYWORDS,
    EXPANSION_KEYWORDS,
    REVIEW_KEYWORDS,
    normalize_text,
)

__all__ = [
    "CAREER_KEYWORDS",
    "EXPANSION_KEYWORDS",
    "REVIEW_KEYWORDS",
    "PageFetcher",
    "SignalExtractor",
    "enrich_lead",
    "normalize_text",
    "process_leads",
    "score_enriched_signals",
]
