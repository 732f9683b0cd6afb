"""Lead Radar: lead sourcing, website signal enrichment and rule-based scoring."""

__version__ = "0.1.0"
