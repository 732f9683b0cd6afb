# main.py
"""Lead Radar pipeline and command-line entry point.

The pipeline composes the independent components:
    1. Source leads from Google Places (or a JSON file)
    2. Enrich each lead from its website and attach the signal score
    3. Score each lead against the configured rules
    4. Sort leads by rule score, highest first
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .enrichment import SignalExtractor
from .logging_utils import get_logger, setup_logging
from .models import ScoredLead, ScoringSchema
from .places_client import PlacesClient
from .scoring import evaluate_rules, get_scoring_schema


class LeadRadarPipeline:
    """Orchestrates lead sourcing, enrichment and scoring.

    Attributes:
        places_client: PlacesClient used to source leads.
        extractor: SignalExtractor used for website enrichment.
        schema: Scoring rules applied to every lead.
    """

    def __init__(
        self,
        places_client: Optional[PlacesClient] = None,
        extractor: Optional[SignalExtractor] = None,
        schema: Optional[ScoringSchema] = None,
    ):
        """Initialize the pipeline.

        Args:
            places_client: Optional PlacesClient instance.
            extractor: Optional SignalExtractor instance.
            schema: Optional scoring schema. Defaults to the process-wide schema.
        """
        self.logger = get_logger(__name__)

        self._places_client = places_client
        self._extractor = extractor
        self._schema = schema

        # Track ownership for cleanup
        self._owns_places_client = places_client is None
        self._owns_extractor = extractor is None

    @property
    def places_client(self) -> PlacesClient:
        """Get or create the Places client."""
        if self._places_client is None:
            self._places_client = PlacesClient()
        return self._places_client

    @property
    def extractor(self) -> SignalExtractor:
        """Get or create the signal extractor."""
        if self._extractor is None:
            self._extractor = SignalExtractor()
        return self._extractor

    @property
    def schema(self) -> ScoringSchema:
        """Get the scoring schema, loading the default on first use."""
        if self._schema is None:
            self._schema = get_scoring_schema()
        return self._schema

    def score_leads(self, leads: Sequence[Mapping[str, Any]]) -> List[ScoredLead]:
        """Score leads against the rules and sort them by score, highest first."""
        scored = []
        for lead in leads:
            result = evaluate_rules(lead, self.schema)
            scored.append(
                ScoredLead(lead=dict(lead), score=result.score, reasons=result.reasons)
            )

        scored.sort(key=lambda s: s.score, reverse=True)
        return scored

    def enrich_leads(
        self,
        leads: Sequence[Mapping[str, Any]],
        max_workers: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Enrich leads from their websites and attach the signal score."""
        return self.extractor.process_leads(leads, max_workers=max_workers)

    def run(
        self,
        zip_code: str,
        radius: float,
        category: str,
        enrich: bool = True,
        max_workers: Optional[int] = None,
    ) -> List[ScoredLead]:
        """Source, enrich and score leads for a category around a zip code.

        Args:
            zip_code: Target zip code.
            radius: Search radius in miles.
            category: Business category.
            enrich: Whether to scrape lead websites before scoring.
            max_workers: Enrichment concurrency override.

        Returns:
            Scored leads sorted by score, highest first.
        """
        self.logger.info(
            "Starting lead search",
            extra={"zip_code": zip_code, "radius": radius, "category": category},
        )

        leads = self.places_client.search_leads(zip_code, radius, category)
        if enrich and leads:
            leads = self.enrich_leads(leads, max_workers=max_workers)

        scored = self.score_leads(leads)
        self.logger.info(
            "Lead search completed",
            extra={
                "count": len(scored),
                "top_score": scored[0].score if scored else None,
            },
        )
        return scored

    def close(self) -> None:
        """Close owned clients and release resources."""
        if self._owns_places_client and self._places_client is not None:
            self._places_client.close()

        if self._owns_extractor and self._extractor is not None:
            self._extractor.close()

        self.logger.debug("Pipeline resources closed")

    def __enter__(self) -> "LeadRadarPipeline":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def load_leads(path: str) -> List[Dict[str, Any]]:
    """Read a lead or a list of leads from a JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise ValueError(f"{path} must contain a JSON object or a list of objects")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="lead-radar",
        description="Source, enrich and score business leads",
        epilog="""
Examples:
  %(prog)s search --zip-code 62701 --radius 10 --category dentist
  %(prog)s score leads.json
  %(prog)s enrich leads.json --concurrent 8
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Find, enrich and score leads")
    search.add_argument("--zip-code", "-z", required=True, help="Target zip code")
    search.add_argument(
        "--radius",
        "-r",
        type=float,
        default=10,
        help="Search radius in miles (default: 10)",
    )
    search.add_argument("--category", "-c", required=True, help="Business category")
    search.add_argument(
        "--no-enrich",
        action="store_true",
        help="Skip website enrichment",
    )
    search.add_argument(
        "--concurrent",
        type=int,
        default=None,
        help="Number of websites to enrich concurrently",
    )

    score = subparsers.add_parser("score", help="Score leads from a JSON file")
    score.add_argument("file", help="JSON file with a lead or a list of leads")

    enrich = subparsers.add_parser("enrich", help="Enrich leads from a JSON file")
    enrich.add_argument("file", help="JSON file with a lead or a list of leads")
    enrich.add_argument(
        "--concurrent",
        type=int,
        default=None,
        help="Number of websites to enrich concurrently",
    )

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for Lead Radar.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    args = create_parser().parse_args(argv)
    logger = setup_logging(level="DEBUG" if args.verbose else None)

    try:
        with LeadRadarPipeline() as pipeline:
            if args.command == "search":
                scored = pipeline.run(
                    zip_code=args.zip_code,
                    radius=args.radius,
                    category=args.category,
                    enrich=not args.no_enrich,
                    max_workers=args.concurrent,
                )
                _print_json([s.model_dump() for s in scored])
            elif args.command == "score":
                scored = pipeline.score_leads(load_leads(args.file))
                _print_json([s.model_dump() for s in scored])
            elif args.command == "enrich":
                enriched = pipeline.enrich_leads(
                    load_leads(args.file), max_workers=args.concurrent
                )
                _print_json(enriched)

        return 0

    except Exception as e:
        logger.exception(f"Lead Radar failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
