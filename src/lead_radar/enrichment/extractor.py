"""Website signal extraction for leads.

Given a lead with a ``websiteUri``, the extractor fetches the homepage and any
careers pages linked from it, and records three kinds of keyword signals:

- ``careers``: verbatim text of careers-page elements mentioning jobs, plus
  titles of JobPosting structured-data blocks found on the homepage
- ``expansionSignals``: growth/relocation phrases found on the homepage
- ``reviewMentions``: facility-condition phrases found on the homepage

Enrichment is best effort: unreachable pages and malformed structured data
contribute nothing and never raise.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Comment

from ..config import config
from .fetcher import SUPPORTED_SCHEMES, PageFetcher
from .keywords import (
    CAREER_KEYWORDS,
    EXPANSION_KEYWORDS,
    REVIEW_KEYWORDS,
    contains_keyword,
    find_keywords,
    normalize_text,
)

logger = logging.getLogger(__name__)

HTML_PARSER = "lxml"

# Elements scanned on careers pages
CAREER_ELEMENT_TAGS = ["a", "li", "p", "span", "h1", "h2", "h3", "h4"]

# Tags whose text is not visible page content
NON_CONTENT_TAGS = {"script", "style", "noscript", "template"}

JOB_POSTING_TYPE = "JobPosting"
JOB_POSTING_FALLBACK_TITLE = "Job Posting"

# Fixed weights for the signal score
CAREER_SIGNAL_POINTS = 5
REVIEW_SIGNAL_POINTS = 8
EXPANSION_SIGNAL_POINTS = 10


def _dedupe(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))


def visible_text(soup: BeautifulSoup) -> str:
    """Text of the page body, excluding comments and script and style contents."""
    root = soup.body or soup
    return " ".join(
        text for text in root.find_all(string=True)
        if not isinstance(text, Comment)
        and text.parent is not None
        and text.parent.name not in NON_CONTENT_TAGS
    )


def extract_careers_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Find links that look like careers pages.

    A link qualifies when its text or its href mentions a career keyword
    after normalization. Hrefs are resolved against ``base_url``; fragments
    are dropped and only http(s) URLs are kept.

    Returns:
        Absolute URLs in discovery order, without duplicates
    """
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href") or ""
        normalized_text = normalize_text(anchor.get_text())
        normalized_href = normalize_text(href)

        if not (
            contains_keyword(normalized_text, CAREER_KEYWORDS)
            or contains_keyword(normalized_href, CAREER_KEYWORDS)
        ):
            continue

        try:
            url, _ = urldefrag(urljoin(base_url, href.strip()))
            scheme = urlparse(url).scheme.lower()
        except ValueError as e:
            logger.debug(
                "Skipping malformed careers link",
                extra={"href": href, "error": str(e)},
            )
            continue

        if scheme in SUPPORTED_SCHEMES:
            links.append(url)

    return _dedupe(links)


def extract_career_snippets(html: str) -> List[str]:
    """Collect the trimmed text of careers-page elements that mention jobs."""
    soup = BeautifulSoup(html, HTML_PARSER)
    snippets = []
    for element in soup.find_all(CAREER_ELEMENT_TAGS):
        text = element.get_text()
        if contains_keyword(normalize_text(text), CAREER_KEYWORDS):
            snippets.append(text.strip())
    return snippets


def _iter_structured_nodes(data: Any):
    if isinstance(data, list):
        for item in data:
            yield from _iter_structured_nodes(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from _iter_structured_nodes(graph)


def _is_job_posting(node: Mapping[str, Any]) -> bool:
    declared = node.get("@type")
    if isinstance(declared, list):
        return JOB_POSTING_TYPE in declared
    return declared == JOB_POSTING_TYPE


def extract_job_postings(soup: BeautifulSoup) -> List[str]:
    """Titles of JobPosting blocks declared in JSON-LD script tags.

    Blocks that are not valid JSON are skipped.
    """
    titles = []
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or "")
        except (ValueError, RecursionError):
            continue

        for node in _iter_structured_nodes(data):
            if _is_job_posting(node):
                title = node.get("title")
                titles.append(
                    title if isinstance(title, str) and title else JOB_POSTING_FALLBACK_TITLE
                )
    return titles


def score_enriched_signals(lead: Mapping[str, Any]) -> Dict[str, Any]:
    """Attach a fixed-weight ``aiScore`` based on which signal lists are non-empty.

    This is independent of the rule-based score in :mod:`lead_radar.scoring`.

    Returns:
        A new dict with the lead's fields plus ``aiScore``
    """
    score = 0
    if lead.get("careers"):
        score += CAREER_SIGNAL_POINTS
    if lead.get("reviewMentions"):
        score += REVIEW_SIGNAL_POINTS
    if lead.get("expansionSignals"):
        score += EXPANSION_SIGNAL_POINTS
    return {**lead, "aiScore": score}


def _check_lead(lead: Any) -> None:
    if not isinstance(lead, Mapping):
        raise TypeError(f"lead must be a mapping, got {type(lead).__name__}")
    website = lead.get("websiteUri")
    if website is not None and not isinstance(website, str):
        raise ValueError(
            f"websiteUri must be a string, got {type(website).__name__}"
        )


class SignalExtractor:
    """Enriches leads with hiring, expansion and facility signals from their websites.

    Attributes:
        max_workers: Number of leads enriched concurrently by process_leads
        fetcher: PageFetcher used for all HTTP requests

    Example:
        with SignalExtractor(max_workers=4) as extractor:
            results = extractor.process_leads(leads)
    """

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        max_workers: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the extractor.

        Args:
            fetcher: Optional PageFetcher. If not provided, one is created
                on first use and closed with the extractor.
            max_workers: Concurrency for process_leads (default: ENRICH_MAX_WORKERS)
            logger: Optional logger instance. If None, creates one.
        """
        self.max_workers = max(1, max_workers or config.ENRICH_MAX_WORKERS)
        self.logger = logger or logging.getLogger("lead_radar.enrichment.extractor")
        self._fetcher = fetcher
        self._owns_fetcher = fetcher is None

    @property
    def fetcher(self) -> PageFetcher:
        """Get or create the page fetcher."""
        if self._fetcher is None:
            self._fetcher = PageFetcher(pool_size=self.max_workers)
        return self._fetcher

    def enrich_lead(self, lead: Mapping[str, Any]) -> Dict[str, Any]:
        """Scrape a lead's website for signals.

        Args:
            lead: Lead record; only ``websiteUri`` is read

        Returns:
            A new dict with the lead's fields plus ``careers``,
            ``reviewMentions`` and ``expansionSignals``. If the lead has no
            website or its homepage cannot be fetched, the lead is returned
            unchanged.

        Raises:
            TypeError: If lead is not a mapping
            ValueError: If websiteUri is present but not a string
        """
        _check_lead(lead)
        website = lead.get("websiteUri")
        if not website:
            return lead

        homepage_html = self.fetcher.fetch_html(website)
        if not homepage_html:
            self.logger.info(
                "Homepage unavailable, lead left unenriched",
                extra={"lead": lead.get("name"), "url": website},
            )
            return lead

        soup = BeautifulSoup(homepage_html, HTML_PARSER)
        body_text = normalize_text(visible_text(soup))

        expansion_signals = find_keywords(body_text, EXPANSION_KEYWORDS)
        review_mentions = find_keywords(body_text, REVIEW_KEYWORDS)

        careers: List[str] = []
        career_links = extract_careers_links(soup, website)
        for link in career_links:
            career_html = self.fetcher.fetch_html(link)
            if not career_html:
                continue
            careers.extend(extract_career_snippets(career_html))

        careers.extend(extract_job_postings(soup))

        enriched = {
            **lead,
            "careers": _dedupe(careers),
            "reviewMentions": _dedupe(review_mentions),
            "expansionSignals": _dedupe(expansion_signals),
        }

        self.logger.info(
            "Lead enriched",
            extra={
                "lead": lead.get("name"),
                "url": website,
                "career_links": len(career_links),
                "careers": len(enriched["careers"]),
                "review_mentions": len(enriched["reviewMentions"]),
                "expansion_signals": len(enriched["expansionSignals"]),
            },
        )
        return enriched

    def _enrich_isolated(self, lead: Mapping[str, Any]) -> Mapping[str, Any]:
        """Enrich one lead of a batch without letting its failure reach siblings."""
        try:
            return self.enrich_lead(lead)
        except Exception as e:
            self.logger.error(
                f"Enrichment failed for lead {lead.get('name')!r}: {e}",
                extra={"lead": lead.get("name"), "error": str(e)},
            )
            return lead

    def process_leads(
        self,
        leads: Iterable[Mapping[str, Any]],
        max_workers: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Enrich a batch of leads concurrently, then signal-score each one.

        Args:
            leads: Lead records
            max_workers: Override the extractor's concurrency limit

        Returns:
            Enriched and scored leads, in input order

        Raises:
            TypeError / ValueError: If any lead fails boundary validation;
                checked before any page is fetched
        """
        leads = list(leads)
        for lead in leads:
            _check_lead(lead)

        if not leads:
            return []

        workers = max(1, min(max_workers or self.max_workers, len(leads)))
        self.logger.info(
            "Enriching leads",
            extra={"count": len(leads), "workers": workers},
        )

        with ThreadPoolExecutor(max_workers=workers) as executor:
            enriched = list(executor.map(self._enrich_isolated, leads))

        return [score_enriched_signals(lead) for lead in enriched]

    def close(self) -> None:
        """Close the owned fetcher and release resources."""
        if self._owns_fetcher and self._fetcher is not None:
            self._fetcher.close()
            self._fetcher = None

    def __enter__(self) -> "SignalExtractor":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def enrich_lead(lead: Mapping[str, Any]) -> Dict[str, Any]:
    """Enrich a single lead with a short-lived extractor."""
    with SignalExtractor() as extractor:
        return extractor.enrich_lead(lead)


def process_leads(
    leads: Iterable[Mapping[str, Any]],
    max_workers: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Enrich and signal-score a batch of leads with a short-lived extractor."""
    with SignalExtractor(max_workers=max_workers) as extractor:
        return extractor.process_leads(leads)
