from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlparse, urlsplit, urlunsplit

from requests.utils import requote_uri

from .extract import FieldExtractor
from .fetch import Page, PageFetcher
from .logs import LoggingContext
from .types import ABSOLUTE_URL_RE, NO_IMAGE, Item


DEFAULT_MEDIA_DIR = Path("media") / "products"


def _dedupe_keep_order(urls: Iterable[str]) -> List[str]:
    seen = set()
    result: List[str] = []
    for u in urls:
        if u in seen:
            continue
        seen.add(u)
        result.append(u)
    return result


def _normalize(url: str) -> str:
    parts = urlsplit(url)
    path = parts.path or "/"
    return requote_uri(urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, "")))


def discover_links(
    hrefs: Iterable[Optional[str]],
    base_url: str,
    log: Optional[LoggingContext] = None,
) -> List[str]:
    """
    Turn raw anchor targets into unique absolute http(s) URLs, in the order
    they first appear. Relative, ``mailto:``, ``javascript:`` and fragment-only
    targets are dropped.
    """
    log = log or LoggingContext.default()
    present = [h.strip() for h in hrefs if h and h.strip()]
    absolute = [h for h in _dedupe_keep_order(present) if ABSOLUTE_URL_RE.match(h)]
    resolved: List[str] = []
    for href in absolute:
        try:
            resolved.append(_normalize(urljoin(base_url, href)))
        except ValueError as exc:
            log.error.error("Skipping malformed link %r: %s", href, exc)
    return _dedupe_keep_order(resolved)


def page_links(page: Page, log: Optional[LoggingContext] = None) -> List[str]:
    return discover_links((a.get("href") for a in page.soup.find_all("a", href=True)), page.url, log=log)


class LinkState(str, Enum):
    PENDING = "pending"
    CHECKED = "checked"
    UNAVAILABLE = "unavailable"
    FETCHED = "fetched"
    EXTRACTED = "extracted"
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


@dataclass
class LinkOutcome:
    url: str
    state: LinkState = LinkState.PENDING
    item: Optional[Item] = None
    image_file: Optional[Path] = None


@dataclass
class CrawlReport:
    start_url: str
    candidates: int = 0
    outcomes: List[LinkOutcome] = field(default_factory=list)
    reason: Optional[str] = None

    def count(self, state: LinkState) -> int:
        return sum(1 for o in self.outcomes if o.state == state)

    def summary(self) -> Dict[str, int]:
        terminal = (LinkState.VALID, LinkState.INVALID, LinkState.UNAVAILABLE, LinkState.ERROR)
        return {state.value: self.count(state) for state in terminal}

    @property
    def items(self) -> List[Item]:
        return [o.item for o in self.outcomes if o.state == LinkState.VALID and o.item is not None]


class ProductPageProcessor:
    """Runs one discovered link through check, fetch, extract, validate and image save."""

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: FieldExtractor,
        log: Optional[LoggingContext] = None,
        media_dir: Path = DEFAULT_MEDIA_DIR,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor
        self.log = log or LoggingContext.default()
        self.media_dir = Path(media_dir)

    def process(self, url: str) -> LinkOutcome:
        outcome = LinkOutcome(url=url)
        try:
            return self._process(outcome)
        except Exception as exc:
            outcome.state = LinkState.ERROR
            outcome.item = None
            self.log.error.error("Error occurred during parsing %s: %s", url, exc)
            return outcome

    def _process(self, outcome: LinkOutcome) -> LinkOutcome:
        url = outcome.url
        if not self.fetcher.is_available(url):
            outcome.state = LinkState.UNAVAILABLE
            self.log.error.error("Skipping unavailable product page: %s", url)
            return outcome
        outcome.state = LinkState.CHECKED

        response = self.fetcher.get(url)
        if response is None:
            outcome.state = LinkState.UNAVAILABLE
            self.log.error.error("Skipping unavailable product page: %s", url)
            return outcome
        page = Page(url=response.url or url, html=response.text)
        outcome.state = LinkState.FETCHED

        item = self.extractor.extract(page)
        outcome.state = LinkState.EXTRACTED

        if not item.is_valid():
            outcome.state = LinkState.INVALID
            self.log.error.error("Invalid product data: %s", url)
            return outcome

        outcome.state = LinkState.VALID
        outcome.item = item
        try:
            outcome.image_file = self.save_image(item)
        except Exception as exc:
            self.log.error.error("Error saving image for %s: %s", url, exc)
        self.log.app.info("Product accepted: %s (%s)", item.name, url)
        return outcome

    def save_image(self, item: Item) -> Optional[Path]:
        if item.image_path == NO_IMAGE:
            return None
        filename = Path(urlparse(item.image_path).path).name
        if not filename:
            self.log.error.error("Error saving image: no file name in %s", item.image_path)
            return None
        content = self.fetcher.download(item.image_path)
        if content is None:
            self.log.error.error("Error saving image: could not download %s", item.image_path)
            return None
        target = self.media_dir / filename
        try:
            self.media_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            self.log.error.error("Error saving image %s: %s", target, exc)
            return None
        self.log.app.info("Image saved: %s", target)
        return target


class Crawler:
    def __init__(
        self,
        fetcher: PageFetcher,
        processor: ProductPageProcessor,
        log: Optional[LoggingContext] = None,
    ) -> None:
        self.fetcher = fetcher
        self.processor = processor
        self.log = log or LoggingContext.default()
        self.last_report: Optional[CrawlReport] = None

    def _stop(self, report: CrawlReport, reason: str) -> List[Item]:
        report.reason = reason
        self.log.error.error(reason)
        self.last_report = report
        return []

    def crawl(
        self,
        start_url: str,
        limit: Optional[int] = None,
        workers: int = 1,
        stop_event: Optional[threading.Event] = None,
    ) -> List[Item]:
        """
        Crawl every outbound link of ``start_url`` and return the valid items
        in discovery order. An unavailable start page or a page without
        candidate links yields an empty list, not an exception.
        """
        report = CrawlReport(start_url=start_url)
        start_page = self.fetcher.fetch(start_url)
        if start_page is None:
            return self._stop(report, f"Start URL is not available: {start_url}")

        links = page_links(start_page, self.log)
        if limit is not None:
            links = links[: max(limit, 0)]
        if not links:
            return self._stop(report, f"No product links found on the start page: {start_url}")
        report.candidates = len(links)
        self.log.app.info("Found %d candidate links on %s", len(links), start_url)

        def run(url: str) -> Optional[LinkOutcome]:
            if stop_event is not None and stop_event.is_set():
                return None
            return self.processor.process(url)

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(run, links))
        else:
            results = []
            for url in links:
                if stop_event is not None and stop_event.is_set():
                    break
                results.append(run(url))

        report.outcomes = [o for o in results if o is not None]
        if stop_event is not None and stop_event.is_set():
            report.reason = "Crawl cancelled"
            self.log.app.info("Crawl cancelled after %d of %d links", len(report.outcomes), len(links))
        self.last_report = report
        self.log.app.info("Crawl finished for %s: %s", start_url, report.summary())
        return report.items
