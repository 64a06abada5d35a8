from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .logs import LoggingContext


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# (connect, read) seconds
DEFAULT_TIMEOUT: Tuple[float, float] = (10, 10)


def create_session(user_agent: Optional[str] = None, total_retries: int = 0) -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9,uk-UA;q=0.8,uk;q=0.7",
            "Connection": "keep-alive",
        }
    )

    if total_retries > 0:
        retry = Retry(
            total=total_retries,
            backoff_factor=0.7,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET", "HEAD"),
            raise_on_status=False,
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
    return session


@dataclass
class Page:
    url: str
    html: str
    _soup: Optional[BeautifulSoup] = field(default=None, init=False, repr=False)

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, "lxml")
        return self._soup


class PageFetcher:
    """HEAD-then-GET fetcher that reports absence as ``None`` instead of raising."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        log: Optional[LoggingContext] = None,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
        pause_seconds: float = 0.0,
    ) -> None:
        self.session = session or create_session()
        self.log = log or LoggingContext.default()
        self.timeout = timeout
        self.pause_seconds = pause_seconds

    def is_available(self, url: str) -> bool:
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            self.log.error.error("Error checking URL %s: %s", url, exc)
            return False
        self.log.app.debug("Checked URL: %s, Response Code: %s", url, response.status_code)
        if response.status_code != 200:
            self.log.error.error("URL is not available: %s (status %s)", url, response.status_code)
            return False
        return True

    def get(self, url: str) -> Optional[requests.Response]:
        if self.pause_seconds > 0:
            time.sleep(self.pause_seconds)
        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as exc:
            self.log.error.error("Error fetching %s: %s", url, exc)
            return None
        if response.status_code != 200:
            self.log.error.error("Unexpected status %s for %s", response.status_code, url)
            return None
        return response

    def fetch(self, url: str) -> Optional[Page]:
        """
        Fetch an HTML document. Returns ``None`` when the URL does not answer
        200 to the availability check or to the GET itself.
        """
        if not self.is_available(url):
            return None
        response = self.get(url)
        if response is None:
            return None
        return Page(url=response.url or url, html=response.text)

    def download(self, url: str) -> Optional[bytes]:
        response = self.get(url)
        return response.content if response is not None else None
