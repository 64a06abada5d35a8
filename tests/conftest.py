import pytest
import requests

from catalog_scraper.fetch import PageFetcher
from catalog_scraper.logs import LoggingContext
from catalog_scraper.types import SelectorConfig


START_URL = "https://shop.example.com/catalog"


class FakeResponse:
    def __init__(self, status_code=200, text="", content=b"", url=None):
        self.status_code = status_code
        self.text = text
        self.content = content or text.encode("utf-8")
        self.url = url


class FakeSession:
    """Stands in for requests.Session: maps URL -> FakeResponse or exception."""

    def __init__(self, routes=None, head_routes=None):
        self.routes = dict(routes or {})
        self.head_routes = dict(head_routes or {})
        self.calls = []

    def _answer(self, method, url, table, timeout):
        self.calls.append((method, url, timeout))
        answer = table.get(url, FakeResponse(status_code=404))
        if isinstance(answer, Exception):
            raise answer
        if answer.url is None:
            answer.url = url
        return answer

    def head(self, url, timeout=None, allow_redirects=True):
        table = self.head_routes if url in self.head_routes else self.routes
        return self._answer("HEAD", url, table, timeout)

    def get(self, url, timeout=None, allow_redirects=True):
        return self._answer("GET", url, self.routes, timeout)


@pytest.fixture
def log():
    return LoggingContext.default()


@pytest.fixture
def selectors():
    return SelectorConfig(
        start_page=START_URL,
        product_name_selector="h1.title",
        product_price_selector=".price",
        product_category_selector=".category",
        product_description_selector=".description",
        product_image_selector="img.main",
    )


@pytest.fixture
def make_fetcher(log):
    def factory(routes=None, head_routes=None):
        session = FakeSession(routes, head_routes)
        return PageFetcher(session=session, log=log), session

    return factory


@pytest.fixture
def timeout_error():
    return requests.exceptions.ConnectTimeout("timed out")


def product_html(name="Widget", price="$10", category="Tools", description="Solid steel", image="/img/widget.jpg"):
    parts = ["<html><body>"]
    if name is not None:
        parts.append(f'<h1 class="title">{name}</h1>')
    if price is not None:
        parts.append(f'<span class="price">{price}</span>')
    if category is not None:
        parts.append(f'<div class="category">{category}</div>')
    if description is not None:
        parts.append(f'<p class="description">{description}</p>')
    if image is not None:
        parts.append(f'<img class="main" src="{image}">')
    parts.append("</body></html>")
    return "".join(parts)


@pytest.fixture
def product_page_html():
    return product_html
