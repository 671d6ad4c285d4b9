"""
Pytest configuration and shared fixtures.
"""

import httpx
import pytest

from pitchsite.core.config import settings
from pitchsite.core.llm_client import CircuitBreaker


ACME_HTML = """
<html>
<head>
  <title>Acme Logistics | Freight &amp; Warehousing</title>
  <meta name="description" content="Acme moves freight across North America.">
  <meta property="og:image" content="/static/logo.png">
  <script src="https://www.google-analytics.com/analytics.js"></script>
</head>
<body>
  <header><nav><a href="/">Home</a><a href="/about">About</a><a href="/contact">Contact</a></nav></header>
  <h1>Freight made simple</h1>
  <p>Our warehouse teams still handle every invoice by hand and chase paperwork for each shipment.</p>
</body>
</html>
"""


def make_site_transport(pages=None):
    """
    MockTransport serving fixed pages by host.

    Unknown hosts get a 404; hosts ending in .down raise a connect error.
    """
    pages = pages if pages is not None else {"acme.com": ACME_HTML}

    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host.endswith(".down"):
            raise httpx.ConnectError("connection refused", request=request)
        if host in pages:
            return httpx.Response(200, text=pages[host], headers={"content-type": "text/html"})
        return httpx.Response(404, text="not found")

    return httpx.MockTransport(handler)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep tests away from real API keys and reset the circuit breaker."""
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    CircuitBreaker.reset()
    yield
    CircuitBreaker.reset()


@pytest.fixture
def acme_html():
    return ACME_HTML


@pytest.fixture
def site_transport():
    return make_site_transport()


@pytest.fixture
def memory_store():
    from pitchsite.services.storage import MemoryStore
    return MemoryStore()


@pytest.fixture
def api_app(memory_store, site_transport):
    """The FastAPI app wired to an in-memory store and a mocked network."""
    from pitchsite.main import app
    from pitchsite.api.endpoints import limiter
    from pitchsite.services.composer import ContentComposer
    from pitchsite.services.fetcher import WebsiteFetcher

    app.state.store = memory_store
    app.state.fetcher = WebsiteFetcher(transport=site_transport, use_browser=False)
    app.state.composer = ContentComposer()
    app.state.generation_workflow = None
    limiter.reset()

    yield app

    app.state.store = None
    app.state.fetcher = None
    app.state.composer = None
    app.state.generation_workflow = None
