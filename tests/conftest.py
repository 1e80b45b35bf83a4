import io
from pathlib import Path

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from md2pdf.console import ConsoleLogger

TWO_PAGE_PDF = (
    b"%PDF-1.4\n"
    b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"
    b"2 0 obj << /Type /Pages /Kids [3 0 R 4 0 R] /Count 2 >> endobj\n"
    b"3 0 obj << /Type /Page /Parent 2 0 R >> endobj\n"
    b"4 0 obj << /Type /Page /Parent 2 0 R >> endobj\n"
    b"%%EOF\n"
)


class FakePage:
    def __init__(self, load_timeout=False, diagram_timeout=False, pdf_error=None):
        self.load_timeout = load_timeout
        self.diagram_timeout = diagram_timeout
        self.pdf_error = pdf_error
        self.calls = []
        self.html = None
        self.pdf_kwargs = None

    async def set_content(self, html, wait_until=None, timeout=None):
        self.calls.append("set_content")
        self.html = html
        self.load_timeout_ms = timeout
        self.wait_until = wait_until
        if self.load_timeout:
            raise PlaywrightTimeoutError("Timeout exceeded while loading content")

    async def evaluate(self, script):
        self.calls.append("evaluate")
        return True

    async def wait_for_function(self, script, timeout=None):
        self.calls.append("wait_for_function")
        self.diagram_timeout_ms = timeout
        if self.diagram_timeout:
            raise PlaywrightTimeoutError("Timeout exceeded waiting for function")
        return True

    async def pdf(self, **kwargs):
        self.calls.append("pdf")
        self.pdf_kwargs = kwargs
        if self.pdf_error:
            raise self.pdf_error
        Path(kwargs["path"]).write_bytes(TWO_PAGE_PDF)
        return TWO_PAGE_PDF


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self, viewport=None, device_scale_factor=None):
        self.viewport = viewport
        return self.page

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser):
        self.browser = browser
        self.launches = 0

    async def launch(self, headless=True, args=None):
        self.launches += 1
        return self.browser


class FakePlaywright:
    """Stands in for ``async_playwright``: call it to get the context manager."""

    def __init__(self, page=None):
        self.page = page or FakePage()
        self.browser = FakeBrowser(self.page)
        self.chromium = FakeChromium(self.browser)
        self.sessions = 0

    def __call__(self):
        self.sessions += 1
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def logger(log_stream):
    return ConsoleLogger(verbose=True, stream=log_stream)
