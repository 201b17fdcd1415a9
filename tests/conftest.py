"""Pytest configuration - runs before tests are collected."""

import os
from unittest.mock import MagicMock

import pytest
import requests

from stewardbot.scrape import ScrapeResult

# Dummy credentials so config loading passes validation - tests don't actually connect
os.environ.setdefault("STEWARDBOT_USERNAME", "TestBot@Test")
os.environ.setdefault("STEWARDBOT_PASSWORD", "test_password")


def build_response(body: str, status: int = 200,
                   url: str = "https://meta.wikimedia.org/w/index.php?title=Special:GlobalBlock") -> requests.Response:
    """Build a real requests.Response with a preset body."""
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    response.url = url
    return response


class FakeScraper:
    """Records put() calls instead of talking to a wiki."""

    def __init__(self, result=None):
        self.site = MagicMock()
        self.calls = []
        self.result = result or ScrapeResult.success(build_response("<html><body>Done</body></html>"))

    def put(self, page, fields, no_escape=False, extra=None):
        self.calls.append({"page": page, "fields": dict(fields), "no_escape": no_escape})
        return self.result


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def fake_scraper():
    return FakeScraper()


@pytest.fixture
def fake_site():
    site = MagicMock()
    site.host = "meta.wikimedia.org"
    site.path = "/w/"
    site.scheme = "https"
    return site
