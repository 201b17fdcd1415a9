"""
Screen-scraping helpers for special pages that have no API module.

Pages are fetched and their forms submitted through the requests session
owned by an mwclient Site, so login cookies are shared with the API client.
Responses are inspected for MediaWiki's ``<div class="error">`` box.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Set
from urllib.parse import quote, urljoin

import mwclient
import requests
from bs4 import BeautifulSoup

from stewardbot.constants import DEFAULT_EXTRA


log = logging.getLogger(__name__)

SUBMIT_TYPES = ("submit", "image")
SKIPPED_TYPES = ("reset", "button", "file")


class FailureKind(str, Enum):
    """Why a screen-scraped action did not go through."""
    TRANSPORT = "transport"
    SITE = "site"
    NOT_FOUND = "not_found"
    INVALID = "invalid"


@dataclass
class ScrapeResult:
    """
    Outcome of a single fetch or form submission.

    Either response is set and failure is None, or failure names what went
    wrong and message carries the diagnostic text.
    """
    response: Optional[requests.Response] = None
    failure: Optional[FailureKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, response: requests.Response) -> "ScrapeResult":
        return cls(response=response)

    @classmethod
    def failed(cls, kind: FailureKind, message: str,
               response: Optional[requests.Response] = None) -> "ScrapeResult":
        return cls(response=response, failure=kind, message=message)


@dataclass
class HTMLForm:
    """A form as a browser would submit it before any user input."""
    action: str
    method: str = "get"
    fields: Dict[str, str] = field(default_factory=dict)
    checkboxes: Dict[str, str] = field(default_factory=dict)
    names: Set[str] = field(default_factory=set)


def find_error(html: str) -> Optional[str]:
    """
    Return the text of the first ``<div class="error">`` in a page.

    Args:
        html: Page source; malformed markup is tolerated

    Returns:
        Whitespace-collapsed error text, or None if the page has no error box
    """
    soup = BeautifulSoup(html or "", "html.parser")
    error = soup.find("div", class_="error")
    if error is None:
        return None
    return " ".join(error.get_text(" ").split())


def check_response(response: requests.Response) -> ScrapeResult:
    """Classify a response as success, transport failure or site error."""
    if not response.ok:
        return ScrapeResult.failed(
            FailureKind.TRANSPORT,
            f"HTTP {response.status_code} for {response.url}",
            response,
        )
    error = find_error(response.text)
    if error is not None:
        return ScrapeResult.failed(FailureKind.SITE, error, response)
    return ScrapeResult.success(response)


def _parse_form(form) -> HTMLForm:
    parsed = HTMLForm(
        action=form.get("action") or "",
        method=(form.get("method") or "get").lower(),
    )
    clicked = False
    for tag in form.find_all(["input", "select", "textarea", "button"]):
        name = tag.get("name")
        if not name:
            continue
        parsed.names.add(name)

        if tag.name == "select":
            options = tag.find_all("option")
            chosen = [o for o in options if o.has_attr("selected")] or options[:1]
            if chosen:
                parsed.fields[name] = chosen[0].get("value", chosen[0].get_text().strip())
            continue
        if tag.name == "textarea":
            parsed.fields[name] = tag.get_text()
            continue

        input_type = (tag.get("type") or ("submit" if tag.name == "button" else "text")).lower()
        value = tag.get("value", "")
        if input_type == "checkbox":
            parsed.checkboxes[name] = tag.get("value", "on")
            if tag.has_attr("checked"):
                parsed.fields[name] = parsed.checkboxes[name]
        elif input_type == "radio":
            if tag.has_attr("checked"):
                parsed.fields[name] = value
        elif input_type in SUBMIT_TYPES:
            # Only the first submit button counts as clicked
            if not clicked:
                parsed.fields[name] = value
                clicked = True
        elif input_type not in SKIPPED_TYPES:
            parsed.fields[name] = value
    return parsed


def parse_forms(html: str) -> List[HTMLForm]:
    """Parse every form on a page, in document order."""
    soup = BeautifulSoup(html or "", "html.parser")
    return [_parse_form(form) for form in soup.find_all("form")]


def select_form(forms: List[HTMLForm], wanted: Mapping[str, object]) -> Optional[HTMLForm]:
    """Pick the first form carrying every wanted field name, or None."""
    for form in forms:
        if set(wanted) <= form.names:
            return form
    return None


def _is_checked(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false")
    return bool(value)


def encode_fields(form: HTMLForm, overrides: Mapping[str, object]) -> Dict[str, str]:
    """
    Overlay caller supplied values on a form's defaults.

    Checkboxes behave like a browser: checked sends the box's own value,
    unchecked leaves the field out. Other booleans become "1"/"0".
    """
    data = dict(form.fields)
    for name, value in overrides.items():
        if name in form.checkboxes:
            if _is_checked(value):
                data[name] = form.checkboxes[name]
            else:
                data.pop(name, None)
        elif isinstance(value, bool):
            data[name] = "1" if value else "0"
        else:
            data[name] = str(value)
    return data


class ScreenScraper:
    """
    Fetches index.php pages and submits their forms over a Site's session.

    Args:
        site: A logged-in mwclient Site; its connection, host, path and
              scheme are used to build and send requests
        extra: Query string appended to every page URL
        timeout: Per-request timeout in seconds, None for the session default
    """

    def __init__(self, site: mwclient.Site, extra: str = DEFAULT_EXTRA,
                 timeout: Optional[float] = None):
        self.site = site
        self.extra = extra
        self.timeout = timeout

    @property
    def session(self) -> requests.Session:
        return self.site.connection

    def url_for(self, page: str, no_escape: bool = False, extra: Optional[str] = None) -> str:
        if not no_escape:
            page = quote(page, safe=":/")
        if extra is None:
            extra = self.extra
        scheme = getattr(self.site, "scheme", None) or "https"
        url = f"{scheme}://{self.site.host}{self.site.path}index.php?title={page}"
        if extra:
            url += extra
        return url

    def get(self, page: str, no_escape: bool = False, extra: Optional[str] = None) -> ScrapeResult:
        """
        Retrieve a page, failing on transport errors and on-page error boxes.

        Args:
            page: Page title, optionally followed by "&key=value" pairs when
                  no_escape is set
            no_escape: Use the title as given instead of URL-escaping it
            extra: Query string to append, defaults to self.extra

        Returns:
            ScrapeResult wrapping the page response
        """
        url = self.url_for(page, no_escape, extra)
        log.debug("Retrieving %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as error:
            return ScrapeResult.failed(FailureKind.TRANSPORT, f"Failed to retrieve {url}: {error}")
        return check_response(response)

    def submit_form(self, page: requests.Response, fields: Mapping[str, object]) -> ScrapeResult:
        """
        Fill in and submit the form on a previously fetched page.

        Hidden inputs such as the edit token are carried over from the page.

        Args:
            page: Response holding the form
            fields: Values to set, keyed by input name

        Returns:
            ScrapeResult wrapping the response to the submission
        """
        form = select_form(parse_forms(page.text), fields)
        if form is None:
            return ScrapeResult.failed(
                FailureKind.SITE, f"No form with fields {', '.join(sorted(fields))} on {page.url}", page)

        action = urljoin(page.url, form.action) if form.action else page.url
        data = encode_fields(form, fields)
        log.debug("Submitting %s to %s", sorted(data), action)
        try:
            if form.method == "get":
                response = self.session.get(action, params=data, timeout=self.timeout)
            else:
                response = self.session.post(action, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as error:
            return ScrapeResult.failed(FailureKind.TRANSPORT, f"Failed to submit to {action}: {error}")
        return check_response(response)

    def put(self, page: str, fields: Mapping[str, object], no_escape: bool = False,
            extra: Optional[str] = None) -> ScrapeResult:
        """Retrieve a page and submit its form with the given fields."""
        result = self.get(page, no_escape, extra)
        if not result.ok:
            return result
        return self.submit_form(result.response, fields)


__all__ = [
    'FailureKind',
    'ScrapeResult',
    'HTMLForm',
    'find_error',
    'check_response',
    'parse_forms',
    'select_form',
    'encode_fields',
    'ScreenScraper',
]
