"""
Steward actions: global (un)blocks and CentralAuth (un)locks.

Every action takes a ScreenScraper bound to a logged-in Site and either a
bare target or a mapping of options, fetches the special page, submits its
form once and returns the response. Failures are logged as warnings and
reported as None.
"""

import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote

import mwclient
import requests

from stewardbot.constants import (
    CENTRAL_AUTH_PAGE,
    DEFAULT_UNLOCK_REASON,
    GLOBAL_BLOCK_PAGE,
    GLOBAL_UNBLOCK_PAGE,
)
from stewardbot.iprange import normalize_address
from stewardbot.options import AccountLockRequest, GlobalBlockRequest, GlobalUnblockRequest
from stewardbot.scrape import FailureKind, ScrapeResult, ScreenScraper


log = logging.getLogger(__name__)

BlockInput = Union[str, Mapping[str, Any], GlobalBlockRequest]
UnblockInput = Union[str, Mapping[str, Any], GlobalUnblockRequest]
LockInput = Union[str, Mapping[str, Any], AccountLockRequest]


def _outcome(action: str, target: str, result: ScrapeResult) -> Optional[requests.Response]:
    if result.ok:
        log.info("%s of %s succeeded", action, target)
        return result.response
    log.warning("%s of %s failed (%s): %s", action, target, result.failure.value, result.message)
    return None


def is_g_blocked(site: mwclient.Site, ip: str) -> Optional[str]:
    """
    Find the global block currently affecting an IP.

    Args:
        site: The mwclient Site connection
        ip: A single address, typically the first address of a range

    Returns:
        The blocked address or CIDR range, or None if the IP is not blocked
        or the lookup failed
    """
    try:
        resp = site.api("query", list="globalblocks", bgip=ip, bgprop="address|target|range")
    except (mwclient.errors.MwClientError, requests.exceptions.RequestException) as error:
        log.error("Failed to look up global blocks for %s: %s", ip, error)
        return None

    blocks = ((resp or {}).get("query") or {}).get("globalblocks") or []
    for block in blocks:
        address = block.get("address") or block.get("target")
        if address:
            return address
    return None


def g_block(scraper: ScreenScraper, target: BlockInput, strict: bool = False) -> Optional[requests.Response]:
    """
    Place a global block on an IP or IP range.

    Ranges may be given in CIDR or "start-end" form; the latter is converted
    to the smallest covering CIDR block.

        g_block(scraper, "127.0.0.0-127.0.0.255")
        g_block(scraper, {"ip": "127.0.0.1", "anon_only": True, "expiry": "1 week"})

    Args:
        scraper: ScreenScraper bound to a logged-in Site
        target: IP expression, or mapping with ip, anon_only, reason, expiry
        strict: Abort on a malformed address instead of submitting it as given

    Returns:
        The response to the form submission, or None on failure
    """
    request = GlobalBlockRequest.from_input(target)
    normalized = normalize_address(request.ip)
    if strict and not normalized.valid:
        return _outcome("Global block", request.ip,
                        ScrapeResult.failed(FailureKind.INVALID, f"Invalid IP {request.ip}"))

    result = scraper.put(GLOBAL_BLOCK_PAGE, request.to_fields(normalized.address), no_escape=True)
    return _outcome("Global block", normalized.address, result)


def g_unblock(scraper: ScreenScraper, target: UnblockInput, strict: bool = False) -> Optional[requests.Response]:
    """
    Remove the global block affecting an IP or range.

    Block ranges are normalized by the wiki when placed, so for a range the
    block actually covering its first address is looked up and removed.

    Args:
        scraper: ScreenScraper bound to a logged-in Site
        target: IP expression, or mapping with ip and reason
        strict: Abort on a malformed address instead of submitting it as given

    Returns:
        The response to the form submission, or None on failure
    """
    request = GlobalUnblockRequest.from_input(target)
    normalized = normalize_address(request.ip)
    if strict and not normalized.valid:
        return _outcome("Global unblock", request.ip,
                        ScrapeResult.failed(FailureKind.INVALID, f"Invalid IP {request.ip}"))

    address = normalized.address
    if normalized.is_range:
        address = is_g_blocked(scraper.site, normalized.start)
        if not address:
            return _outcome("Global unblock", request.ip, ScrapeResult.failed(
                FailureKind.NOT_FOUND, f"Couldn't find the matching rangeblock for {normalized.start}"))

    result = scraper.put(GLOBAL_UNBLOCK_PAGE, request.to_fields(address), no_escape=True)
    return _outcome("Global unblock", address, result)


def ca_lock(scraper: ScreenScraper, target: LockInput) -> Optional[requests.Response]:
    """
    Lock (and optionally hide) a global account with CentralAuth.

    Passing only a username locks the account without hiding it.

        ca_lock(scraper, "Mike.lifeguard")
        ca_lock(scraper, {"user": "Mike.lifeguard", "hide": 1, "reason": "test"})

    Args:
        scraper: ScreenScraper bound to a logged-in Site
        target: Username, or mapping with user, lock, hide, reason

    Returns:
        The response to the form submission, or None on failure
    """
    request = AccountLockRequest.from_input(target)
    page = f"{CENTRAL_AUTH_PAGE}&target={quote(request.target, safe='')}"
    result = scraper.put(page, request.to_fields(), no_escape=True)
    return _outcome("Lock" if request.lock else "Unlock", request.user, result)


def ca_unlock(scraper: ScreenScraper, target: LockInput) -> Optional[requests.Response]:
    """Same as ca_lock() but unlocking unless told otherwise."""
    request = AccountLockRequest.from_input(target, lock=False, reason=DEFAULT_UNLOCK_REASON)
    return ca_lock(scraper, request)


__all__ = [
    'is_g_blocked',
    'g_block',
    'g_unblock',
    'ca_lock',
    'ca_unlock',
]
