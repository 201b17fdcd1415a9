"""
StewardBot - steward actions for MediaWiki bots.

This package provides global IP blocking/unblocking and CentralAuth account
locking/unlocking on top of an mwclient Site, by screen-scraping the special
pages that implement them.
"""

from stewardbot.actions import ca_lock, ca_unlock, g_block, g_unblock, is_g_blocked
from stewardbot.config import StewardConfig
from stewardbot.iprange import NormalizedAddress, normalize_address, range_to_cidr
from stewardbot.options import AccountLockRequest, GlobalBlockRequest, GlobalUnblockRequest
from stewardbot.scrape import FailureKind, ScrapeResult, ScreenScraper, find_error

__version__ = "0.1.0"

__all__ = [
    # actions
    'ca_lock',
    'ca_unlock',
    'g_block',
    'g_unblock',
    'is_g_blocked',
    # config
    'StewardConfig',
    # iprange
    'NormalizedAddress',
    'normalize_address',
    'range_to_cidr',
    # options
    'AccountLockRequest',
    'GlobalBlockRequest',
    'GlobalUnblockRequest',
    # scrape
    'FailureKind',
    'ScrapeResult',
    'ScreenScraper',
    'find_error',
]
