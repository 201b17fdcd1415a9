#!/usr/bin/env python3
"""
StewardBot - command-line steward actions

Runs a single steward action against a Wikimedia wiki (Meta by default):

  gblock TARGET      place a global block on an IP, CIDR range or start-end range
  gunblock TARGET    remove the global block affecting an IP or range
  lock USER          lock (and optionally hide) a global account
  unlock USER        unlock a global account

The bot logs in through mwclient and reuses that session to submit the
special page forms, since these actions have no usable API module.

Environment variables (all ASCII):

  STEWARDBOT_USERNAME          Required. BotPassword username, e.g. "Example@steward"
  STEWARDBOT_PASSWORD          Required. BotPassword password
  STEWARDBOT_API_HOST          Optional. Host for wiki (default: "meta.wikimedia.org")
  STEWARDBOT_API_PATH          Optional. Path (default: "/w/")
  STEWARDBOT_SCHEME            Optional. "https" or "http" (default: "https")
  STEWARDBOT_USER_AGENT        Optional. Shown in requests
  STEWARDBOT_LOG_LEVEL         Optional. Logging level (default: "INFO")
  STEWARDBOT_DEBUG             Optional. Log retrieved URLs and submitted forms
  STEWARDBOT_STRICT_ADDRESSES  Optional. Refuse malformed IP addresses instead of submitting them
  STEWARDBOT_TIMEOUT           Optional. Request timeout in seconds (default: 30)

Exit codes: 0 on success, 1 if the action failed, 2 on configuration or login errors.
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

import mwclient
import requests

from stewardbot.actions import ca_lock, ca_unlock, g_block, g_unblock
from stewardbot.config import StewardConfig
from stewardbot.scrape import ScreenScraper


log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a single steward action."""
    parser = argparse.ArgumentParser(description="Perform a steward action on a Wikimedia wiki.")
    commands = parser.add_subparsers(dest="command", required=True)

    gblock = commands.add_parser("gblock", help="globally block an IP or range")
    gblock.add_argument("target", help="IP, CIDR range or start-end range")
    gblock.add_argument("--anon-only", action="store_true", default=None,
                        help="only block logged-out users")
    gblock.add_argument("--expiry", help="block expiry (default: 31 hours)")
    gblock.add_argument("--reason", help="log reason")

    gunblock = commands.add_parser("gunblock", help="remove a global block")
    gunblock.add_argument("target", help="IP, CIDR range or start-end range")
    gunblock.add_argument("--reason", help="log reason")

    for name, help_text in (("lock", "lock a global account"), ("unlock", "unlock a global account")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("target", help="account name, with or without the User: prefix")
        sub.add_argument("--hide", type=int, choices=(0, 1, 2), help="hide level")
        sub.add_argument("--reason", help="log reason")

    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Turn parsed arguments into an options mapping for the chosen action.

    Options not given on the command line are left out so the action's
    defaults apply.
    """
    key = "user" if args.command in ("lock", "unlock") else "ip"
    options = {key: args.target}
    for name in ("anon_only", "expiry", "hide", "reason"):
        value = getattr(args, name, None)
        if value is not None:
            options[name] = value
    return options


def run_action(scraper: ScreenScraper, args: argparse.Namespace, strict: bool = False) -> Optional[requests.Response]:
    options = build_options(args)
    if args.command == "gblock":
        return g_block(scraper, options, strict=strict)
    if args.command == "gunblock":
        return g_unblock(scraper, options, strict=strict)
    if args.command == "lock":
        return ca_lock(scraper, options)
    return ca_unlock(scraper, options)


def connect_site(config: StewardConfig) -> mwclient.Site:
    site = mwclient.Site(
        config.api_host,
        scheme=config.scheme,
        path=config.api_path,
        clients_useragent=config.user_agent,
    )
    site.login(config.username, config.password)
    return site


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for StewardBot.

    Returns:
        0 on success, 1 if the action failed, 2 on configuration/login error
    """
    args = parse_args(argv)
    config = StewardConfig.from_environment()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        site = connect_site(config)
    except mwclient.errors.LoginError as login_error:
        log.error("Login as %s failed: %s", config.username, login_error)
        return 2

    scraper = ScreenScraper(site, timeout=config.timeout)
    result = run_action(scraper, args, strict=config.strict_addresses)
    if result is None:
        return 1
    log.info("Done: %s", result.url)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except mwclient.errors.APIError as api_error:
        log.error("MediaWiki API error: %s", api_error)
        sys.exit(1)
    except Exception as error:
        log.exception("Unhandled exception: %s", error)
        sys.exit(1)
