"""Tests for actions.py steward actions."""

import logging

import mwclient
import pytest
import requests

from stewardbot.actions import ca_lock, ca_unlock, g_block, g_unblock, is_g_blocked
from stewardbot.options import AccountLockRequest, GlobalBlockRequest
from stewardbot.scrape import FailureKind, ScrapeResult, ScreenScraper


class TestGlobalBlock:
    """Tests for g_block."""

    def test_range_with_defaults(self, fake_scraper):
        response = g_block(fake_scraper, "127.0.0.0-127.0.0.255")

        assert response is fake_scraper.result.response
        assert fake_scraper.calls == [{
            "page": "Special:GlobalBlock",
            "fields": {
                "wpAddress": "127.0.0.0/24",
                "wpAnonOnly": False,
                "wpReason": "cross-wiki abuse",
                "wpExpiryOther": "31 hours",
            },
            "no_escape": True,
        }]

    def test_single_ip_submitted_as_is(self, fake_scraper):
        g_block(fake_scraper, "127.0.0.1")
        assert fake_scraper.calls[0]["fields"]["wpAddress"] == "127.0.0.1"

    def test_options_override_defaults(self, fake_scraper):
        g_block(fake_scraper, {
            "ip": "10.0.0.0/16",
            "anon_only": True,
            "reason": "silly vandals",
            "expiry": "1 week",
        })
        assert fake_scraper.calls[0]["fields"] == {
            "wpAddress": "10.0.0.0/16",
            "wpAnonOnly": True,
            "wpReason": "silly vandals",
            "wpExpiryOther": "1 week",
        }

    def test_legacy_ao_key(self, fake_scraper):
        g_block(fake_scraper, {"ip": "127.0.0.1", "ao": 1})
        assert fake_scraper.calls[0]["fields"]["wpAnonOnly"] is True

    def test_partial_options_keep_other_defaults(self, fake_scraper):
        g_block(fake_scraper, {"ip": "127.0.0.1", "expiry": "3 days"})
        fields = fake_scraper.calls[0]["fields"]
        assert fields["wpExpiryOther"] == "3 days"
        assert fields["wpReason"] == "cross-wiki abuse"

    def test_request_record_accepted(self, fake_scraper):
        g_block(fake_scraper, GlobalBlockRequest(ip="127.0.0.1", reason="spam"))
        assert fake_scraper.calls[0]["fields"]["wpReason"] == "spam"

    def test_invalid_ip_still_submitted(self, fake_scraper, caplog):
        caplog.set_level(logging.WARNING)
        response = g_block(fake_scraper, "999.1.1.1")
        assert response is not None
        assert fake_scraper.calls[0]["fields"]["wpAddress"] == "999.1.1.1"
        assert "Invalid IP 999.1.1.1" in caplog.text

    def test_invalid_ip_strict_aborts(self, fake_scraper, caplog):
        caplog.set_level(logging.WARNING)
        assert g_block(fake_scraper, "999.1.1.1", strict=True) is None
        assert fake_scraper.calls == []
        assert "invalid" in caplog.text

    def test_site_error_returns_none(self, fake_scraper, caplog):
        caplog.set_level(logging.WARNING)
        fake_scraper.result = ScrapeResult.failed(FailureKind.SITE, "Foo is already blocked")
        assert g_block(fake_scraper, "127.0.0.1") is None
        assert "Foo is already blocked" in caplog.text

    def test_unknown_option_rejected(self, fake_scraper):
        with pytest.raises(TypeError):
            g_block(fake_scraper, {"ip": "127.0.0.1", "duration": "1 day"})
        assert fake_scraper.calls == []

    def test_missing_ip_rejected(self, fake_scraper):
        with pytest.raises(TypeError):
            g_block(fake_scraper, {"reason": "no target"})

    def test_non_string_ip_rejected(self, fake_scraper):
        with pytest.raises(TypeError):
            g_block(fake_scraper, {"ip": 2130706433})
        assert fake_scraper.calls == []

    def test_permission_page_not_submitted(self, fake_site, make_response, caplog):
        caplog.set_level(logging.WARNING)
        fake_site.connection.get.return_value = make_response(
            '<form id="searchform" action="/w/index.php" method="get"><input name="search"></form>'
            '<p>Permission error</p>')

        assert g_block(ScreenScraper(fake_site), "127.0.0.1") is None
        fake_site.connection.post.assert_not_called()
        assert fake_site.connection.get.call_count == 1
        assert "Global block of 127.0.0.1 failed (site)" in caplog.text


class TestGlobalUnblock:
    """Tests for g_unblock."""

    def test_single_ip_no_lookup(self, fake_scraper):
        response = g_unblock(fake_scraper, "127.0.0.1")
        assert response is not None
        fake_scraper.site.api.assert_not_called()
        assert fake_scraper.calls == [{
            "page": "Special:GlobalUnblock",
            "fields": {"address": "127.0.0.1", "wpReason": "Removing obsolete block"},
            "no_escape": True,
        }]

    def test_range_uses_block_in_effect(self, fake_scraper):
        fake_scraper.site.api.return_value = {
            "query": {"globalblocks": [{"id": 7, "address": "127.0.0.0/23"}]}
        }
        g_unblock(fake_scraper, {"ip": "127.0.0.0-127.0.0.255", "reason": "oops"})

        fake_scraper.site.api.assert_called_once()
        assert fake_scraper.site.api.call_args.kwargs["bgip"] == "127.0.0.0"
        assert fake_scraper.calls[0]["fields"] == {"address": "127.0.0.0/23", "wpReason": "oops"}

    def test_cidr_looks_up_start(self, fake_scraper):
        fake_scraper.site.api.return_value = {
            "query": {"globalblocks": [{"target": "10.0.0.0/16"}]}
        }
        g_unblock(fake_scraper, "10.0.0.0/16")
        assert fake_scraper.site.api.call_args.kwargs["bgip"] == "10.0.0.0"
        assert fake_scraper.calls[0]["fields"]["address"] == "10.0.0.0/16"

    def test_range_without_block_not_found(self, fake_scraper, caplog):
        caplog.set_level(logging.WARNING)
        fake_scraper.site.api.return_value = {"batchcomplete": "", "query": {"globalblocks": []}}

        assert g_unblock(fake_scraper, "127.0.0.0-127.0.0.255") is None
        assert fake_scraper.calls == []
        assert "Couldn't find the matching rangeblock" in caplog.text

    def test_lookup_api_error_not_found(self, fake_scraper):
        fake_scraper.site.api.side_effect = mwclient.errors.APIError("badvalue", "nope", {})
        assert g_unblock(fake_scraper, "127.0.0.0/24") is None
        assert fake_scraper.calls == []

    def test_lookup_retries_exhausted_not_found(self, fake_scraper, caplog):
        caplog.set_level(logging.ERROR)
        fake_scraper.site.api.side_effect = mwclient.errors.MaximumRetriesExceeded()
        assert g_unblock(fake_scraper, "127.0.0.0-127.0.0.255") is None
        assert fake_scraper.calls == []
        assert "Failed to look up global blocks for 127.0.0.0" in caplog.text

    def test_submit_failure_returns_none(self, fake_scraper):
        fake_scraper.result = ScrapeResult.failed(FailureKind.TRANSPORT, "HTTP 500")
        assert g_unblock(fake_scraper, "127.0.0.1") is None


class TestIsGBlocked:
    """Tests for the global block lookup."""

    def test_returns_address(self, fake_site):
        fake_site.api.return_value = {"query": {"globalblocks": [{"address": "1.2.3.0/24"}]}}
        assert is_g_blocked(fake_site, "1.2.3.4") == "1.2.3.0/24"
        args, kwargs = fake_site.api.call_args
        assert args == ("query",)
        assert kwargs["list"] == "globalblocks"
        assert kwargs["bgip"] == "1.2.3.4"

    def test_not_blocked(self, fake_site):
        fake_site.api.return_value = {"query": {"globalblocks": []}}
        assert is_g_blocked(fake_site, "1.2.3.4") is None

    def test_empty_response(self, fake_site):
        fake_site.api.return_value = None
        assert is_g_blocked(fake_site, "1.2.3.4") is None

    def test_connection_error(self, fake_site):
        fake_site.api.side_effect = requests.exceptions.ConnectionError("down")
        assert is_g_blocked(fake_site, "1.2.3.4") is None


class TestAccountLock:
    """Tests for ca_lock and ca_unlock."""

    def test_lock_defaults(self, fake_scraper):
        response = ca_lock(fake_scraper, "Mike.lifeguard")
        assert response is not None
        assert fake_scraper.calls == [{
            "page": "Special:CentralAuth&target=Mike.lifeguard",
            "fields": {"wpStatusLocked": True, "wpStatusHidden": 0, "wpReason": "cross-wiki abuse"},
            "no_escape": True,
        }]

    def test_user_prefix_and_spaces(self, fake_scraper):
        ca_lock(fake_scraper, "user:Some Vandal")
        assert fake_scraper.calls[0]["page"] == "Special:CentralAuth&target=Some_Vandal"

    def test_target_is_url_escaped(self, fake_scraper):
        ca_lock(fake_scraper, "A&B")
        assert fake_scraper.calls[0]["page"] == "Special:CentralAuth&target=A%26B"

    def test_lock_with_options(self, fake_scraper):
        ca_lock(fake_scraper, {"user": "Mike.lifeguard", "hide": 2, "reason": "test"})
        assert fake_scraper.calls[0]["fields"] == {
            "wpStatusLocked": True,
            "wpStatusHidden": 2,
            "wpReason": "test",
        }

    def test_unlock_defaults(self, fake_scraper):
        ca_unlock(fake_scraper, "Mike.lifeguard")
        assert fake_scraper.calls[0]["fields"] == {
            "wpStatusLocked": False,
            "wpStatusHidden": 0,
            "wpReason": "Removing obsolete account lock",
        }

    def test_unlock_matches_lock_with_lock_off(self, fake_scraper):
        ca_unlock(fake_scraper, "Mike.lifeguard")
        ca_lock(fake_scraper, {"user": "Mike.lifeguard", "lock": 0})
        unlocked, locked = fake_scraper.calls
        assert unlocked["page"] == locked["page"]
        assert set(unlocked["fields"]) == set(locked["fields"])
        assert unlocked["fields"]["wpStatusLocked"] == locked["fields"]["wpStatusLocked"]

    def test_unlock_can_still_lock(self, fake_scraper):
        ca_unlock(fake_scraper, {"user": "X", "lock": True, "reason": "relock"})
        assert fake_scraper.calls[0]["fields"]["wpStatusLocked"] is True
        assert fake_scraper.calls[0]["fields"]["wpReason"] == "relock"

    def test_unlock_record_without_lock(self, fake_scraper):
        ca_unlock(fake_scraper, AccountLockRequest(user="Vandal"))
        assert fake_scraper.calls[0]["fields"] == {
            "wpStatusLocked": False,
            "wpStatusHidden": 0,
            "wpReason": "Removing obsolete account lock",
        }

    def test_lock_record_without_lock(self, fake_scraper):
        ca_lock(fake_scraper, AccountLockRequest(user="Vandal", hide=1))
        assert fake_scraper.calls[0]["fields"] == {
            "wpStatusLocked": True,
            "wpStatusHidden": 1,
            "wpReason": "cross-wiki abuse",
        }

    def test_lock_failure_returns_none(self, fake_scraper, caplog):
        caplog.set_level(logging.WARNING)
        fake_scraper.result = ScrapeResult.failed(FailureKind.SITE, "No such global user")
        assert ca_lock(fake_scraper, "Nobody") is None
        assert "No such global user" in caplog.text


class TestAccountLockRequest:
    """Tests for request normalization."""

    def test_prefix_case_insensitive(self):
        assert AccountLockRequest.from_input("USER:Foo").user == "Foo"

    def test_none_values_use_defaults(self):
        request = AccountLockRequest.from_input({"user": "Foo", "reason": None})
        assert request.reason == "cross-wiki abuse"

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            AccountLockRequest.from_input(42)

    def test_non_string_user(self):
        with pytest.raises(TypeError):
            AccountLockRequest.from_input({"user": 123})

    def test_non_numeric_hide(self):
        with pytest.raises(TypeError):
            AccountLockRequest.from_input({"user": "X", "hide": "lots"})

    def test_numeric_string_hide(self):
        assert AccountLockRequest.from_input({"user": "X", "hide": "2"}).hide == 2
