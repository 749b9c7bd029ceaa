"""
Tests for locale resolution and message lookup.
"""

import pytest

from utils.i18n import MessageCatalog, parse_accept_language, resolve_locale

MESSAGES = {
    "en": {"greeting": "Hello {name}", "only.en": "English only"},
    "xx": {"greeting": "xxHello {name}xx"},
}


class TestAcceptLanguage:
    def test_orders_by_quality(self):
        assert parse_accept_language("fr-CA;q=0.5, xx;q=1.0, de;q=0.8") == ["xx", "de", "fr-ca"]

    def test_drops_zero_quality(self):
        assert parse_accept_language("xx;q=0, en") == ["en"]

    def test_empty(self):
        assert parse_accept_language(None) == []
        assert parse_accept_language("") == []


class TestResolveLocale:
    @pytest.mark.parametrize(
        "header, expected",
        [
            (None, "en"),
            ("xx", "xx"),
            ("XX", "xx"),
            ("xx-YY", "xx"),
            ("fr, xx;q=0.2", "xx"),
            ("fr", "en"),
        ],
    )
    def test_resolution(self, header, expected):
        assert resolve_locale(header, ["en", "xx"], default="en") == expected


class TestMessageCatalog:
    def setup_method(self):
        self.catalog = MessageCatalog(MESSAGES, default_locale="en")

    def test_formats_params(self):
        assert self.catalog.get("greeting", "xx", name="Ann") == "xxHello Annxx"

    def test_missing_key_falls_back_to_default_locale(self):
        assert self.catalog.get("only.en", "xx") == "English only"

    def test_unknown_key_returns_key(self):
        assert self.catalog.get("nope", "en") == "nope"

    def test_translator(self):
        t = self.catalog.translator("xx")
        assert t.locale == "xx"
        assert t("greeting", name="Bo") == "xxHello Boxx"

    def test_missing_keys(self):
        assert self.catalog.missing_keys("xx") == ["only.en"]
        assert self.catalog.missing_keys("en") == []

    def test_default_locale_must_exist(self):
        with pytest.raises(ValueError):
            MessageCatalog({"xx": {}}, default_locale="en")
