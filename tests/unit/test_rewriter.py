"""Unit tests for proxy prefix rewriting."""

from __future__ import annotations

import pytest

from feedrelay.proxy.rewriter import (
    default_prefix,
    encode_for_query,
    original_target,
    rewrite,
    rewrite_document,
)

PREFIX = "https://proxy.test/?url="


class TestRewriteAddress:
    def test_plain_address(self):
        result = rewrite({"a": {"name": "A", "api": "https://x.test/api"}}, PREFIX)
        assert result.sites["a"]["api"] == "https://proxy.test/?url=https%3A%2F%2Fx.test%2Fapi"
        assert result.warnings == []

    def test_rewriting_twice_is_identical(self):
        once = rewrite({"a": {"name": "A", "api": "https://x.test/api"}}, PREFIX)
        twice = rewrite(once.sites, PREFIX)
        assert twice.sites == once.sites

    def test_replaces_foreign_proxy_prefix(self):
        sites = {"a": {"name": "A", "api": "https://old.test/?url=https%3A%2F%2Fx.test%2Fapi"}}
        assert rewrite(sites, PREFIX).sites["a"]["api"] == PREFIX + "https%3A%2F%2Fx.test%2Fapi"

    def test_unencoded_target_after_marker(self):
        sites = {"a": {"name": "A", "api": "https://old.test/?url=https://x.test/api?ac=list"}}
        assert (
            rewrite(sites, PREFIX).sites["a"]["api"]
            == PREFIX + "https%3A%2F%2Fx.test%2Fapi%3Fac%3Dlist"
        )

    def test_prefix_without_marker_is_idempotent(self):
        prefix = "https://edge.test/p/"
        once = rewrite({"a": {"name": "A", "api": "https://x.test/api"}}, prefix)
        assert once.sites["a"]["api"] == "https://edge.test/p/https%3A%2F%2Fx.test%2Fapi"
        assert rewrite(once.sites, prefix).sites == once.sites

    def test_query_string_is_encoded(self):
        result = rewrite({"a": {"name": "A", "api": "https://x.test/api?ac=list&t=1"}}, PREFIX)
        assert result.sites["a"]["api"] == PREFIX + "https%3A%2F%2Fx.test%2Fapi%3Fac%3Dlist%26t%3D1"

    def test_encode_matches_encode_uri_component(self):
        assert encode_for_query("a b/c?d=e&f!*'()~") == "a%20b%2Fc%3Fd%3De%26f!*'()~"

    def test_original_target_prefers_own_prefix(self):
        assert original_target(PREFIX + "https%3A%2F%2Fx.test", PREFIX) == b"https://x.test"

    def test_address_under_markerless_prefix_is_its_own_target(self):
        prefix = "https://edge.test/p/"
        result = rewrite({"a": {"name": "A", "api": "https://edge.test/p/vod/api"}}, prefix)

        assert result.warnings == []
        assert result.sites["a"]["api"] == "https://edge.test/p/https%3A%2F%2Fedge.test%2Fp%2Fvod%2Fapi"
        assert rewrite(result.sites, prefix).sites == result.sites

    @pytest.mark.parametrize("prefix", [PREFIX, "https://edge.test/p/"])
    def test_non_utf8_escapes_survive_repointing(self, prefix):
        sites = {"a": {"name": "A", "api": "https://old.test/?url=https%3A%2F%2Fx.test%2Fs%3Fwd%3D%C4%E3%FF"}}
        result = rewrite(sites, prefix)

        assert result.sites["a"]["api"] == prefix + "https%3A%2F%2Fx.test%2Fs%3Fwd%3D%C4%E3%FF"
        assert rewrite(result.sites, prefix).sites == result.sites

    def test_utf8_address_encoded_as_utf8(self):
        result = rewrite({"a": {"name": "A", "api": "https://x.test/搜索"}}, PREFIX)
        assert result.sites["a"]["api"] == PREFIX + "https%3A%2F%2Fx.test%2F%E6%90%9C%E7%B4%A2"


class TestRewriteWarnings:
    @pytest.mark.parametrize(
        "address",
        ["not a url", "", "ftp://files.test/a", "https://old.test/?url=garbage", "https://"],
    )
    def test_malformed_address_passes_through(self, address):
        result = rewrite({"bad": {"name": "Bad", "api": address}}, PREFIX)
        assert result.sites["bad"]["api"] == address
        assert [w.key for w in result.warnings] == ["bad"]

    def test_bad_entry_does_not_abort_batch(self):
        sites = {
            "bad": {"name": "Bad", "api": "nope"},
            "good": {"name": "Good", "api": "https://x.test/api"},
            "missing": {"name": "Missing"},
            "scalar": "https://y.test",
        }
        result = rewrite(sites, PREFIX)

        assert result.sites["good"]["api"].startswith(PREFIX)
        assert result.sites["missing"] == {"name": "Missing"}
        assert result.sites["scalar"] == "https://y.test"
        assert sorted(w.key for w in result.warnings) == ["bad", "missing", "scalar"]

    def test_warning_is_logged(self, caplog):
        with caplog.at_level("WARNING"):
            rewrite({"bad": {"name": "Bad", "api": "nope"}}, PREFIX)
        assert "bad" in caplog.text


class TestRewriteDocument:
    def test_other_fields_pass_through(self, sample_document: dict):
        document, warnings = rewrite_document(sample_document, PREFIX)

        assert warnings == []
        assert document["cache_time"] == 7200
        assert document["api_site"]["alpha"]["detail"] == "https://alpha.test"
        assert document["api_site"]["alpha"]["name"] == "Alpha"
        assert document["api_site"]["gamma"]["api"] == PREFIX + "https%3A%2F%2Fgamma.test%2Fapi"

    def test_input_is_not_mutated(self, sample_document: dict):
        before = repr(sample_document)
        rewrite_document(sample_document, PREFIX)
        assert repr(sample_document) == before

    def test_key_order_preserved(self, sample_document: dict):
        document, _ = rewrite_document(sample_document, PREFIX)
        assert list(document["api_site"]) == ["alpha", "beta", "gamma"]


class TestDefaultPrefix:
    @pytest.mark.parametrize(
        "origin,expected",
        [
            ("https://relay.test", "https://relay.test/?url="),
            ("https://relay.test/", "https://relay.test/?url="),
            ("http://127.0.0.1:8000", "http://127.0.0.1:8000/?url="),
        ],
    )
    def test_origin_plus_marker(self, origin, expected):
        assert default_prefix(origin) == expected
