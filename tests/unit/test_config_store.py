"""Unit tests for the configuration document store."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from conftest import write_config
from feedrelay.config.store import ConfigStore, parse_document
from feedrelay.middleware.error_handler import ConfigParseError


class TestParseDocument:
    def test_endpoints_in_document_order(self, sample_document: dict):
        snapshot = parse_document(json.dumps(sample_document).encode())
        assert [e.name for e in snapshot.endpoints] == ["Alpha", "Beta", "Gamma"]
        assert snapshot.endpoints[0].address == "https://alpha.test/api.php/provide/vod"

    def test_extra_fields_kept_in_document(self, sample_document: dict):
        snapshot = parse_document(json.dumps(sample_document).encode())
        assert snapshot.document["cache_time"] == 7200
        assert snapshot.sites["alpha"]["detail"] == "https://alpha.test"

    def test_revision_is_sha256_of_bytes(self, sample_document: dict):
        raw = json.dumps(sample_document).encode()
        assert parse_document(raw).revision == hashlib.sha256(raw).hexdigest()

    def test_empty_api_site_is_valid(self):
        snapshot = parse_document(b'{"api_site": {}}')
        assert snapshot.endpoints == ()

    @pytest.mark.parametrize(
        "raw",
        [
            b"{not json",
            b"[]",
            b'{"sites": {}}',
            b'{"api_site": []}',
            b'{"api_site": {"a": {"name": "A"}}}',
            b'{"api_site": {"a": {"name": "A", "api": 42}}}',
            b'{"api_site": {"a": "https://a.test"}}',
            b"\xff\xfe",
        ],
    )
    def test_malformed_documents_raise(self, raw: bytes):
        with pytest.raises(ConfigParseError):
            parse_document(raw)

    def test_error_names_the_bad_entry(self):
        with pytest.raises(ConfigParseError) as exc_info:
            parse_document(b'{"api_site": {"broken": {"api": "https://a.test"}}}')
        assert exc_info.value.details["key"] == "broken"


class TestConfigStore:
    def test_load_reads_file(self, config_file: Path):
        store = ConfigStore(config_file)
        assert len(store.load().endpoints) == 3

    def test_snapshot_loads_lazily(self, config_file: Path):
        store = ConfigStore(config_file)
        assert store.snapshot.revision

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigParseError):
            ConfigStore(tmp_path / "absent.json").load()

    def test_refresh_keeps_snapshot_when_unchanged(self, config_file: Path):
        store = ConfigStore(config_file)
        first = store.load()
        assert store.refresh() is first

    def test_refresh_detects_content_change(self, config_file: Path, sample_document: dict):
        store = ConfigStore(config_file)
        first = store.load()

        sample_document["api_site"]["delta"] = {"name": "Delta", "api": "https://delta.test/api"}
        write_config(config_file, sample_document)

        second = store.refresh()
        assert second.revision != first.revision
        assert [e.name for e in second.endpoints][-1] == "Delta"

    def test_refresh_ignores_rewrite_with_same_content(self, config_file: Path):
        store = ConfigStore(config_file)
        first = store.load()
        config_file.write_bytes(config_file.read_bytes())
        assert store.refresh() is first

    def test_failed_refresh_keeps_previous_snapshot(self, config_file: Path):
        store = ConfigStore(config_file)
        first = store.load()
        config_file.write_text("{oops", encoding="utf-8")

        with pytest.raises(ConfigParseError):
            store.refresh()
        assert store.snapshot is first
