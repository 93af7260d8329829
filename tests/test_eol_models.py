"""Tests for EOL data models and cache document encoding."""

import json

import pytest

from keepup._eol.models import (
    SUPPORTED_PACKAGES,
    EndOfLifeEntry,
    EOLCacheDocument,
    parse_eol_marker,
)
from keepup.exceptions import CacheFormatError, EOLDecodeError


class TestParseEolMarker:
    """Test the string-then-boolean EOL decoder."""

    def test_date_string_passes_through(self):
        assert parse_eol_marker("2024-01-01") == "2024-01-01"

    def test_false_becomes_sentinel(self):
        assert parse_eol_marker(False) == "false"

    def test_true_becomes_literal(self):
        assert parse_eol_marker(True) == "true"

    def test_arbitrary_string_passes_through(self):
        assert parse_eol_marker("true") == "true"

    @pytest.mark.parametrize("value", [1, 1.5, None, ["2024-01-01"], {"date": "2024"}])
    def test_other_types_fail(self, value):
        with pytest.raises(EOLDecodeError):
            parse_eol_marker(value)


class TestEndOfLifeEntry:
    """Test EndOfLifeEntry decoding."""

    def test_from_dict(self):
        entry = EndOfLifeEntry.from_dict(
            {"cycle": "6.2", "eol": "2024-08-31", "latest": "6.2.14", "latestReleaseDate": "2024-01-09"}
        )
        assert entry == EndOfLifeEntry(cycle="6.2", eol="2024-08-31", latest="6.2.14", latest_release_date="2024-01-09")

    def test_boolean_eol(self):
        entry = EndOfLifeEntry.from_dict({"cycle": "7.2", "eol": False, "latest": "7.2.4"})
        assert entry.eol == "false"
        assert entry.latest_release_date == ""

    def test_numeric_cycle_is_stringified(self):
        entry = EndOfLifeEntry.from_dict({"cycle": 12, "eol": True, "latest": "12.5"})
        assert entry.cycle == "12"
        assert entry.eol == "true"

    def test_missing_eol_is_empty(self):
        entry = EndOfLifeEntry.from_dict({"cycle": "1.6", "latest": "1.6.21"})
        assert entry.eol == ""

    def test_invalid_eol_fails(self):
        with pytest.raises(EOLDecodeError):
            EndOfLifeEntry.from_dict({"cycle": "1.6", "eol": 3, "latest": "1.6.21"})

    def test_non_object_fails(self):
        with pytest.raises(EOLDecodeError):
            EndOfLifeEntry.from_dict(["6.2"])

    def test_to_dict_uses_upstream_keys(self):
        entry = EndOfLifeEntry(cycle="6.2", eol="false", latest="6.2.14", latest_release_date="2024-01-09")
        assert entry.to_dict() == {
            "cycle": "6.2",
            "eol": "false",
            "latest": "6.2.14",
            "latestReleaseDate": "2024-01-09",
        }


class TestEOLCacheDocument:
    """Test cache document serialization."""

    def test_json_shape(self):
        document = EOLCacheDocument(packages={"redis": [EndOfLifeEntry("7.2", "false", "7.2.4", "2024-01-09")]})
        data = json.loads(document.to_json())
        assert list(data) == ["package"]
        assert data["package"]["redis"][0]["latest"] == "7.2.4"

    def test_from_json(self):
        raw = json.dumps({"package": {"redis": [{"cycle": "6.2", "eol": "2024-01-01", "latest": "7.0"}]}})
        document = EOLCacheDocument.from_json(raw)
        assert document.entries_for("redis")[0].eol == "2024-01-01"
        assert document.entries_for("mysql") is None

    def test_empty_entry_list_is_cached(self):
        document = EOLCacheDocument.from_json(json.dumps({"package": {"envoy": []}}))
        assert document.entries_for("envoy") == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[]",
            json.dumps({"packages": {}}),
            json.dumps({"package": []}),
            json.dumps({"package": {"redis": {"cycle": "6.2"}}}),
            json.dumps({"package": {"redis": [{"cycle": "6.2", "eol": 7}]}}),
        ],
    )
    def test_invalid_documents(self, raw):
        with pytest.raises(CacheFormatError):
            EOLCacheDocument.from_json(raw)


def test_supported_packages_are_fixed():
    assert SUPPORTED_PACKAGES == (
        "redis",
        "memcached",
        "mongodb",
        "mysql",
        "rabbitmq",
        "envoy",
        "debian",
        "postgresql",
        "elasticsearch",
    )
    assert isinstance(SUPPORTED_PACKAGES, tuple)
