"""Tests for label parsing and property serialization."""

import pytest

from arti_objectstore.core.exceptions import ConfigurationError
from arti_objectstore.labels import format_props, matrix_params, parse_labels


class TestParseLabels:
    """Test label string parsing."""

    def test_two_pairs_in_order(self):
        """Test that pairs are returned in input order."""
        assert parse_labels("env=prod;team=core") == [
            ("env", "prod"),
            ("team", "core"),
        ]

    def test_empty_string(self):
        """Test that empty input disables filtering."""
        assert parse_labels("") == []

    def test_missing_equals(self):
        """Test that an entry without '=' is a configuration error."""
        with pytest.raises(ConfigurationError, match="badpair"):
            parse_labels("badpair")

    def test_empty_name(self):
        """Test that an entry with no name is a configuration error."""
        with pytest.raises(ConfigurationError):
            parse_labels("=value")

    def test_value_may_contain_equals(self):
        """Test that only the first '=' separates name and value."""
        assert parse_labels("query=a=b") == [("query", "a=b")]

    def test_empty_value_allowed(self):
        """Test that a label may have an empty value."""
        assert parse_labels("env=") == [("env", "")]

    def test_all_bad_entries_reported(self):
        """Test that every malformed entry is listed."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_labels("one;env=prod;two")
        assert len(exc_info.value.errors) == 2


class TestSerialization:
    """Test label serialization for the repository service."""

    def test_format_props(self):
        """Test the property filter syntax round-trips through the parser."""
        labels = [("env", "prod"), ("team", "core")]
        assert format_props(labels) == "env=prod;team=core"
        assert parse_labels(format_props(labels)) == labels

    def test_format_props_empty(self):
        assert format_props([]) == ""

    def test_matrix_params_escaped(self):
        """Test that matrix parameters are URL-escaped."""
        assert matrix_params([("env", "prod"), ("owner", "a b;c")]) == (
            ";env=prod;owner=a%20b%3Bc"
        )
