"""Tests for configuration resolution."""

from datetime import timedelta

import pytest

from arti_objectstore.core.exceptions import ConfigurationError
from arti_objectstore.storage_config import (
    parse_bool,
    parse_int,
    resolve_connection,
    resolve_resilience,
)


class TestResolveResilience:
    """Test resilience policy resolution."""

    def test_defaults_when_absent(self):
        """Test that omitting every key yields the documented defaults."""
        resilience = resolve_resilience({})
        assert resilience.dry_run is False
        assert resilience.threads == 3
        assert resilience.dial_timeout == timedelta(seconds=30)
        assert resilience.request_timeout == timedelta(minutes=10)
        assert resilience.retries == 3

    def test_defaults_when_empty(self):
        """Test that empty strings count as absent."""
        resilience = resolve_resilience(
            {
                "dry_run": "",
                "threads": "",
                "dial_timeout": "",
                "request_timeout": "",
                "retries": "",
            }
        )
        assert resilience.threads == 3
        assert resilience.retries == 3

    def test_explicit_values(self):
        """Test that supplied values are parsed."""
        resilience = resolve_resilience(
            {
                "dry_run": "true",
                "threads": "8",
                "dial_timeout": "5",
                "request_timeout": "120",
                "retries": "0",
            }
        )
        assert resilience.dry_run is True
        assert resilience.threads == 8
        assert resilience.dial_timeout == timedelta(seconds=5)
        assert resilience.request_timeout == timedelta(seconds=120)
        assert resilience.retries == 0

    def test_unparsable_threads(self):
        """Test that a non-integer thread count fails."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_resilience({"threads": "abc"})
        assert exc_info.value.errors == ["threads: invalid integer 'abc'"]

    def test_unparsable_dry_run(self):
        """Test that a non-boolean dry-run flag fails."""
        with pytest.raises(ConfigurationError, match="dry_run"):
            resolve_resilience({"dry_run": "yes"})

    def test_all_errors_reported(self):
        """Test that every invalid key is listed in one error."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_resilience(
                {"threads": "abc", "retries": "1.5", "dial_timeout": "30s"}
            )
        keys = [error.split(":")[0] for error in exc_info.value.errors]
        assert keys == ["threads", "dial_timeout", "retries"]

    def test_out_of_range_threads(self):
        """Test that parsed values are also range-checked."""
        with pytest.raises(ConfigurationError, match="threads"):
            resolve_resilience({"threads": "0"})

    def test_unknown_keys_ignored(self):
        """Test that unrecognized keys do not cause errors."""
        resilience = resolve_resilience({"bucket": "whatever", "region": "eu"})
        assert resilience.threads == 3


class TestParsers:
    """Test strict scalar parsers."""

    @pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true_values(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "f", "F", "FALSE", "false", "False"])
    def test_false_values(self, value):
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["yes", "on", " true", "tRuE"])
    def test_invalid_bool(self, value):
        with pytest.raises(ValueError):
            parse_bool(value)

    def test_signed_int(self):
        assert parse_int("+4") == 4
        assert parse_int("-2") == -2

    @pytest.mark.parametrize("value", ["3.0", " 3", "3 ", "0x10", "abc"])
    def test_invalid_int(self, value):
        with pytest.raises(ValueError):
            parse_int(value)


class TestResolveConnection:
    """Test credential resolution from configuration and environment."""

    def test_credentials_from_environment(self):
        """Test that every credential variable is picked up."""
        environ = {
            "ARTIFACTORY_PASSWORD": "pw",
            "ARTIFACTORY_API_KEY": "key",
            "ARTIFACTORY_ACCESS_TOKEN": "token",
            "ARTIFACTORY_SSH_KEY_PATH": "/keys/id_rsa",
            "ARTIFACTORY_CLIENT_CERT_PATH": "/certs/client.pem",
            "ARTIFACTORY_CLIENT_CERT_KEY_PATH": "/certs/client.key",
        }
        connection = resolve_connection(
            {"url": "https://repo.example.com/artifactory", "user": "backup"}, environ
        )
        assert connection.url == "https://repo.example.com/artifactory/"
        assert connection.user == "backup"
        assert connection.password.get_secret_value() == "pw"
        assert connection.api_key.get_secret_value() == "key"
        assert connection.access_token.get_secret_value() == "token"
        assert connection.ssh_key_path == "/keys/id_rsa"
        assert connection.client_cert_path == "/certs/client.pem"
        assert connection.client_cert_key_path == "/certs/client.key"

    def test_anonymous_allowed(self):
        """Test that no credential variables is not an error."""
        connection = resolve_connection(
            {"url": "https://repo.example.com/", "user": "backup"}, {}
        )
        assert connection.credential is None

    def test_empty_environment_values_are_absent(self):
        """Test that empty credential variables are treated as unset."""
        connection = resolve_connection(
            {"url": "https://repo.example.com/", "user": "backup"},
            {"ARTIFACTORY_PASSWORD": "", "ARTIFACTORY_API_KEY": "key"},
        )
        assert connection.password is None
        assert connection.credential == "key"

    def test_missing_url_and_user(self):
        """Test that both required keys are reported."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_connection({}, {})
        assert len(exc_info.value.errors) == 2
        assert "url" in exc_info.value.errors[0]
        assert "user" in exc_info.value.errors[1]

    def test_malformed_url(self):
        """Test that an invalid URL is a configuration error."""
        with pytest.raises(ConfigurationError, match="url"):
            resolve_connection({"url": "not a url", "user": "backup"}, {})

    def test_reads_process_environment_by_default(self, monkeypatch):
        """Test that os.environ is used when no environment is given."""
        monkeypatch.setenv("ARTIFACTORY_ACCESS_TOKEN", "from-env")
        connection = resolve_connection(
            {"url": "https://repo.example.com/", "user": "backup"}
        )
        assert connection.credential == "from-env"
