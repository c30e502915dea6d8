"""Tests for environment-driven settings."""

from decimal import Decimal

import pytest

from rxdraft.domain.exceptions import ValidationError
from rxdraft.infrastructure.config import Settings


class TestSettingsFromEnv:

    def test_defaults(self):
        s = Settings.from_env({})
        assert s.api_base_url == "http://localhost:8080/api"
        assert s.api_token is None
        assert s.timeout == 10.0
        assert s.search_debounce == 0.3
        assert s.tax_rate == Decimal("0.10")

    def test_overrides(self):
        s = Settings.from_env({
            "RXDRAFT_API_BASE_URL": "https://api.example.com/",
            "RXDRAFT_API_TOKEN": "abc",
            "RXDRAFT_TIMEOUT": "2.5",
            "RXDRAFT_SEARCH_DEBOUNCE": "0",
            "RXDRAFT_TAX_RATE": "0.15",
        })
        assert s.api_base_url == "https://api.example.com"
        assert s.api_token == "abc"
        assert s.timeout == 2.5
        assert s.search_debounce == 0.0
        assert s.tax_rate == Decimal("0.15")

    def test_bad_timeout(self):
        with pytest.raises(ValidationError, match="RXDRAFT_TIMEOUT must be a number"):
            Settings.from_env({"RXDRAFT_TIMEOUT": "soon"})

    def test_negative_debounce(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Settings.from_env({"RXDRAFT_SEARCH_DEBOUNCE": "-1"})

    @pytest.mark.parametrize("rate", ["1", "-0.1", "x"])
    def test_bad_tax_rate(self, rate):
        with pytest.raises(ValidationError):
            Settings.from_env({"RXDRAFT_TAX_RATE": rate})

    def test_zero_timeout_rejected(self):
        with pytest.raises(ValidationError, match="RXDRAFT_TIMEOUT must be greater than 0"):
            Settings.from_env({"RXDRAFT_TIMEOUT": "0"})

    @pytest.mark.parametrize("raw", ["nan", "inf"])
    def test_non_finite_timeout_rejected(self, raw):
        with pytest.raises(ValidationError, match="must be a number"):
            Settings.from_env({"RXDRAFT_TIMEOUT": raw})
