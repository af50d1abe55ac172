# tests/unit/config/test_unit_settings.py — v1
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

import pytest

from rentroll.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_cache(self):
        s = Settings(_env_file=None)
        assert s.cache_enabled is True
        assert s.cache_ttl_seconds == 86400
        assert s.fingerprint_sample_rows == 10

    def test_default_detection(self):
        s = Settings(_env_file=None)
        assert s.header_detector == "heuristic"
        assert s.min_header_confidence == 0.3
        assert s.inference_timeout_seconds == 60.0

    def test_default_metadata_disabled(self):
        s = Settings(_env_file=None)
        assert s.metadata_enabled is False

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_format == "text"
        assert s.log_file is None


class TestSettingsValidation:
    def test_llm_without_key(self):
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            Settings(_env_file=None, header_detector="llm", openai_api_key="")

    def test_llm_with_key(self):
        s = Settings(_env_file=None, header_detector="llm", openai_api_key="sk-test")
        assert s.header_detector == "llm"

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigurationError, match="INFERENCE_TIMEOUT_SECONDS"):
            Settings(_env_file=None, inference_timeout_seconds=0)

    def test_timeout_may_be_disabled(self):
        assert Settings(_env_file=None, inference_timeout_seconds=None).inference_timeout_seconds is None

    def test_non_positive_ttl(self):
        with pytest.raises(ValueError, match="cache_ttl_seconds"):
            Settings(_env_file=None, cache_ttl_seconds=0)

    def test_confidence_out_of_range(self):
        with pytest.raises(ValueError, match="min_header_confidence"):
            Settings(_env_file=None, min_header_confidence=1.5)

    def test_unknown_detector(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, header_detector="regex")


class TestLoadSettings:
    def test_overrides(self):
        s = load_settings(_env_file=None, cache_enabled=False, log_level="DEBUG")
        assert s.cache_enabled is False
        assert s.log_level == "DEBUG"

    def test_env_variables(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "120")
        monkeypatch.setenv("MIN_HEADER_CONFIDENCE", "0.5")
        s = load_settings(_env_file=None)
        assert s.cache_ttl_seconds == 120
        assert s.min_header_confidence == 0.5
