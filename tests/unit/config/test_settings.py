# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from clincerta.config.settings import ConfigurationError, Settings


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestDefaults:
    def test_processing_defaults(self):
        s = _settings()
        assert s.max_concurrent_pages == 4
        assert s.fast_mode_page_threshold == 5
        assert s.quick_pages == 3
        assert s.scan_detection_policy == "per_page"
        assert s.scan_chars_threshold == 100

    def test_cache_defaults(self):
        s = _settings()
        assert s.cache_max_size == 50
        assert s.cache_max_age_seconds == 86400
        assert s.cache_max_age_ms == 86_400_000
        assert s.cache_compression_threshold == 100_000

    def test_golden_thread_defaults(self):
        s = _settings()
        assert s.golden_thread_policy == "connections"
        assert s.golden_thread_pass_score == 70
        assert s.golden_thread_min_sections == 5


class TestEnvironment:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CACHE_MAX_SIZE", "7")
        monkeypatch.setenv("SCAN_DETECTION_POLICY", "total")
        s = _settings()
        assert s.cache_max_size == 7
        assert s.scan_detection_policy == "total"


class TestValidation:
    @pytest.mark.parametrize("field", ["max_concurrent_pages", "quick_pages", "cache_max_size"])
    def test_positive_fields(self, field):
        with pytest.raises(ValidationError):
            _settings(**{field: 0})

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            _settings(ocr_timeout_seconds=0)

    def test_strength_threshold_range(self):
        with pytest.raises(ValidationError):
            _settings(connection_strength_threshold=1.5)

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValidationError):
            _settings(scan_detection_policy="average")

    def test_quick_pages_above_threshold(self):
        with pytest.raises(ConfigurationError, match="QUICK_PAGES"):
            _settings(quick_pages=6, fast_mode_page_threshold=5)

    def test_partial_above_pass(self):
        with pytest.raises(ConfigurationError, match="PARTIAL"):
            _settings(golden_thread_partial_score=80, golden_thread_pass_score=70)
