# tests/unit/extraction/test_scan_detector.py — v1
"""Tests for extraction/scan_detector.py."""

from __future__ import annotations

from clincerta.extraction.scan_detector import is_likely_scanned


class TestPerPagePolicy:
    def test_dense_text_not_scanned(self):
        assert is_likely_scanned("x" * 1000, page_count=2) is False

    def test_sparse_text_scanned(self):
        # 500 chars over 10 pages = 50 per page
        assert is_likely_scanned("x" * 500, page_count=10) is True

    def test_boundary(self):
        assert is_likely_scanned("x" * 100, page_count=1) is False
        assert is_likely_scanned("x" * 99, page_count=1) is True

    def test_custom_threshold(self):
        assert is_likely_scanned("x" * 30, page_count=1, threshold=20) is False

    def test_without_page_count_uses_total(self):
        assert is_likely_scanned("x" * 150) is False
        assert is_likely_scanned("x" * 50) is True


class TestTotalPolicy:
    def test_ignores_page_count(self):
        assert is_likely_scanned("x" * 150, page_count=10, policy="total") is False

    def test_whitespace_not_counted(self):
        text = " \n".join(["ab"] * 40)
        assert is_likely_scanned(text, policy="total") is True

    def test_empty(self):
        assert is_likely_scanned("", policy="total") is True
