"""Tests for the vendor-term sanitizer."""

import pytest

from utils.sanitizer import sanitize_ai_text, sanitize_all


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Pulled with apify/linkedin-profile-scraper today", "Pulled with lead sourcing today"),
        ("APIFY handles it", "lead sourcing handles it"),
        ("Two actors and one actor", "Two sources and one source"),
        ("Factors stay untouched", "Factors stay untouched"),
        ("  spaced   out\t\ttext  ", "spaced out text"),
        ("a\n\n\n\nb", "a\n\nb"),
        (None, ""),
    ],
)
def test_sanitize_ai_text(raw, expected):
    assert sanitize_ai_text(raw) == expected


def test_sanitize_all_drops_empty_entries():
    assert sanitize_all(["", "  ", "Apify", None, "clear CTA"]) == ["lead sourcing", "clear CTA"]
