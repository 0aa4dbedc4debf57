"""
Vendor-term sanitizer for generated text.

Recipients should never see internal provider names or implementation
terms, so every model-written string passes through sanitize_ai_text
before it leaves the pipeline.
"""

import re
from typing import Callable, List, Tuple

Sanitizer = Callable[[str], str]

# Order matters: the "apify/<actor-id>" form must be replaced before bare "apify".
FORBIDDEN_REPLACEMENTS: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"apify/[a-z0-9_-]+", re.IGNORECASE), "lead sourcing"),
    (re.compile(r"\bapify\b", re.IGNORECASE), "lead sourcing"),
    (re.compile(r"\bactors\b", re.IGNORECASE), "sources"),
    (re.compile(r"\bactor\b", re.IGNORECASE), "source"),
)


def sanitize_ai_text(value: str) -> str:
    """
    Replace vendor/implementation terms and tidy the whitespace left behind.

    Example:
        >>> sanitize_ai_text("Leads pulled by  Apify actors")
        'Leads pulled by lead sourcing sources'
    """
    text = str(value or "")
    for pattern, replacement in FORBIDDEN_REPLACEMENTS:
        text = pattern.sub(replacement, text)

    text = re.sub(r"[ \t]{2,}", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def sanitize_all(values: List[str], sanitizer: Sanitizer = sanitize_ai_text) -> List[str]:
    """Sanitize a list of strings and drop the ones that end up empty."""
    cleaned = [sanitizer(str(value if value is not None else "").strip()) for value in values]
    return [value for value in cleaned if value]
