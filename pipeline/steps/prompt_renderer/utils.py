"""
Prompt Renderer Utilities

Text normalization, policy resolution and output validation.
"""

import hashlib
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from pipeline.models.flow_graph import ConversationFlowNode
from utils.coercion import clamp_int, clamp_unit

from .models import ResolvedPromptPolicy

DEFAULT_SUBJECT_MAX_WORDS = 8
DEFAULT_BODY_MAX_WORDS = 120

BANNED_VAGUE_PHRASES: Tuple[str, ...] = (
    "quick question",
    "just checking",
    "circle back",
    "touching base",
    "game-changing",
    "best-in-class",
    "cutting-edge",
    "revolutionary",
    "synergy",
)

_UNRESOLVED_TOKEN_RE = re.compile(r"\{\{\s*[^}]+\s*\}\}")


# ===================================================================
# TEXT HELPERS
# ===================================================================

def one_line(value: str) -> str:
    """Collapse all whitespace (newlines included) into single spaces."""
    return re.sub(r"\s+", " ", value).strip()


def normalize_whitespace(value: str) -> str:
    """
    Tidy generated copy while keeping paragraph breaks.

    - drop trailing spaces before newlines
    - at most one blank line between paragraphs
    - collapse runs of spaces/tabs
    """
    text = re.sub(r"[ \t]+\n", "\n", value)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return text.strip()


def word_count(text: str) -> int:
    return len(text.split())


def has_unresolved_tokens(text: str) -> bool:
    """True when text still contains a {{token}}-shaped placeholder."""
    return bool(_UNRESOLVED_TOKEN_RE.search(text))


def find_banned_phrase(subject: str, body: str, phrases: Tuple[str, ...] = BANNED_VAGUE_PHRASES) -> str:
    """First banned phrase found in subject or body (case-insensitive), else ''."""
    combined = f"{subject}\n{body}".lower()
    for phrase in phrases:
        if phrase in combined:
            return phrase
    return ""


def count_occurrences(needle: str, haystack: str) -> int:
    """Case-insensitive count of literal, non-overlapping occurrences."""
    if not needle:
        return 0
    return len(re.findall(re.escape(needle), haystack, flags=re.IGNORECASE))


def prompt_hash(prompt: str) -> str:
    """First 24 hex chars of the prompt's SHA-256."""
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:24]


# ===================================================================
# CLAMPING
# ===================================================================

def clamp_quality(value: Any, fallback: float) -> float:
    """Round to 3 decimals and clamp to [0, 1]."""
    return clamp_unit(value, fallback, digits=3)


def resolve_policy(node: ConversationFlowNode) -> ResolvedPromptPolicy:
    """Clamp the node's authored policy into its allowed ranges."""
    policy = node.prompt_policy
    subject_max = policy.subject_max_words if policy else None
    body_max = policy.body_max_words if policy else None
    exactly_one = policy.exactly_one_cta if policy else None

    return ResolvedPromptPolicy(
        subject_max_words=clamp_int(subject_max, DEFAULT_SUBJECT_MAX_WORDS, 3, 20),
        body_max_words=clamp_int(body_max, DEFAULT_BODY_MAX_WORDS, 40, 260),
        exactly_one_cta=exactly_one is not False,
    )


# ===================================================================
# VALIDATION
# ===================================================================

@dataclass(frozen=True)
class OutputValidation:
    """Measured quantities plus the first failing check's reason."""

    ok: bool
    reason: str
    subject_words: int
    body_words: int
    cta_occurrences: int
    unresolved: bool
    banned_phrase: str


def validate_output(
    subject: str,
    body: str,
    cta: str,
    policy: ResolvedPromptPolicy,
    banned_phrases: Tuple[str, ...] = BANNED_VAGUE_PHRASES,
) -> OutputValidation:
    """
    Validate one rendered email. The first failing check wins:

    1. subject non-empty
    2. body non-empty
    3. subject word limit
    4. body word limit
    5. no unresolved {{token}}
    6. no banned vague phrase
    7. exactly one CTA occurrence (when the policy requires it)

    All quantities are measured up front so the trace is complete
    whichever check fails.
    """
    subject_words = word_count(subject)
    body_words = word_count(body)
    unresolved = has_unresolved_tokens(subject) or has_unresolved_tokens(body)
    banned_phrase = find_banned_phrase(subject, body, banned_phrases)
    cta_text = one_line(cta)
    cta_occurrences = count_occurrences(cta_text, body)

    def result(reason: Optional[str]) -> OutputValidation:
        return OutputValidation(
            ok=reason is None,
            reason=reason or "",
            subject_words=subject_words,
            body_words=body_words,
            cta_occurrences=cta_occurrences,
            unresolved=unresolved,
            banned_phrase=banned_phrase,
        )

    if not subject.strip():
        return result("Generated subject is empty")
    if not body.strip():
        return result("Generated body is empty")
    if subject_words > policy.subject_max_words:
        return result(f"Subject exceeds max words ({subject_words}/{policy.subject_max_words})")
    if body_words > policy.body_max_words:
        return result(f"Body exceeds max words ({body_words}/{policy.body_max_words})")
    if unresolved:
        return result("Generated output contains unresolved template tokens")
    if banned_phrase:
        return result(f"Generated output contains banned vague phrase: {banned_phrase}")
    if policy.exactly_one_cta:
        if not cta_text:
            return result("Generated output is missing CTA text")
        if cta_occurrences != 1:
            return result(
                f"Generated output must include exactly one CTA occurrence (found {cta_occurrences})"
            )

    return result(None)
