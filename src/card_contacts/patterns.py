"""Precompiled pattern table shared by the field extractors.

Every pattern is compiled when this module is imported, so a malformed
expression fails at import time rather than on a particular transcript. The
compiled objects are read-only and safe to share between threads.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

from .normalization import STATE_ABBR

CONTEXT_RADIUS = 30

COMMON_TLDS = (".com", ".net", ".org", ".io", ".co", ".edu", ".gov")

TITLE_KEYWORDS = (
    "ceo",
    "cto",
    "cfo",
    "coo",
    "president",
    "vice president",
    "vp",
    "director",
    "manager",
    "engineer",
    "developer",
    "designer",
    "analyst",
    "consultant",
    "specialist",
    "coordinator",
    "lead",
    "senior",
    "junior",
    "principal",
    "staff",
    "head of",
)

COMPANY_SUFFIXES = (
    "inc",
    "llc",
    "ltd",
    "corp",
    "corporation",
    "company",
    "co",
    "technologies",
    "solutions",
    "group",
    "associates",
)

SOCIAL_DOMAINS = ("linkedin.com", "twitter.com", "facebook.com", "instagram.com")

FREE_MAIL_DOMAINS = ("@gmail", "@yahoo", "@hotmail", "@outlook", "@icloud", "@me.com")

_URL_CHARS = r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]"
_TLD_GROUP = "|".join(tld.lstrip(".") for tld in COMMON_TLDS)
_STATE_NAMES = "|".join(re.escape(name) for name in sorted(STATE_ABBR, key=len, reverse=True))
_COMPANY_GROUP = "|".join(COMPANY_SUFFIXES)
_SEP = r"[-. \t]?"


@dataclass(frozen=True)
class PatternMatch:
    text: str
    start: int
    end: int
    context: str


def context_window(text: str, start: int, end: int, radius: int = CONTEXT_RADIUS) -> str:
    """Return the text around ``text[start:end]``.

    The window begins up to ``radius`` characters before the match and spans
    ``2 * radius + len(match)`` characters, clipped to the text bounds.
    """
    window_start = max(0, start - radius)
    return text[window_start : window_start + 2 * radius + (end - start)]


def _overlaps(span: Tuple[int, int], taken: Iterable[Tuple[int, int]]) -> bool:
    return any(span[0] < other[1] and other[0] < span[1] for other in taken)


class Pattern:
    """A named textual pattern made of one or more ordered alternatives."""

    def __init__(self, name: str, *alternatives: str, flags: int = 0):
        if not alternatives:
            raise ValueError(f"pattern {name!r} needs at least one alternative")
        self.name = name
        self.alternatives: Tuple[re.Pattern[str], ...] = tuple(
            re.compile(alternative, flags) for alternative in alternatives
        )

    def __repr__(self) -> str:
        return f"Pattern({self.name!r}, alternatives={len(self.alternatives)})"

    def matches(self, text: str) -> bool:
        return any(regex.search(text or "") for regex in self.alternatives)

    def find_all(self, text: str, radius: int = CONTEXT_RADIUS) -> List[PatternMatch]:
        """Collect matches of every alternative, in alternative order.

        A match overlapping text already claimed by an earlier alternative (or
        an earlier match of the same one) is skipped.
        """
        text = text or ""
        found: List[PatternMatch] = []
        taken: List[Tuple[int, int]] = []
        for regex in self.alternatives:
            for match in regex.finditer(text):
                span = match.span()
                if span[0] == span[1] or _overlaps(span, taken):
                    continue
                taken.append(span)
                found.append(
                    PatternMatch(
                        text=match.group(0),
                        start=span[0],
                        end=span[1],
                        context=context_window(text, span[0], span[1], radius),
                    )
                )
        return found

    def finditer(self, text: str) -> Iterator[re.Match[str]]:
        for regex in self.alternatives:
            yield from regex.finditer(text or "")

    def first(self, text: str) -> Optional[re.Match[str]]:
        for regex in self.alternatives:
            match = regex.search(text or "")
            if match:
                return match
        return None


PHONE = Pattern(
    "phone",
    # +44 20 7946 0958, +1 (555) 123-4567
    rf"(?<![\d+])\+\d{{1,3}}{_SEP}\(?\d{{1,4}}\)?{_SEP}\d{{1,4}}{_SEP}\d{{1,9}}(?!\d)",
    # 1-555-123-4567
    rf"(?<!\d)1{_SEP}\(?\d{{3}}\)?{_SEP}\d{{3}}{_SEP}\d{{4}}(?!\d)",
    # (555) 123-4567, 555-123-4567
    rf"(?<!\d)\(?\d{{3}}\)?{_SEP}\d{{3}}{_SEP}\d{{4}}(?!\d)",
    # 123-4567
    rf"(?<!\d)\d{{3}}{_SEP}\d{{4}}(?!\d)",
)

EMAIL = Pattern(
    "email", r"(?<![A-Za-z0-9._%+\-])[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,64}"
)

URL = Pattern(
    "url",
    rf"https?://{_URL_CHARS}+",
    rf"(?<![\w.@/])www\.{_URL_CHARS}+",
    rf"(?<![\w.@/\-])[A-Za-z0-9\-]+(?:\.[A-Za-z0-9\-]+)*\.(?:{_TLD_GROUP})\b(?:/{_URL_CHARS}*)?",
    flags=re.IGNORECASE,
)

STREET = Pattern(
    "street",
    r"\b\d+[ \t]+[A-Za-z0-9 \t,.]{1,60}\b(?:Street|St|Avenue|Ave|Boulevard|Blvd|Road|Rd|Lane|Ln"
    r"|Drive|Dr|Court|Ct|Circle|Cir|Place|Pl)\b\.?",
    flags=re.IGNORECASE,
)

CITY_STATE_ZIP = Pattern(
    "city_state_zip",
    rf"(?<![A-Za-z0-9])(?P<city>[A-Za-z][A-Za-z \t.'\-]{{0,40}}),[ \t]*"
    rf"(?P<state>[A-Z]{{2}}|(?i:{_STATE_NAMES}))"
    r"[ \t]*(?P<postal>\d{5}(?:-\d{4})?)(?!\d)",
)

COMPANY = Pattern(
    "company",
    rf"\b(?:{_COMPANY_GROUP})(?!\w)",
    flags=re.IGNORECASE,
)

PATTERNS: Mapping[str, Pattern] = {
    pattern.name: pattern
    for pattern in (PHONE, EMAIL, URL, STREET, CITY_STATE_ZIP, COMPANY)
}


def contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


def first_keyword(text: str, keywords: Iterable[str]) -> Optional[str]:
    lowered = (text or "").lower()
    return next((keyword for keyword in keywords if keyword in lowered), None)


__all__ = [
    "CITY_STATE_ZIP",
    "COMMON_TLDS",
    "COMPANY",
    "COMPANY_SUFFIXES",
    "CONTEXT_RADIUS",
    "EMAIL",
    "FREE_MAIL_DOMAINS",
    "PATTERNS",
    "PHONE",
    "Pattern",
    "PatternMatch",
    "SOCIAL_DOMAINS",
    "STREET",
    "TITLE_KEYWORDS",
    "URL",
    "context_window",
    "contains_keyword",
    "first_keyword",
]
