from __future__ import annotations

import logging
import os
import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

import phonenumbers
from email_validator import EmailNotValidError, validate_email

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")

STATE_ABBR = {
    "alabama": "AL",
    "alaska": "AK",
    "arizona": "AZ",
    "arkansas": "AR",
    "california": "CA",
    "colorado": "CO",
    "connecticut": "CT",
    "delaware": "DE",
    "florida": "FL",
    "georgia": "GA",
    "hawaii": "HI",
    "idaho": "ID",
    "illinois": "IL",
    "indiana": "IN",
    "iowa": "IA",
    "kansas": "KS",
    "kentucky": "KY",
    "louisiana": "LA",
    "maine": "ME",
    "maryland": "MD",
    "massachusetts": "MA",
    "michigan": "MI",
    "minnesota": "MN",
    "mississippi": "MS",
    "missouri": "MO",
    "montana": "MT",
    "nebraska": "NE",
    "nevada": "NV",
    "new hampshire": "NH",
    "new jersey": "NJ",
    "new mexico": "NM",
    "new york": "NY",
    "north carolina": "NC",
    "north dakota": "ND",
    "ohio": "OH",
    "oklahoma": "OK",
    "oregon": "OR",
    "pennsylvania": "PA",
    "rhode island": "RI",
    "south carolina": "SC",
    "south dakota": "SD",
    "tennessee": "TN",
    "texas": "TX",
    "utah": "UT",
    "vermont": "VT",
    "virginia": "VA",
    "washington": "WA",
    "west virginia": "WV",
    "wisconsin": "WI",
    "wyoming": "WY",
}

STREET_ABBREVIATIONS = (
    ("st", "Street"),
    ("ave", "Avenue"),
    ("blvd", "Boulevard"),
    ("rd", "Road"),
    ("ln", "Lane"),
    ("dr", "Drive"),
    ("ct", "Court"),
    ("cir", "Circle"),
    ("pl", "Place"),
    ("apt", "Apt"),
    ("ste", "Suite"),
    ("bldg", "Building"),
    ("fl", "Floor"),
)

_STREET_ABBR_RES = tuple(
    (re.compile(rf"\b{abbr}\b\.?", re.IGNORECASE), full) for abbr, full in STREET_ABBREVIATIONS
)

NAME_SPECIAL_PREFIXES = ("mc", "mac", "o'")
NAME_ALL_CAPS = {"ii", "iii", "iv", "phd", "md", "jr", "sr"}
NAME_PREFIXES = {"mr", "mrs", "ms", "dr", "prof", "rev"}
NAME_SUFFIXES = {"jr", "sr", "ii", "iii", "iv", "v", "phd", "md", "esq"}
TITLE_LOWERCASE_WORDS = {"of", "and", "the", "for", "in", "at", "to"}


def _norm(text: Optional[str]) -> str:
    s = (text or "").strip()
    if not s:
        return ""
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", s).lower()


def normalize_text_key(value: str) -> str:
    return _norm(value)


# Phones


def phone_digits(raw: str) -> str:
    return re.sub(r"\D", "", raw or "")


def format_phone_display(raw: str) -> str:
    digits = phone_digits(raw)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith("1"):
        return "+1 " + format_phone_display(digits[1:])
    if len(digits) == 7:
        return f"{digits[:3]}-{digits[3:]}"
    if len(digits) > 11:
        return f"+{digits[:2]} {digits[2:]}"
    return digits


def format_phone_e164_safe(value: str, default_country: str = "US") -> str:
    s = (value or "").strip()
    if not s:
        return ""
    try:
        region = None if s.startswith("+") else default_country
        parsed = phonenumbers.parse(s, region)
        if phonenumbers.is_possible_number(parsed):
            return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
    except phonenumbers.NumberParseException:
        logger.debug("phonenumbers.parse failed for %s", s)
    digits = phone_digits(s)
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if len(digits) > 11:
        return f"+{digits}"
    return ""


# Names


def format_name(name: str) -> str:
    formatted = []
    for word in (name or "").split():
        lowered = word.lower()
        if lowered in NAME_ALL_CAPS:
            formatted.append(lowered.upper())
            continue
        prefix = next((p for p in NAME_SPECIAL_PREFIXES if lowered.startswith(p)), None)
        if prefix is not None:
            remainder = lowered[len(prefix) :]
            formatted.append(prefix.capitalize() + remainder[:1].upper() + remainder[1:])
            continue
        formatted.append(word[:1].upper() + word[1:].lower())
    return " ".join(formatted)


@dataclass(frozen=True)
class NameParts:
    prefix: Optional[str] = None
    given: Optional[str] = None
    middle: Optional[str] = None
    family: Optional[str] = None
    suffix: Optional[str] = None

    @property
    def has_given_and_family(self) -> bool:
        return bool(self.given and self.family)

    @property
    def is_empty(self) -> bool:
        return not any((self.prefix, self.given, self.middle, self.family, self.suffix))


def _strip_periods(token: str) -> str:
    return token.replace(".", "")


def parse_name_components(full_name: str) -> NameParts:
    tokens = (full_name or "").split()
    if not tokens:
        return NameParts()

    prefix = suffix = None
    if _strip_periods(tokens[0]).lower() in NAME_PREFIXES:
        prefix = format_name(_strip_periods(tokens.pop(0)))
    if tokens and _strip_periods(tokens[-1]).lower() in NAME_SUFFIXES:
        suffix = _strip_periods(tokens.pop()).upper()

    given = middle = family = None
    if len(tokens) == 1:
        given = tokens[0]
    elif len(tokens) == 2:
        given, family = tokens
    elif len(tokens) >= 3:
        given, family = tokens[0], tokens[-1]
        middle = " ".join(tokens[1:-1])

    return NameParts(
        prefix=prefix,
        given=format_name(given) if given else None,
        middle=format_name(middle) if middle else None,
        family=format_name(family) if family else None,
        suffix=suffix,
    )


# Addresses


def format_street(street: str) -> str:
    formatted = (street or "").strip()
    for pattern, full in _STREET_ABBR_RES:
        formatted = pattern.sub(full, formatted)
    return formatted


def format_city(city: str) -> str:
    return format_name((city or "").strip())


def normalize_state(value: str) -> str:
    v = (value or "").strip()
    if not v:
        return ""
    if len(v) == 2:
        return v.upper()
    return STATE_ABBR.get(_norm(v), format_name(v))


def format_postal_code(postal_code: str) -> str:
    digits = phone_digits(postal_code)
    if len(digits) == 5:
        return digits
    if len(digits) == 9:
        return f"{digits[:5]}-{digits[5:]}"
    return postal_code


# Emails and URLs


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    candidate = (email or "").strip()
    if not EMAIL_RE.match(candidate):
        return False
    try:
        validate_email(candidate, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def normalize_url(url: str) -> str:
    normalized = (url or "").strip().lower()
    if normalized and not normalized.startswith(("http://", "https://")):
        normalized = "https://" + normalized
    return normalized


# Organizations


def _capitalize_word(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def format_company(company: str) -> str:
    formatted = (company or "").strip()
    if formatted.upper() == formatted and len(formatted) <= 5:
        return formatted
    return " ".join(_capitalize_word(word) for word in formatted.split())


def format_job_title(title: str) -> str:
    words = []
    for word in (title or "").split():
        lowered = word.lower()
        words.append(lowered if lowered in TITLE_LOWERCASE_WORDS else _capitalize_word(word))
    return " ".join(words)


# Files


def warn_missing(path: Optional[str], label: str) -> bool:
    if not path or not os.path.exists(path):
        logger.warning("%s path missing: %s", label, path)
        return True
    return False
