from __future__ import annotations

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from .config_loader import ExtractionConfig
from .models import (
    LABEL_FAX,
    LABEL_HOME,
    LABEL_HOMEPAGE,
    LABEL_IPHONE,
    LABEL_MAIN,
    LABEL_MOBILE,
    LABEL_OTHER,
    LABEL_SOCIAL,
    LABEL_WORK,
    AddressEntry,
    EmailEntry,
    PhoneEntry,
    UrlEntry,
    UrlType,
)
from .normalization import (
    NameParts,
    format_city,
    format_company,
    format_job_title,
    format_postal_code,
    format_street,
    is_valid_email,
    normalize_email,
    normalize_state,
    normalize_url,
    parse_name_components,
    phone_digits,
)
from .patterns import (
    CITY_STATE_ZIP,
    COMMON_TLDS,
    COMPANY,
    EMAIL,
    FREE_MAIL_DOMAINS,
    PHONE,
    SOCIAL_DOMAINS,
    STREET,
    TITLE_KEYWORDS,
    URL,
    contains_keyword,
)

logger = logging.getLogger(__name__)

NameStrategy = Callable[[Sequence[str], ExtractionConfig], Optional[NameParts]]

_NAME_LABEL_RE = re.compile(r"name:", re.IGNORECASE)
_COMPANY_LABEL_RE = re.compile(r"(company|organization):\s*", re.IGNORECASE)
_TITLE_LABEL_RE = re.compile(r"(title|position):\s*", re.IGNORECASE)
_DEPARTMENT_LABEL_RE = re.compile(r"(department|dept):\s*", re.IGNORECASE)
_URL_TRAILING_PUNCTUATION = ".,;:!?)]'\""
_UNIT_PREFIX_RE = re.compile(
    r"^.*\b(?:suite|ste|apt|unit|room|rm|floor|fl|bldg|building)\b\.?[ \t]*#?[A-Za-z0-9\-]+[ \t]+",
    re.IGNORECASE,
)


def transcript_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


# Names


def _name_from_first_line(lines: Sequence[str], config: ExtractionConfig) -> Optional[NameParts]:
    if not lines:
        return None
    parts = parse_name_components(lines[0])
    return parts if parts.has_given_and_family else None


def _name_from_keyword(lines: Sequence[str], config: ExtractionConfig) -> Optional[NameParts]:
    for line in lines:
        if "name:" in line.lower():
            parts = parse_name_components(_NAME_LABEL_RE.sub("", line))
            return None if parts.is_empty else parts
    return None


def _name_from_capitalization(
    lines: Sequence[str], config: ExtractionConfig
) -> Optional[NameParts]:
    for line in lines[: config.name_scan_lines]:
        words = line.split()
        if not 2 <= len(words) <= 4:
            continue
        if sum(1 for word in words if word[:1].isupper()) < 2:
            continue
        parts = parse_name_components(line)
        if parts.given:
            return parts
    return None


NAME_STRATEGIES: Tuple[Tuple[str, NameStrategy], ...] = (
    ("first_line", _name_from_first_line),
    ("keyword", _name_from_keyword),
    ("capitalization", _name_from_capitalization),
)


def extract_name(text: str, config: Optional[ExtractionConfig] = None) -> NameParts:
    config = config or ExtractionConfig()
    lines = transcript_lines(text)
    for strategy_name, strategy in NAME_STRATEGIES:
        parts = strategy(lines, config)
        if parts is not None:
            logger.debug("Name found by %s strategy", strategy_name)
            return parts
    return NameParts()


# Phones


def detect_phone_label(context: str) -> str:
    lowered = (context or "").lower()
    if "mobile" in lowered or "cell" in lowered:
        return LABEL_MOBILE
    if "work" in lowered or "office" in lowered or "business" in lowered:
        return LABEL_WORK
    if "home" in lowered:
        return LABEL_HOME
    if "main" in lowered:
        return LABEL_MAIN
    if "fax" in lowered:
        return LABEL_FAX
    if "iphone" in lowered:
        return LABEL_IPHONE
    return LABEL_MOBILE


def phone_confidence(number: str, context: str) -> float:
    digits = phone_digits(number)
    confidence = 0.5 if 10 <= len(digits) <= 15 else 0.2
    if contains_keyword(context, ("phone", "mobile", "tel")):
        confidence += 0.3
    if contains_keyword(context, ("cell", "work", "office")):
        confidence += 0.2
    return min(confidence, 1.0)


def extract_phones(text: str, config: Optional[ExtractionConfig] = None) -> List[PhoneEntry]:
    config = config or ExtractionConfig()
    found: "OrderedDict[str, Tuple[str, str]]" = OrderedDict()
    for match in PHONE.find_all(text, radius=config.context_radius):
        digits = phone_digits(match.text)
        if digits and digits not in found:
            found[digits] = (match.text.strip(), match.context)
    return [
        PhoneEntry(
            number=number,
            label=detect_phone_label(context),
            confidence=phone_confidence(number, context),
        )
        for number, context in found.values()
    ]


# Emails


def detect_email_label(context: str, email: str) -> str:
    lowered = (context or "").lower()
    if any(domain in email.lower() for domain in FREE_MAIL_DOMAINS):
        return LABEL_HOME
    if "personal" in lowered or "home" in lowered:
        return LABEL_HOME
    return LABEL_WORK


def email_confidence(email: str, context: str) -> float:
    confidence = 0.6 if is_valid_email(email) else 0.2
    if contains_keyword(context, ("email", "e-mail")):
        confidence += 0.3
    if email.lower().endswith(COMMON_TLDS):
        confidence += 0.1
    return min(confidence, 1.0)


def extract_emails(text: str, config: Optional[ExtractionConfig] = None) -> List[EmailEntry]:
    config = config or ExtractionConfig()
    entries: List[EmailEntry] = []
    seen = set()
    for match in EMAIL.find_all(text, radius=config.context_radius):
        address = normalize_email(match.text)
        if address in seen:
            continue
        seen.add(address)
        entries.append(
            EmailEntry(
                address=address,
                label=detect_email_label(match.context, address),
                confidence=email_confidence(address, match.context),
            )
        )
    return entries


# URLs


def detect_url_type(url: str) -> UrlType:
    lowered = (url or "").lower()
    host = urlparse(normalize_url(lowered)).hostname or ""
    if "linkedin.com" in lowered:
        return UrlType.LINKEDIN
    if "twitter.com" in lowered or host == "x.com" or host.endswith(".x.com"):
        return UrlType.TWITTER
    if "facebook.com" in lowered:
        return UrlType.FACEBOOK
    if "instagram.com" in lowered:
        return UrlType.INSTAGRAM
    return UrlType.WEBSITE


def detect_url_label(url_type: UrlType) -> str:
    if url_type is UrlType.WEBSITE:
        return LABEL_HOMEPAGE
    if url_type is UrlType.OTHER:
        return LABEL_OTHER
    return LABEL_SOCIAL


def url_confidence(raw_url: str) -> float:
    lowered = (raw_url or "").lower()
    confidence = 0.0
    if lowered.startswith(("http://", "https://")):
        confidence += 0.4
    if "www." in lowered:
        confidence += 0.2
    if any(tld in lowered for tld in COMMON_TLDS):
        confidence += 0.3
    if any(domain in lowered for domain in SOCIAL_DOMAINS):
        confidence += 0.1
    return min(confidence, 1.0)


def extract_urls(text: str, config: Optional[ExtractionConfig] = None) -> List[UrlEntry]:
    config = config or ExtractionConfig()
    entries: List[UrlEntry] = []
    seen = set()
    for match in URL.find_all(text, radius=config.context_radius):
        raw = match.text.rstrip(_URL_TRAILING_PUNCTUATION)
        if "@" in raw:
            continue
        normalized = normalize_url(raw)
        if not raw or normalized in seen:
            continue
        seen.add(normalized)
        url_type = detect_url_type(normalized)
        entries.append(
            UrlEntry(
                url=normalized,
                label=detect_url_label(url_type),
                type=url_type,
                confidence=url_confidence(raw),
            )
        )
    return entries


# Addresses


def detect_address_label(context: str) -> str:
    lowered = (context or "").lower()
    if "work" in lowered or "office" in lowered or "business" in lowered:
        return LABEL_WORK
    if "home" in lowered:
        return LABEL_HOME
    return LABEL_WORK


def address_confidence(
    street: Optional[str], city: Optional[str], state: Optional[str], postal_code: Optional[str]
) -> float:
    confidence = 0.0
    if street:
        confidence += 0.3
    if city:
        confidence += 0.3
    if state:
        confidence += 0.2
    if postal_code:
        confidence += 0.2
    return min(confidence, 1.0)


def _split_city_state_zip(match: "re.Match[str]") -> Tuple[str, str, str]:
    return (
        format_city(_UNIT_PREFIX_RE.sub("", match.group("city"))),
        normalize_state(match.group("state")),
        format_postal_code(match.group("postal")),
    )


def extract_addresses(
    text: str, config: Optional[ExtractionConfig] = None
) -> List[AddressEntry]:
    config = config or ExtractionConfig()
    text = text or ""
    found: "OrderedDict[Tuple[str, str, str, str], AddressEntry]" = OrderedDict()

    def keep(entry: AddressEntry) -> None:
        found.setdefault(entry.key, entry)

    for street_match in STREET.find_all(text, radius=config.context_radius):
        window = text[street_match.end : street_match.end + config.address_window]
        csz = CITY_STATE_ZIP.first(window)
        if csz is None:
            continue
        city, state, postal_code = _split_city_state_zip(csz)
        street = format_street(street_match.text)
        context_start = max(0, street_match.start - config.context_radius)
        context = text[context_start : context_start + config.address_window]
        keep(
            AddressEntry(
                street=street,
                city=city or None,
                state=state or None,
                postal_code=postal_code or None,
                country=config.default_country,
                label=detect_address_label(context),
                confidence=address_confidence(street, city, state, postal_code),
            )
        )

    if not found:
        for csz in CITY_STATE_ZIP.finditer(text):
            city, state, postal_code = _split_city_state_zip(csz)
            keep(
                AddressEntry(
                    street=None,
                    city=city or None,
                    state=state or None,
                    postal_code=postal_code or None,
                    country=config.default_country,
                    label=LABEL_WORK,
                    confidence=0.7,
                )
            )

    return list(found.values())


# Organization, title and department


@dataclass(frozen=True)
class OrganizationParts:
    organization_name: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None


def _looks_like_company_line(line: str) -> bool:
    return (
        "@" not in line
        and "www." not in line
        and "http" not in line
        and sum(ch.isdigit() for ch in line) < 5
    )


def extract_organization(
    text: str, config: Optional[ExtractionConfig] = None
) -> OrganizationParts:
    config = config or ExtractionConfig()
    lines = transcript_lines(text)
    organization = title = department = None

    for line in lines:
        lowered = line.lower()
        if "company:" in lowered or "organization:" in lowered:
            organization = format_company(_COMPANY_LABEL_RE.sub("", line))
        elif "title:" in lowered or "position:" in lowered:
            title = format_job_title(_TITLE_LABEL_RE.sub("", line))
        elif "department:" in lowered or "dept:" in lowered:
            department = format_job_title(_DEPARTMENT_LABEL_RE.sub("", line))

    if title is None:
        for line in lines[: config.title_scan_lines]:
            if contains_keyword(line, TITLE_KEYWORDS):
                title = format_job_title(line)
                break

    if organization is None and len(lines) >= 2 and _looks_like_company_line(lines[1]):
        organization = format_company(lines[1])

    if organization is None:
        for line in lines[: config.title_scan_lines]:
            if COMPANY.matches(line) and _looks_like_company_line(line):
                organization = format_company(line)
                break

    return OrganizationParts(organization_name=organization, job_title=title, department=department)
