from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple
from urllib.parse import urlparse

from .normalization import format_phone_display, is_valid_email, normalize_email, phone_digits

LABEL_MOBILE = "mobile"
LABEL_WORK = "work"
LABEL_HOME = "home"
LABEL_MAIN = "main"
LABEL_FAX = "fax"
LABEL_IPHONE = "iphone"
LABEL_SOCIAL = "social"
LABEL_HOMEPAGE = "homepage"
LABEL_OTHER = "other"


class UrlType(str, Enum):
    WEBSITE = "website"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    OTHER = "other"


@dataclass(frozen=True)
class PhoneEntry:
    number: str
    label: str = LABEL_MOBILE
    confidence: float = 1.0

    @property
    def digits(self) -> str:
        return phone_digits(self.number)

    @property
    def is_valid(self) -> bool:
        return 10 <= len(self.digits) <= 15

    @property
    def display(self) -> str:
        return format_phone_display(self.number)

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number, "label": self.label, "confidence": self.confidence}


@dataclass(frozen=True)
class EmailEntry:
    address: str
    label: str = LABEL_WORK
    confidence: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_email(self.address))

    @property
    def is_valid(self) -> bool:
        return is_valid_email(self.address)

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "label": self.label, "confidence": self.confidence}


@dataclass(frozen=True)
class UrlEntry:
    url: str
    label: str = LABEL_HOMEPAGE
    type: UrlType = UrlType.WEBSITE
    confidence: float = 1.0

    @property
    def is_valid(self) -> bool:
        parsed = urlparse(self.url)
        return bool(parsed.scheme and parsed.netloc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "label": self.label,
            "type": self.type.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class AddressEntry:
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    label: str = LABEL_WORK
    confidence: float = 1.0

    @property
    def is_valid(self) -> bool:
        present = [bool(value) for value in (self.street, self.city, self.state, self.postal_code)]
        return sum(present) >= 2

    @property
    def key(self) -> Tuple[str, str, str, str]:
        return (
            (self.street or "").lower(),
            (self.city or "").lower(),
            (self.state or "").upper(),
            self.postal_code or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "street": self.street or "",
            "city": self.city or "",
            "state": self.state or "",
            "postal_code": self.postal_code or "",
            "country": self.country or "",
            "label": self.label,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ConfidenceScores:
    name: float = 0.0
    phone: float = 0.0
    email: float = 0.0
    address: float = 0.0
    organization: float = 0.0
    overall: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "organization": self.organization,
            "overall": self.overall,
        }


@dataclass(frozen=True)
class ValidationFlags:
    has_valid_name: bool = False
    has_valid_phone: bool = False
    has_valid_email: bool = False
    has_valid_address: bool = False
    has_minimum_data: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "has_valid_name": self.has_valid_name,
            "has_valid_phone": self.has_valid_phone,
            "has_valid_email": self.has_valid_email,
            "has_valid_address": self.has_valid_address,
            "has_minimum_data": self.has_minimum_data,
        }


@dataclass(frozen=True)
class ParsedContact:
    """Snapshot of everything extracted from one transcript.

    Instances are never mutated once returned by the parser; use
    :meth:`replace` to derive an edited copy.
    """

    raw_text: str = ""
    name_prefix: Optional[str] = None
    given_name: Optional[str] = None
    middle_name: Optional[str] = None
    family_name: Optional[str] = None
    name_suffix: Optional[str] = None
    organization_name: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None
    phone_numbers: Tuple[PhoneEntry, ...] = ()
    email_addresses: Tuple[EmailEntry, ...] = ()
    urls: Tuple[UrlEntry, ...] = ()
    postal_addresses: Tuple[AddressEntry, ...] = ()
    confidence_scores: ConfidenceScores = field(default_factory=ConfidenceScores)
    validation_flags: ValidationFlags = field(default_factory=ValidationFlags)

    @property
    def is_valid_for_saving(self) -> bool:
        return self.validation_flags.has_minimum_data

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.given_name, self.family_name) if part)

    @property
    def summary(self) -> str:
        parts = [part for part in (self.given_name, self.family_name) if part]
        if self.organization_name:
            parts.append(f"({self.organization_name})")
        methods = [
            f"{count} {noun}"
            for count, noun in (
                (len(self.phone_numbers), "phone"),
                (len(self.email_addresses), "email"),
                (len(self.urls), "URL"),
            )
            if count
        ]
        if methods:
            parts.append("- " + ", ".join(methods))
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw_text": self.raw_text,
            "name_prefix": self.name_prefix or "",
            "given_name": self.given_name or "",
            "middle_name": self.middle_name or "",
            "family_name": self.family_name or "",
            "name_suffix": self.name_suffix or "",
            "organization_name": self.organization_name or "",
            "job_title": self.job_title or "",
            "department": self.department or "",
            "phone_numbers": [phone.to_dict() for phone in self.phone_numbers],
            "email_addresses": [email.to_dict() for email in self.email_addresses],
            "urls": [url.to_dict() for url in self.urls],
            "postal_addresses": [address.to_dict() for address in self.postal_addresses],
            "confidence_scores": self.confidence_scores.to_dict(),
            "validation_flags": self.validation_flags.to_dict(),
        }

    def replace(self, **changes: Any) -> "ParsedContact":
        return replace(self, **changes)


def _split_multi(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        parts: Sequence[str] = value.split("|")
    else:
        parts = [str(item) for item in value]
    return tuple(part.strip() for part in parts if part and part.strip())


@dataclass(frozen=True)
class ExistingContact:
    """Minimal projection of a stored contact used for duplicate checks."""

    contact_id: str
    given_name: str = ""
    family_name: str = ""
    phone_numbers: Tuple[str, ...] = ()
    email_addresses: Tuple[str, ...] = ()

    @staticmethod
    def from_mapping(payload: Dict[str, Any]) -> "ExistingContact":
        return ExistingContact(
            contact_id=str(payload.get("contact_id", "") or "").strip(),
            given_name=str(payload.get("given_name", "") or "").strip(),
            family_name=str(payload.get("family_name", "") or "").strip(),
            phone_numbers=_split_multi(payload.get("phone_numbers")),
            email_addresses=_split_multi(payload.get("email_addresses")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "contact_id": self.contact_id,
            "given_name": self.given_name,
            "family_name": self.family_name,
            "phone_numbers": "|".join(self.phone_numbers),
            "email_addresses": "|".join(self.email_addresses),
        }
