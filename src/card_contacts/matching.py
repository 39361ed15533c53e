from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Sequence, Union

from .models import ExistingContact, ParsedContact
from .normalization import normalize_email, phone_digits

logger = logging.getLogger(__name__)


class DuplicateStrictness(str, Enum):
    STRICT = "strict"  # name and a contact method
    MEDIUM = "medium"  # name or a contact method
    LOOSE = "loose"  # partial name or a contact method

    @classmethod
    def parse(cls, value: Union[str, "DuplicateStrictness"]) -> "DuplicateStrictness":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(
                f"unknown duplicate strictness {value!r} (expected {choices})"
            ) from None


@dataclass
class MatchSignals:
    given_match: bool
    family_match: bool
    phone_match: bool
    email_match: bool

    @property
    def name_match(self) -> bool:
        return self.given_match and self.family_match

    @property
    def has_contact_method(self) -> bool:
        return self.phone_match or self.email_match


def _same_name(existing: str, parsed: Optional[str]) -> bool:
    return bool(existing) and bool(parsed) and existing == parsed


class DuplicateMatcher:
    def compute(self, existing: ExistingContact, parsed: ParsedContact) -> MatchSignals:
        phones_existing = {phone_digits(phone) for phone in existing.phone_numbers} - {""}
        phones_parsed = {phone.digits for phone in parsed.phone_numbers} - {""}

        emails_existing = {normalize_email(email) for email in existing.email_addresses} - {""}
        emails_parsed = {email.address for email in parsed.email_addresses} - {""}

        return MatchSignals(
            given_match=_same_name(existing.given_name, parsed.given_name),
            family_match=_same_name(existing.family_name, parsed.family_name),
            phone_match=bool(phones_existing & phones_parsed),
            email_match=bool(emails_existing & emails_parsed),
        )

    def matches(
        self,
        existing: ExistingContact,
        parsed: ParsedContact,
        strictness: Union[str, DuplicateStrictness] = DuplicateStrictness.MEDIUM,
    ) -> bool:
        strictness = DuplicateStrictness.parse(strictness)
        signals = self.compute(existing, parsed)
        if strictness is DuplicateStrictness.STRICT:
            return signals.name_match and signals.has_contact_method
        if strictness is DuplicateStrictness.MEDIUM:
            return signals.name_match or signals.has_contact_method
        return signals.given_match or signals.family_match or signals.has_contact_method

    def filter(
        self,
        candidates: Iterable[ExistingContact],
        parsed: ParsedContact,
        strictness: Union[str, DuplicateStrictness] = DuplicateStrictness.MEDIUM,
    ) -> List[ExistingContact]:
        return [
            candidate
            for candidate in candidates
            if self.matches(candidate, parsed, strictness=strictness)
        ]


class ContactSearcher(Protocol):
    """Lookup contract implemented by a contact store."""

    def search_by_name(self, full_name: str) -> Sequence[ExistingContact]: ...

    def search_by_phone(self, digits: str) -> Sequence[ExistingContact]: ...

    def search_by_email(self, email: str) -> Sequence[ExistingContact]: ...


def find_duplicate_candidates(
    parsed: ParsedContact, searcher: ContactSearcher
) -> Optional[List[ExistingContact]]:
    """Collect stored contacts sharing a name, phone or email with ``parsed``.

    Results of the individual searches are merged in search order and
    de-duplicated by ``contact_id``. Returns ``None`` when nothing is found.
    """
    found: List[ExistingContact] = []

    if parsed.given_name and parsed.family_name:
        found.extend(searcher.search_by_name(f"{parsed.given_name} {parsed.family_name}"))
    for phone in parsed.phone_numbers:
        if phone.is_valid:
            found.extend(searcher.search_by_phone(phone.digits))
    for email in parsed.email_addresses:
        if email.is_valid:
            found.extend(searcher.search_by_email(email.address))

    merged: List[ExistingContact] = []
    seen_ids = set()
    for candidate in found:
        if candidate.contact_id in seen_ids:
            continue
        seen_ids.add(candidate.contact_id)
        merged.append(candidate)

    logger.debug("Duplicate search for %r found %d candidate(s)", parsed.full_name, len(merged))
    return merged or None
