from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import pandas as pd

from .common import deterministic_uuid, warn_missing
from .matching import DuplicateMatcher, DuplicateStrictness, find_duplicate_candidates
from .models import ExistingContact, ParsedContact
from .normalization import normalize_email, normalize_text_key, phone_digits

logger = logging.getLogger(__name__)

STORE_COLUMNS = [
    "contact_id",
    "given_name",
    "family_name",
    "organization_name",
    "job_title",
    "phone_numbers",
    "email_addresses",
]


class ContactStoreError(Exception):
    """Base class for failures reported by a contact store."""


class InsufficientDataError(ContactStoreError):
    def __init__(self, contact: ParsedContact):
        self.contact = contact
        super().__init__(
            "Not enough data to create a contact: a name and a phone or email are required."
        )


class DuplicateFoundError(ContactStoreError):
    def __init__(self, contacts: Sequence[ExistingContact]):
        self.contacts = list(contacts)
        super().__init__(f"Found {len(self.contacts)} potential duplicate contact(s).")


class ContactNotFoundError(ContactStoreError, KeyError):
    def __init__(self, contact_id: str):
        self.contact_id = contact_id
        super().__init__(f"contact not found: {contact_id}")

    def __str__(self) -> str:
        return str(self.args[0])


def _split_cell(value: object) -> List[str]:
    return [part.strip() for part in str(value or "").split("|") if part.strip()]


class DataFrameContactStore:
    """In-memory contact store backed by a pandas DataFrame.

    Implements the duplicate-search contract used by
    :func:`card_contacts.matching.find_duplicate_candidates` and the save
    workflow with its minimum-data and duplicate checks.
    """

    def __init__(self, frame: Optional[pd.DataFrame] = None, matcher: Optional[DuplicateMatcher] = None):
        frame = pd.DataFrame(columns=STORE_COLUMNS) if frame is None else frame.copy()
        for column in STORE_COLUMNS:
            if column not in frame.columns:
                frame[column] = ""
        self._frame = frame[STORE_COLUMNS].fillna("").astype(str).reset_index(drop=True)
        self.matcher = matcher or DuplicateMatcher()

    @classmethod
    def from_csv(cls, path: Optional[str]) -> "DataFrameContactStore":
        if warn_missing(path, "Contacts CSV"):
            return cls()
        frame = pd.read_csv(path, dtype=str, keep_default_na=False)
        logger.info("Loaded %d stored contact(s) from %s", len(frame), path)
        return cls(frame)

    def to_csv(self, path: Union[str, Path]) -> None:
        self._frame.to_csv(str(path), index=False, encoding="utf-8", quoting=csv.QUOTE_ALL)

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def contacts(self) -> List[ExistingContact]:
        return [ExistingContact.from_mapping(row.to_dict()) for _, row in self._frame.iterrows()]

    def _select(self, predicate: Callable[[pd.Series], bool]) -> List[ExistingContact]:
        return [
            ExistingContact.from_mapping(row.to_dict())
            for _, row in self._frame.iterrows()
            if predicate(row)
        ]

    # Search contract

    def search_by_name(self, full_name: str) -> List[ExistingContact]:
        key = normalize_text_key(full_name)
        if not key:
            return []
        return self._select(
            lambda row: normalize_text_key(f"{row['given_name']} {row['family_name']}") == key
        )

    def search_by_phone(self, digits: str) -> List[ExistingContact]:
        key = phone_digits(digits)
        if not key:
            return []
        return self._select(
            lambda row: any(phone_digits(phone) == key for phone in _split_cell(row["phone_numbers"]))
        )

    def search_by_email(self, email: str) -> List[ExistingContact]:
        key = normalize_email(email)
        if not key:
            return []
        return self._select(
            lambda row: any(
                normalize_email(value) == key for value in _split_cell(row["email_addresses"])
            )
        )

    # Record management

    def fetch_contact(self, contact_id: str) -> ExistingContact:
        matches = self._select(lambda row: row["contact_id"] == contact_id)
        if not matches:
            raise ContactNotFoundError(contact_id)
        return matches[0]

    def find_duplicates(
        self,
        parsed: ParsedContact,
        strictness: Optional[Union[str, DuplicateStrictness]] = None,
    ) -> Optional[List[ExistingContact]]:
        candidates = find_duplicate_candidates(parsed, self)
        if candidates and strictness is not None:
            candidates = self.matcher.filter(candidates, parsed, strictness=strictness) or None
        return candidates

    def _new_contact_id(self, parsed: ParsedContact) -> str:
        seed = "|".join(
            [
                parsed.full_name,
                ",".join(phone.digits for phone in parsed.phone_numbers),
                ",".join(email.address for email in parsed.email_addresses),
            ]
        )
        existing_ids = set(self._frame["contact_id"])
        contact_id = deterministic_uuid(seed)
        attempt = 1
        while contact_id in existing_ids:
            contact_id = deterministic_uuid(f"{seed}#{attempt}")
            attempt += 1
        return contact_id

    def save_contact(
        self,
        parsed: ParsedContact,
        check_duplicates: bool = True,
        strictness: Optional[Union[str, DuplicateStrictness]] = None,
    ) -> str:
        if not parsed.is_valid_for_saving:
            raise InsufficientDataError(parsed)
        if check_duplicates:
            duplicates = self.find_duplicates(parsed, strictness=strictness)
            if duplicates:
                raise DuplicateFoundError(duplicates)

        contact_id = self._new_contact_id(parsed)
        row = {
            "contact_id": contact_id,
            "given_name": parsed.given_name or "",
            "family_name": parsed.family_name or "",
            "organization_name": parsed.organization_name or "",
            "job_title": parsed.job_title or "",
            "phone_numbers": "|".join(
                phone.digits for phone in parsed.phone_numbers if phone.is_valid
            ),
            "email_addresses": "|".join(
                email.address for email in parsed.email_addresses if email.is_valid
            ),
        }
        new_row = pd.DataFrame([row], columns=STORE_COLUMNS)
        if self._frame.empty:
            self._frame = new_row
        else:
            self._frame = pd.concat([self._frame, new_row], ignore_index=True)
        logger.info("Saved contact %s (%s)", contact_id, parsed.full_name or "unnamed")
        return contact_id

    def delete_contact(self, contact_id: str) -> None:
        mask = self._frame["contact_id"] == contact_id
        if not mask.any():
            raise ContactNotFoundError(contact_id)
        self._frame = self._frame[~mask].reset_index(drop=True)
        logger.info("Deleted contact %s", contact_id)
