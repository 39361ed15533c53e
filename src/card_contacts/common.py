from __future__ import annotations

import uuid
from typing import Any

from .config_loader import ExtractionConfig, ParserConfig, load_parser_config
from .matching import DuplicateMatcher, DuplicateStrictness, MatchSignals, find_duplicate_candidates
from .models import (
    AddressEntry,
    ConfidenceScores,
    EmailEntry,
    ExistingContact,
    ParsedContact,
    PhoneEntry,
    UrlEntry,
    UrlType,
    ValidationFlags,
)
from .normalization import (
    NameParts,
    format_phone_e164_safe,
    normalize_email,
    normalize_state,
    normalize_text_key,
    parse_name_components,
    phone_digits,
    warn_missing,
)
from .parser import ContactParser, parse_contact

__all__ = [
    "AddressEntry",
    "ConfidenceScores",
    "ContactParser",
    "DuplicateMatcher",
    "DuplicateStrictness",
    "EmailEntry",
    "ExistingContact",
    "ExtractionConfig",
    "MatchSignals",
    "NameParts",
    "ParsedContact",
    "ParserConfig",
    "PhoneEntry",
    "UrlEntry",
    "UrlType",
    "ValidationFlags",
    "deterministic_uuid",
    "ensure_existing_contact",
    "find_duplicate_candidates",
    "format_phone_e164_safe",
    "load_config",
    "normalize_email",
    "normalize_state",
    "normalize_text_key",
    "parse_contact",
    "parse_name_components",
    "phone_digits",
    "warn_missing",
]


def deterministic_uuid(namespace_str: str) -> str:
    namespace = uuid.UUID("3f0c6a52-9d1e-4b7a-8c55-2e61d0a4b9f3")
    return str(uuid.uuid5(namespace, namespace_str))


def load_config(args: Any) -> ParserConfig:
    return load_parser_config(args)


def ensure_existing_contact(obj: Any) -> ExistingContact:
    if isinstance(obj, ExistingContact):
        return obj
    if isinstance(obj, dict):
        return ExistingContact.from_mapping(obj)
    raise TypeError(f"Unsupported contact payload type: {type(obj)!r}")
