from __future__ import annotations

import logging
from typing import Mapping, Optional

from .config_loader import ExtractionConfig
from .confidence import ConfidenceAggregator
from .extractors import (
    extract_addresses,
    extract_emails,
    extract_name,
    extract_organization,
    extract_phones,
    extract_urls,
)
from .models import ParsedContact
from .validation import validate_contact

logger = logging.getLogger(__name__)


class ContactParser:
    """Turns a business-card transcript into a scored :class:`ParsedContact`.

    Parsing holds no state between calls, so one parser can be shared across
    threads and scan sessions.
    """

    def __init__(
        self,
        extraction: Optional[ExtractionConfig] = None,
        weights: Optional[Mapping[str, float]] = None,
    ):
        self.extraction = extraction or ExtractionConfig()
        self.aggregator = ConfidenceAggregator(weights)

    def parse(self, raw_text: str) -> ParsedContact:
        text = raw_text or ""
        name = extract_name(text, self.extraction)
        organization = extract_organization(text, self.extraction)

        contact = ParsedContact(
            raw_text=text,
            name_prefix=name.prefix,
            given_name=name.given,
            middle_name=name.middle,
            family_name=name.family,
            name_suffix=name.suffix,
            organization_name=organization.organization_name,
            job_title=organization.job_title,
            department=organization.department,
            phone_numbers=tuple(extract_phones(text, self.extraction)),
            email_addresses=tuple(extract_emails(text, self.extraction)),
            urls=tuple(extract_urls(text, self.extraction)),
            postal_addresses=tuple(extract_addresses(text, self.extraction)),
        )
        contact = contact.replace(confidence_scores=self.aggregator.score(contact))
        contact = contact.replace(validation_flags=validate_contact(contact))

        logger.debug(
            "Parsed %d chars -> %s (overall=%.2f, minimum_data=%s)",
            len(text),
            contact.summary or "<empty>",
            contact.confidence_scores.overall,
            contact.validation_flags.has_minimum_data,
        )
        return contact


_DEFAULT_PARSER = ContactParser()


def parse_contact(raw_text: str) -> ParsedContact:
    return _DEFAULT_PARSER.parse(raw_text)
