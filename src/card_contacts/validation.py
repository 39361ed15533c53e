from __future__ import annotations

from .models import ParsedContact, ValidationFlags


def has_minimum_data(has_name: bool, has_phone: bool, has_email: bool) -> bool:
    """Save gate: a usable name plus a usable phone or email."""
    return has_name and (has_phone or has_email)


def validate_contact(contact: ParsedContact) -> ValidationFlags:
    has_name = bool(contact.given_name or contact.family_name)
    has_phone = any(phone.is_valid for phone in contact.phone_numbers)
    has_email = any(email.is_valid for email in contact.email_addresses)
    has_address = any(address.is_valid for address in contact.postal_addresses)
    return ValidationFlags(
        has_valid_name=has_name,
        has_valid_phone=has_phone,
        has_valid_email=has_email,
        has_valid_address=has_address,
        has_minimum_data=has_minimum_data(has_name, has_phone, has_email),
    )
