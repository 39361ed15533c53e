import time

import pytest

from card_contacts.extractors import (
    extract_addresses,
    extract_emails,
    extract_name,
    extract_organization,
    extract_phones,
    extract_urls,
)
from card_contacts.models import (
    LABEL_HOME,
    LABEL_MOBILE,
    LABEL_SOCIAL,
    LABEL_WORK,
    AddressEntry,
    ParsedContact,
    PhoneEntry,
    UrlType,
)
from card_contacts.parser import ContactParser, parse_contact
from card_contacts.validation import validate_contact

BUSINESS_CARD = "John Smith\nCEO\nAcme Corporation\njohn@acme.com\n(555) 123-4567"


def _all_confidences(contact):
    values = list(contact.confidence_scores.to_dict().values())
    for group in (
        contact.phone_numbers,
        contact.email_addresses,
        contact.urls,
        contact.postal_addresses,
    ):
        values.extend(entry.confidence for entry in group)
    return values


def test_business_card_transcript():
    contact = parse_contact(BUSINESS_CARD)

    assert contact.given_name == "John"
    assert contact.family_name == "Smith"
    assert [phone.digits for phone in contact.phone_numbers] == ["5551234567"]
    assert [email.address for email in contact.email_addresses] == ["john@acme.com"]
    assert contact.email_addresses[0].is_valid
    assert contact.urls == ()
    assert contact.validation_flags.has_minimum_data is True
    assert contact.is_valid_for_saving
    assert contact.confidence_scores.overall == pytest.approx(0.74)


def test_prefix_and_suffix_are_split_out():
    contact = parse_contact("Dr. John Smith Jr.")
    assert contact.name_prefix == "Dr"
    assert contact.given_name == "John"
    assert contact.family_name == "Smith"
    assert contact.name_suffix == "JR"
    assert not contact.is_valid_for_saving


def test_empty_transcript():
    contact = parse_contact("")
    assert not contact.is_valid_for_saving
    scores = contact.confidence_scores
    assert (scores.name, scores.phone, scores.email, scores.address, scores.organization) == (
        0.0,
        0.0,
        0.0,
        0.0,
        0.0,
    )
    assert scores.overall == 0.0
    assert contact.full_name == ""


def test_street_and_city_state_zip_become_one_address():
    contact = parse_contact("123 Main Street\nSan Francisco, CA 94102")
    assert len(contact.postal_addresses) == 1
    address = contact.postal_addresses[0]
    assert address.street == "123 Main Street"
    assert (address.city, address.state, address.postal_code) == ("San Francisco", "CA", "94102")
    assert address.country == "USA"
    assert address.confidence == pytest.approx(1.0)
    assert contact.validation_flags.has_valid_address


@pytest.mark.parametrize(
    "transcript",
    [
        BUSINESS_CARD,
        "",
        "Email: jane@gmail.com\nPhone (415) 555-2671 mobile cell work\nhttps://www.linkedin.com/in/jane",
        "Jane Doe\nSenior Engineer\nInitech LLC\n500 Oak Ave\nAustin, TX 78701\nwww.initech.com",
    ],
)
def test_every_confidence_is_bounded(transcript):
    contact = parse_contact(transcript)
    assert all(0.0 <= value <= 1.0 for value in _all_confidences(contact))


def test_name_strategies_fall_through_in_order():
    assert extract_name("ACME\nName: jane doe").given == "Jane"
    assert extract_name("ACME\nName: jane doe").family == "Doe"

    by_capitalization = extract_name("INITECH\nJane Doe\n555-0100")
    assert (by_capitalization.given, by_capitalization.family) == ("Jane", "Doe")

    assert extract_name("initech").family is None


def test_phone_labels_and_confidence():
    office = extract_phones("Office: 415-555-2671")
    assert len(office) == 1
    assert office[0].label == LABEL_WORK
    assert office[0].confidence == pytest.approx(0.7)

    phone = extract_phones("Phone 415-555-2671")[0]
    assert phone.label == LABEL_MOBILE
    assert phone.confidence == pytest.approx(0.8)

    short = extract_phones("x 555-0100")[0]
    assert short.confidence == pytest.approx(0.2)
    assert not short.is_valid


def test_phones_collapse_by_digits():
    phones = extract_phones("(415) 555-2671\n415.555.2671")
    assert [phone.digits for phone in phones] == ["4155552671"]
    assert phones[0].display == "(415) 555-2671"


def test_email_labels_and_confidence():
    personal = extract_emails("Email: Jane@Gmail.com")[0]
    assert personal.address == "jane@gmail.com"
    assert personal.label == LABEL_HOME
    assert personal.confidence == pytest.approx(1.0)

    work = extract_emails("jane@initech.com, JANE@initech.com")
    assert len(work) == 1
    assert work[0].label == LABEL_WORK
    assert work[0].confidence == pytest.approx(0.7)


def test_url_types_labels_and_confidence():
    urls = extract_urls("linkedin.com/in/jdoe\nTwitter x.com/jdoe\nhttps://www.initech.com.")
    by_type = {url.type: url for url in urls}

    linkedin = by_type[UrlType.LINKEDIN]
    assert linkedin.url == "https://linkedin.com/in/jdoe"
    assert linkedin.label == LABEL_SOCIAL
    assert linkedin.confidence == pytest.approx(0.4)

    assert by_type[UrlType.TWITTER].url == "https://x.com/jdoe"

    website = by_type[UrlType.WEBSITE]
    assert website.url == "https://www.initech.com"
    assert website.confidence == pytest.approx(0.9)
    assert website.is_valid


def test_address_without_street_uses_city_state_zip():
    addresses = extract_addresses("Austin, TX 78701")
    assert len(addresses) == 1
    assert addresses[0].street is None
    assert (addresses[0].city, addresses[0].state, addresses[0].postal_code) == (
        "Austin",
        "TX",
        "78701",
    )
    assert addresses[0].confidence == pytest.approx(0.7)
    assert addresses[0].is_valid


def test_organization_keyword_lines():
    parts = extract_organization(
        "Jane Doe\nCompany: initech llc\nTitle: senior engineer\nDept: research"
    )
    assert parts.organization_name == "Initech Llc"
    assert parts.job_title == "Senior Engineer"
    assert parts.department == "Research"


def test_organization_from_company_suffix_when_second_line_is_contact_info():
    parts = extract_organization("Jane Doe\njane@initech.com\nInitech LLC")
    assert parts.organization_name == "Initech Llc"
    assert parts.job_title is None


def test_parser_uses_custom_weights():
    parser = ContactParser(weights={"name": 1.0, "phone": 0, "email": 0, "address": 0, "organization": 0})
    contact = parser.parse(BUSINESS_CARD)
    assert contact.confidence_scores.overall == pytest.approx(1.0)


def test_parsed_contact_is_immutable_and_replaceable():
    contact = parse_contact(BUSINESS_CARD)
    with pytest.raises(AttributeError):
        contact.given_name = "Jack"
    edited = contact.replace(given_name="Jack")
    assert edited.given_name == "Jack"
    assert contact.given_name == "John"
    assert edited.to_dict()["given_name"] == "Jack"
    assert "John Smith" in contact.summary


@pytest.mark.parametrize(
    "digits, expected",
    [("1" * 9, False), ("1" * 10, True), ("1" * 15, True), ("1" * 16, False)],
)
def test_phone_validity_follows_digit_count(digits, expected):
    assert PhoneEntry(digits).is_valid is expected


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({}, False),
        ({"street": "1 Main Street"}, False),
        ({"city": "Austin"}, False),
        ({"postal_code": "78701"}, False),
        ({"city": "Austin", "state": "TX"}, True),
        ({"street": "1 Main Street", "postal_code": "78701"}, True),
    ],
)
def test_address_validity_needs_two_fields(fields, expected):
    address = AddressEntry(**fields)
    assert address.is_valid is expected
    flags = validate_contact(ParsedContact(postal_addresses=(address,)))
    assert flags.has_valid_address is expected


def test_unit_designator_is_not_part_of_the_city():
    addresses = extract_addresses("Suite B San Francisco, CA 94102")
    assert [(a.city, a.state, a.postal_code) for a in addresses] == [
        ("San Francisco", "CA", "94102")
    ]

    with_street = extract_addresses("200 Pine Street\nSte 410 Austin, TX 78701")
    assert with_street[0].city == "Austin"


@pytest.mark.parametrize("line", ["word " * 20_000, "1 a " * 25_000, "a" * 100_000])
def test_long_single_line_parses_quickly(line):
    started = time.perf_counter()
    contact = parse_contact(line)
    assert time.perf_counter() - started < 10.0
    assert contact.postal_addresses == ()
