import pytest

from card_contacts.common import ensure_existing_contact
from card_contacts.models import ExistingContact
from card_contacts.parser import parse_contact
from card_contacts.store import (
    ContactNotFoundError,
    DataFrameContactStore,
    DuplicateFoundError,
    InsufficientDataError,
)

CARD = "John Smith\nCEO\nAcme Corporation\njohn@acme.com\n(555) 123-4567"


def test_save_requires_minimum_data():
    store = DataFrameContactStore()
    with pytest.raises(InsufficientDataError):
        store.save_contact(parse_contact("Dr. John Smith Jr."))
    assert len(store) == 0


def test_save_fetch_and_delete():
    store = DataFrameContactStore()
    contact_id = store.save_contact(parse_contact(CARD))

    fetched = store.fetch_contact(contact_id)
    assert (fetched.given_name, fetched.family_name) == ("John", "Smith")
    assert fetched.phone_numbers == ("5551234567",)
    assert fetched.email_addresses == ("john@acme.com",)

    store.delete_contact(contact_id)
    with pytest.raises(ContactNotFoundError):
        store.fetch_contact(contact_id)
    with pytest.raises(KeyError):
        store.delete_contact(contact_id)


def test_saving_the_same_card_twice_reports_duplicates():
    store = DataFrameContactStore()
    first_id = store.save_contact(parse_contact(CARD))

    with pytest.raises(DuplicateFoundError) as excinfo:
        store.save_contact(parse_contact(CARD))
    assert [c.contact_id for c in excinfo.value.contacts] == [first_id]

    second_id = store.save_contact(parse_contact(CARD), check_duplicates=False)
    assert second_id != first_id
    assert len(store) == 2


def test_strictness_filters_candidates_before_rejecting():
    store = DataFrameContactStore()
    store.save_contact(parse_contact(CARD))
    colleague = parse_contact("Mary Jones\nCTO\nAcme Corporation\nmary@acme.com\n(555) 123-4567")

    with pytest.raises(DuplicateFoundError):
        store.save_contact(colleague)
    store.save_contact(colleague, strictness="strict")
    assert len(store) == 2


def test_searches_ignore_case_accents_and_formatting():
    store = DataFrameContactStore()
    store.save_contact(parse_contact("José García\njose@acme.com"))

    assert len(store.search_by_name("jose  GARCIA")) == 1
    assert len(store.search_by_email("JOSE@ACME.COM")) == 1
    assert store.search_by_phone("") == []
    assert store.search_by_name("") == []


def test_csv_round_trip(tmp_path):
    store = DataFrameContactStore()
    contact_id = store.save_contact(parse_contact(CARD))
    path = tmp_path / "contacts.csv"
    store.to_csv(path)

    reloaded = DataFrameContactStore.from_csv(str(path))
    assert [c.contact_id for c in reloaded.search_by_phone("(555) 123-4567")] == [contact_id]


def test_from_csv_with_missing_file_is_empty(tmp_path):
    store = DataFrameContactStore.from_csv(str(tmp_path / "missing.csv"))
    assert len(store) == 0
    assert store.contacts() == []


def test_ensure_existing_contact():
    payload = {"contact_id": "7", "given_name": "Ann", "phone_numbers": "5551234567|5559876543"}
    contact = ensure_existing_contact(payload)
    assert contact.phone_numbers == ("5551234567", "5559876543")
    assert ensure_existing_contact(contact) is contact
    assert contact.to_dict()["phone_numbers"] == "5551234567|5559876543"
    with pytest.raises(TypeError):
        ensure_existing_contact(["not", "a", "contact"])
    assert isinstance(contact, ExistingContact)
