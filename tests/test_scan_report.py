import csv
import sys
from types import SimpleNamespace

import pandas as pd

from card_contacts import scan_report
from card_contacts.parser import parse_contact
from card_contacts.store import DataFrameContactStore

CARD = "John Smith\nCEO\nAcme Corporation\njohn@acme.com\n(555) 123-4567"


def _args(tmp_path, **overrides):
    values = {
        "config": None,
        "transcripts": [],
        "contacts_csv": None,
        "strictness": None,
        "default_country": None,
        "out_dir": str(tmp_path / "out"),
        "log_level": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _write_cards(tmp_path):
    cards = tmp_path / "cards"
    cards.mkdir()
    (cards / "a_john.txt").write_text(CARD, encoding="utf-8")
    (cards / "b_blank.txt").write_text("", encoding="utf-8")
    (cards / "notes.md").write_text("ignored", encoding="utf-8")
    return cards


def test_confidence_buckets():
    assert scan_report.confidence_bucket(0.85) == "very_high"
    assert scan_report.confidence_bucket(0.8) == "very_high"
    assert scan_report.confidence_bucket(0.6) == "high"
    assert scan_report.confidence_bucket(0.45) == "medium"
    assert scan_report.confidence_bucket(0.1) == "low"


def test_collect_transcripts_expands_directories(tmp_path):
    cards = _write_cards(tmp_path)
    extra = tmp_path / "extra.txt"
    extra.write_text("Jane Doe", encoding="utf-8")
    found = scan_report.collect_transcripts([str(cards), str(extra), str(tmp_path / "missing")])
    assert [path.name for path in found] == ["a_john.txt", "b_blank.txt", "extra.txt"]


def test_build_reports_one_row_per_transcript(tmp_path):
    cards = _write_cards(tmp_path)
    contacts_df, summary_df = scan_report.build(_args(tmp_path, transcripts=[str(cards)]))

    assert len(contacts_df) == 2
    john = contacts_df.iloc[0]
    assert john["full_name"] == "John Smith"
    assert john["phones"] == "+15551234567::mobile"
    assert john["emails"] == "john@acme.com::work"
    assert bool(john["has_minimum_data"]) is True
    assert john["confidence_bucket"] == "high"
    assert john["duplicate_contact_ids"] == ""

    blank = contacts_df.iloc[1]
    assert blank["overall_confidence"] == 0.0
    assert blank["confidence_bucket"] == "low"

    assert list(summary_df["bucket"]) == ["very_high", "high", "medium", "low"]
    assert summary_df.set_index("bucket")["count"].to_dict() == {
        "very_high": 0,
        "high": 1,
        "medium": 0,
        "low": 1,
    }
    assert summary_df["pct"].sum() == 100.0


def test_build_flags_duplicates_against_contacts_csv(tmp_path):
    cards = _write_cards(tmp_path)
    store = DataFrameContactStore()
    contact_id = store.save_contact(parse_contact(CARD))
    contacts_csv = tmp_path / "contacts.csv"
    store.to_csv(contacts_csv)

    contacts_df, _ = scan_report.build(
        _args(tmp_path, transcripts=[str(cards)], contacts_csv=str(contacts_csv))
    )
    assert contacts_df.iloc[0]["duplicate_contact_ids"] == contact_id
    assert contacts_df.iloc[1]["duplicate_contact_ids"] == ""


def test_build_with_no_transcripts_has_empty_summary(tmp_path):
    contacts_df, summary_df = scan_report.build(_args(tmp_path))
    assert contacts_df.empty
    assert summary_df["count"].sum() == 0


def test_main_writes_reports(tmp_path, monkeypatch):
    cards = _write_cards(tmp_path)
    out_dir = tmp_path / "reports"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "card-scan-report",
            "--transcripts",
            str(cards),
            "--strictness",
            "strict",
            "--out-dir",
            str(out_dir),
        ],
    )
    assert scan_report.main() == 0

    parsed = pd.read_csv(
        out_dir / "parsed_contacts.csv", dtype=str, keep_default_na=False, quoting=csv.QUOTE_ALL
    )
    assert list(parsed["source_file"].map(lambda value: value.rsplit("/", 1)[-1])) == [
        "a_john.txt",
        "b_blank.txt",
    ]
    assert (out_dir / "scan_summary.csv").exists()


def test_country_region_accepts_only_iso_codes(caplog):
    assert scan_report._country_region("USA") == "US"
    assert scan_report._country_region("de") == "DE"
    assert scan_report._country_region("Germany") == "US"
    assert "not a 2-letter ISO code" in caplog.text
