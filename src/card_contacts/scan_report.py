from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .common import load_config
from .config_loader import ParserConfig
from .logging_utils import configure_logging
from .matching import DuplicateStrictness
from .normalization import format_phone_e164_safe, warn_missing
from .parser import ContactParser
from .store import DataFrameContactStore

logger = logging.getLogger(__name__)

BUCKETS = ("very_high", "high", "medium", "low")


def confidence_bucket(score: float) -> str:
    if score >= 0.8:
        return "very_high"
    if score >= 0.6:
        return "high"
    if score >= 0.4:
        return "medium"
    return "low"


def collect_transcripts(paths: Iterable[str]) -> List[Path]:
    """Expand files and directories (``*.txt``, sorted) into transcript paths."""
    found: List[Path] = []
    for raw in paths or []:
        if warn_missing(raw, "Transcript"):
            continue
        path = Path(raw)
        if path.is_dir():
            found.extend(sorted(p for p in path.glob("*.txt") if p.is_file()))
        else:
            found.append(path)
    return found


def _read_transcript(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping unreadable transcript %s: %s", path, exc)
        return None


def _country_region(default_country: str) -> str:
    """Region code for phonenumbers: a 2-letter ISO code, else ``US``."""
    country = (default_country or "").strip().upper()
    if country in ("USA", "US", "UNITED STATES"):
        return "US"
    if len(country) == 2 and country.isalpha():
        return country
    logger.warning("Default country %r is not a 2-letter ISO code; using US", default_country)
    return "US"


def build(
    args: argparse.Namespace, config: Optional[ParserConfig] = None
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    config = config or load_config(args)
    parser = ContactParser(extraction=config.extraction, weights=config.confidence.weights)
    strictness = DuplicateStrictness.parse(config.dedupe.strictness)
    region = _country_region(config.extraction.default_country)

    contacts_csv = getattr(args, "contacts_csv", None)
    store = DataFrameContactStore.from_csv(contacts_csv) if contacts_csv else None

    rows: List[Dict[str, object]] = []
    for path in collect_transcripts(getattr(args, "transcripts", None) or []):
        text = _read_transcript(path)
        if text is None:
            continue
        contact = parser.parse(text)
        scores = contact.confidence_scores
        flags = contact.validation_flags

        duplicate_ids = ""
        if store is not None:
            duplicates = store.find_duplicates(contact, strictness=strictness) or []
            duplicate_ids = "|".join(existing.contact_id for existing in duplicates)

        rows.append(
            {
                "source_file": str(path),
                "full_name": contact.full_name,
                "name_prefix": contact.name_prefix or "",
                "given_name": contact.given_name or "",
                "middle_name": contact.middle_name or "",
                "family_name": contact.family_name or "",
                "name_suffix": contact.name_suffix or "",
                "organization_name": contact.organization_name or "",
                "job_title": contact.job_title or "",
                "department": contact.department or "",
                "phones": "|".join(
                    f"{format_phone_e164_safe(phone.number, region) or phone.digits}::{phone.label}"
                    for phone in contact.phone_numbers
                ),
                "emails": "|".join(
                    f"{email.address}::{email.label}" for email in contact.email_addresses
                ),
                "urls": "|".join(f"{url.url}::{url.type.value}" for url in contact.urls),
                "addresses": "|".join(
                    ", ".join(
                        part
                        for part in (
                            address.street,
                            address.city,
                            address.state,
                            address.postal_code,
                        )
                        if part
                    )
                    for address in contact.postal_addresses
                ),
                "name_confidence": scores.name,
                "phone_confidence": scores.phone,
                "email_confidence": scores.email,
                "address_confidence": scores.address,
                "organization_confidence": scores.organization,
                "overall_confidence": scores.overall,
                "confidence_bucket": confidence_bucket(scores.overall),
                "has_minimum_data": flags.has_minimum_data,
                "duplicate_contact_ids": duplicate_ids,
            }
        )
        logger.debug("Parsed %s -> %s", path, contact.summary or "<empty>")

    contacts_df = pd.DataFrame(rows)

    total = len(contacts_df)
    bucket_counts: Dict[str, int] = {}
    if total:
        bucket_counts = contacts_df["confidence_bucket"].value_counts().to_dict()
    summary_rows = []
    for bucket in BUCKETS:
        count = int(bucket_counts.get(bucket, 0))
        summary_rows.append(
            {
                "bucket": bucket,
                "count": count,
                "pct": round(count / total * 100.0, 2) if total else 0.0,
            }
        )
    summary_df = pd.DataFrame(summary_rows)
    return contacts_df, summary_df


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Parse business-card transcripts and report confidence and duplicates."
    )
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config.")
    parser.add_argument(
        "--transcripts",
        nargs="+",
        default=[],
        help="Transcript files or directories of *.txt transcripts.",
    )
    parser.add_argument("--contacts-csv", type=str, default=None)
    parser.add_argument(
        "--strictness",
        type=str,
        default=None,
        choices=[member.value for member in DuplicateStrictness],
    )
    parser.add_argument("--default-country", type=str, default=None)
    parser.add_argument("--out-dir", type=str, default=None)
    parser.add_argument("--log-level", type=str, default=None, help="Override logging level")
    args = parser.parse_args()

    config = load_config(args)
    configure_logging(config, level_override=args.log_level)
    contacts_df, summary_df = build(args, config=config)

    out_dir = config.outputs.dir
    out_dir.mkdir(parents=True, exist_ok=True)
    contacts_path = out_dir / "parsed_contacts.csv"
    summary_path = out_dir / "scan_summary.csv"
    contacts_df.to_csv(str(contacts_path), index=False, encoding="utf-8", quoting=csv.QUOTE_ALL)
    summary_df.to_csv(str(summary_path), index=False, encoding="utf-8", quoting=csv.QUOTE_ALL)

    logger.info("Parsed %d transcript(s)", len(contacts_df))
    logger.info("Saved: %s", contacts_path)
    logger.info("Saved: %s", summary_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
