from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # type: ignore[import-untyped]

DEFAULT_CONFIDENCE_WEIGHTS: Dict[str, float] = {
    "name": 0.30,
    "phone": 0.20,
    "email": 0.20,
    "address": 0.10,
    "organization": 0.20,
}


@dataclass
class OutputsConfig:
    dir: Path


@dataclass
class ExtractionConfig:
    default_country: str = "USA"
    context_radius: int = 30
    address_window: int = 200
    name_scan_lines: int = 5
    title_scan_lines: int = 10


@dataclass
class ConfidenceConfig:
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_CONFIDENCE_WEIGHTS))


@dataclass
class DedupeConfig:
    strictness: str = "medium"


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class ParserConfig:
    outputs: OutputsConfig
    extraction: ExtractionConfig
    confidence: ConfidenceConfig
    dedupe: DedupeConfig
    logging: LoggingConfig


def _load_yaml(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _merged_weights(overrides: Optional[Dict[str, Any]]) -> Dict[str, float]:
    weights = dict(DEFAULT_CONFIDENCE_WEIGHTS)
    for key, value in (overrides or {}).items():
        if key not in weights:
            raise ValueError(f"unknown confidence category in config: {key!r}")
        weights[key] = float(value)
    return weights


def load_parser_config(args: argparse.Namespace) -> ParserConfig:
    config_data = _load_yaml(getattr(args, "config", None))
    outputs_cfg = config_data.get("outputs", {}) or {}
    extraction_cfg = config_data.get("extraction", {}) or {}
    confidence_cfg = config_data.get("confidence", {}) or {}
    dedupe_cfg = config_data.get("dedupe", {}) or {}
    logging_cfg = config_data.get("logging", {}) or {}

    outputs_dir = Path(getattr(args, "out_dir", None) or outputs_cfg.get("dir") or os.getcwd())
    outputs = OutputsConfig(dir=outputs_dir)

    defaults = ExtractionConfig()
    extraction = ExtractionConfig(
        default_country=getattr(args, "default_country", None)
        or extraction_cfg.get("default_country", defaults.default_country),
        context_radius=int(extraction_cfg.get("context_radius", defaults.context_radius)),
        address_window=int(extraction_cfg.get("address_window", defaults.address_window)),
        name_scan_lines=int(extraction_cfg.get("name_scan_lines", defaults.name_scan_lines)),
        title_scan_lines=int(extraction_cfg.get("title_scan_lines", defaults.title_scan_lines)),
    )

    confidence = ConfidenceConfig(weights=_merged_weights(confidence_cfg.get("weights")))

    dedupe = DedupeConfig(
        strictness=(
            getattr(args, "strictness", None) or dedupe_cfg.get("strictness") or "medium"
        ).lower()
    )

    arg_level = getattr(args, "log_level", None)
    effective_level = (arg_level or logging_cfg.get("level") or "WARNING").upper()
    logging_config = LoggingConfig(level=effective_level)

    return ParserConfig(
        outputs=outputs,
        extraction=extraction,
        confidence=confidence,
        dedupe=dedupe,
        logging=logging_config,
    )
