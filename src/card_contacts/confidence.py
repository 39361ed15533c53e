from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from .config_loader import DEFAULT_CONFIDENCE_WEIGHTS
from .models import ConfidenceScores, ParsedContact

CATEGORIES = ("name", "phone", "email", "address", "organization")


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def _pair_score(first: Optional[str], second: Optional[str]) -> float:
    if first and second:
        return 1.0
    if first or second:
        return 0.5
    return 0.0


class ConfidenceAggregator:
    """Scores each field category and combines them into ``overall``.

    ``overall`` is the weighted mean of the category scores. All weights are
    non-negative, so raising any category score never lowers ``overall``.
    """

    def __init__(self, weights: Optional[Mapping[str, float]] = None):
        merged: Dict[str, float] = dict(DEFAULT_CONFIDENCE_WEIGHTS)
        merged.update(weights or {})
        unknown = set(merged) - set(CATEGORIES)
        if unknown:
            raise ValueError(f"unknown confidence categories: {sorted(unknown)}")
        if any(weight < 0 for weight in merged.values()):
            raise ValueError("confidence weights must be non-negative")
        if sum(merged.values()) <= 0:
            raise ValueError("at least one confidence weight must be positive")
        self.weights = merged

    def overall(self, category_scores: Mapping[str, float]) -> float:
        total_weight = sum(self.weights.values())
        weighted = sum(
            self.weights[category] * _clamp(category_scores.get(category, 0.0))
            for category in CATEGORIES
        )
        return _clamp(weighted / total_weight)

    def score(self, contact: ParsedContact) -> ConfidenceScores:
        categories = {
            "name": _pair_score(contact.given_name, contact.family_name),
            "phone": _mean(phone.confidence for phone in contact.phone_numbers),
            "email": _mean(email.confidence for email in contact.email_addresses),
            "address": _mean(address.confidence for address in contact.postal_addresses),
            "organization": _pair_score(contact.organization_name, contact.job_title),
        }
        categories = {key: _clamp(value) for key, value in categories.items()}
        return ConfidenceScores(overall=self.overall(categories), **categories)
