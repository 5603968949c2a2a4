#!/usr/bin/env python3
"""
Sub-score Calculations - one normalized [0, 1] value per matching factor.

Every function returns 1.0 (neutral) when the query does not constrain the
factor, so an unconstrained query never penalizes a candidate.
"""

import re
from typing import Iterable, Optional

from core.matchmaking.models import (
    Candidate,
    EXPERIENCE_TIERS,
    GeoPoint,
    PriceRange,
)

NEUTRAL = 1.0

_YEARS_PATTERN = re.compile(r'(\d+)\s*\+?\s*(?:tahun|years?|yrs?|thn)', re.IGNORECASE)

# Checked in order; first hit wins
_TIER_KEYWORDS = (
    ("expert", ("phd", "ph.d", "doktor", "professor", "prof.", "expert", "s3")),
    ("senior", ("senior", "s2", "master", "magister", "lead")),
    ("intermediate", ("s1", "bachelor", "sarjana", "junior", "certified", "tesol")),
)


def _overlap(requested: Iterable[str], offered: Iterable[str]) -> float:
    wanted = {r.strip().casefold() for r in requested if r and r.strip()}
    if not wanted:
        return NEUTRAL
    have = {o.strip().casefold() for o in offered if o}
    return len(wanted & have) / len(wanted)


def distance_subscore(distance_km: Optional[float], radius_km: float) -> float:
    if distance_km is None:
        return NEUTRAL
    return max(0.0, 1.0 - distance_km / radius_km)


def price_subscore(price: Optional[float], price_range: Optional[PriceRange]) -> float:
    if price_range is None:
        return NEUTRAL
    if price is None:
        return 0.0
    if price_range.min <= price <= price_range.max:
        return 1.0

    # Linear decay to 0 at twice the range width beyond the nearer bound
    gap = price_range.min - price if price < price_range.min else price - price_range.max
    falloff = 2.0 * price_range.width
    if falloff <= 0:
        return 0.0
    return max(0.0, 1.0 - gap / falloff)


def classify_experience(descriptor: Optional[str]) -> str:
    """Map a free-text experience descriptor onto the ordered tier scale."""
    text = (descriptor or "").lower()
    if not text.strip():
        return "novice"

    years_match = _YEARS_PATTERN.search(text)
    if years_match:
        years = int(years_match.group(1))
        if years >= 10:
            return "expert"
        if years >= 5:
            return "senior"
        if years >= 2:
            return "intermediate"
        return "novice"

    for tier, keywords in _TIER_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return tier

    return "novice"


def experience_subscore(descriptor: Optional[str], requested_tier: Optional[str], step: float) -> float:
    if requested_tier is None:
        return NEUTRAL
    have = EXPERIENCE_TIERS.index(classify_experience(descriptor))
    want = EXPERIENCE_TIERS.index(requested_tier)
    shortfall = max(0, want - have)
    return max(0.0, 1.0 - shortfall * step)


def availability_subscore(candidate: Candidate, requested: Iterable[str]) -> float:
    return _overlap(requested, candidate.availability)


def subjects_subscore(candidate: Candidate, requested: Iterable[str]) -> float:
    return _overlap(requested, candidate.subjects)


def rating_subscore(rating: Optional[float], min_rating: Optional[float]) -> float:
    value = rating or 0.0
    if min_rating is not None and value < min_rating:
        return 0.0
    return min(1.0, max(0.0, value / 5.0))


def shares_teaching_style(candidate: Candidate, requested: Iterable[str]) -> bool:
    requested = list(requested)
    if not requested:
        return True
    return _overlap(requested, candidate.teaching_styles) > 0.0


def within_radius(origin: Optional[GeoPoint], distance_km: Optional[float], radius_km: float) -> bool:
    if origin is None or distance_km is None:
        return True
    return distance_km <= radius_km
