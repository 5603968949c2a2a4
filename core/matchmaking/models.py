#!/usr/bin/env python3
"""
Matchmaking Models - Data structures for tutor search and scoring.
"""

import math
from dataclasses import dataclass, field, replace
from typing import List, Dict, Optional, Tuple

from core.exceptions import ValidationError

FACTORS: Tuple[str, ...] = (
    "distance",
    "price",
    "experience",
    "availability",
    "subjects",
    "rating",
)

EXPERIENCE_TIERS: Tuple[str, ...] = ("novice", "intermediate", "senior", "expert")


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self):
        lat, lng = self.latitude, self.longitude
        if lat is None or not isinstance(lat, (int, float)) or math.isnan(lat) or not -90.0 <= lat <= 90.0:
            raise ValidationError("location.latitude", f"must be within [-90, 90], got {lat}")
        if lng is None or not isinstance(lng, (int, float)) or math.isnan(lng) or not -180.0 <= lng <= 180.0:
            raise ValidationError("location.longitude", f"must be within [-180, 180], got {lng}")


@dataclass(frozen=True)
class PriceRange:
    """Inclusive hourly price bounds."""
    min: float
    max: float

    def __post_init__(self):
        if self.min < 0 or self.max < 0:
            raise ValidationError("price_range", f"bounds must be non-negative, got [{self.min}, {self.max}]")
        if self.min > self.max:
            raise ValidationError("price_range", f"min {self.min} is greater than max {self.max}")

    @property
    def width(self) -> float:
        return self.max - self.min


@dataclass(frozen=True)
class Candidate:
    """Tutor record subject to scoring. Read-only to the scoring engine."""
    id: str
    name: str
    subjects: Tuple[str, ...] = ()
    hourly_price: Optional[float] = None
    location: Optional[GeoPoint] = None
    experience: str = ""
    availability: Tuple[str, ...] = ()
    teaching_styles: Tuple[str, ...] = ()
    rating: float = 0.0
    email: Optional[str] = None


@dataclass(frozen=True)
class WeightProfile:
    """Relative weight per factor. A weight of 0 removes that factor's contribution."""
    distance: float = 0.0
    price: float = 0.0
    experience: float = 0.0
    availability: float = 0.0
    subjects: float = 0.0
    rating: float = 0.0

    def __post_init__(self):
        for name in FACTORS:
            value = getattr(self, name)
            if value is None or not isinstance(value, (int, float)) or math.isnan(value):
                raise ValidationError(f"weights.{name}", f"must be a number, got {value!r}")
            if value < 0:
                raise ValidationError(f"weights.{name}", f"must be non-negative, got {value}")

    def as_dict(self) -> Dict[str, float]:
        return {name: float(getattr(self, name)) for name in FACTORS}

    def normalized(self) -> "WeightProfile":
        """Return a copy scaled to sum to 1 (unchanged if all weights are 0)."""
        total = sum(self.as_dict().values())
        if total == 0:
            return self
        return WeightProfile(**{k: v / total for k, v in self.as_dict().items()})


@dataclass(frozen=True)
class SearchQuery:
    """
    Transient search request. Every constraint is optional; an empty query
    makes every sub-score neutral.
    """
    term: Optional[str] = None
    subjects: Tuple[str, ...] = ()
    location: Optional[GeoPoint] = None
    radius_km: Optional[float] = None
    price_range: Optional[PriceRange] = None
    availability: Tuple[str, ...] = ()
    teaching_styles: Tuple[str, ...] = ()
    min_rating: Optional[float] = None
    experience_tier: Optional[str] = None

    # Eligibility filters; off by default so constraints only affect rank
    restrict_to_radius: bool = False
    exclude_below_min_rating: bool = False
    require_teaching_style: bool = False

    def __post_init__(self):
        if self.radius_km is not None and (math.isnan(self.radius_km) or self.radius_km <= 0):
            raise ValidationError("radius_km", f"must be positive, got {self.radius_km}")
        if self.min_rating is not None and not 0.0 <= self.min_rating <= 5.0:
            raise ValidationError("min_rating", f"must be within [0, 5], got {self.min_rating}")
        if self.experience_tier is not None and self.experience_tier not in EXPERIENCE_TIERS:
            raise ValidationError(
                "experience_tier",
                f"must be one of {', '.join(EXPERIENCE_TIERS)}, got {self.experience_tier!r}"
            )

    def merge_keywords(self, extracted) -> "SearchQuery":
        """Merge subjects and price range extracted from the free-text term."""
        subjects = list(self.subjects)
        seen = {s.casefold() for s in subjects}
        for subject in extracted.subjects:
            if subject.casefold() not in seen:
                subjects.append(subject)
                seen.add(subject.casefold())

        price_range = self.price_range
        if price_range is None and extracted.price_range is not None:
            price_range = PriceRange(*extracted.price_range)

        return replace(self, subjects=tuple(subjects), price_range=price_range)


@dataclass
class ScoredResult:
    """Candidate plus its distance, weighted match score and per-factor breakdown."""
    candidate: Candidate
    match_score: float = 0.0
    distance_km: Optional[float] = None
    match_breakdown: Dict[str, float] = field(default_factory=dict)


@dataclass
class SearchOutcome:
    results: List[ScoredResult] = field(default_factory=list)
    total_candidates: int = 0
    search_time_ms: int = 0
