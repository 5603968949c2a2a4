#!/usr/bin/env python3
"""
Request models for API endpoints.

Range checks (latitude, weights, price bounds) are left to the domain
models so that every validation failure is reported as a 400 naming the
offending field.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class GeoPointBody(BaseModel):
    latitude: float
    longitude: float


class PriceRangeBody(BaseModel):
    min: float
    max: float


class SearchQueryBody(BaseModel):
    """Tutor search constraints. Everything is optional."""
    term: Optional[str] = Field(None, description="Free text: subjects, price range, or a tutor name/email")
    subjects: List[str] = Field(default_factory=list)
    location: Optional[GeoPointBody] = None
    radius_km: Optional[float] = None
    price_range: Optional[PriceRangeBody] = None
    availability: List[str] = Field(default_factory=list)
    teaching_styles: List[str] = Field(default_factory=list)
    min_rating: Optional[float] = None
    experience_tier: Optional[str] = Field(None, description="novice, intermediate, senior or expert")
    restrict_to_radius: bool = False
    exclude_below_min_rating: bool = False
    require_teaching_style: bool = False


class WeightsBody(BaseModel):
    """Relative factor weights; omitted factors take the configured default."""
    distance: Optional[float] = None
    price: Optional[float] = None
    experience: Optional[float] = None
    availability: Optional[float] = None
    subjects: Optional[float] = None
    rating: Optional[float] = None


class TutorSearchRequest(BaseModel):
    """Request to rank tutors."""
    query: SearchQueryBody = Field(default_factory=SearchQueryBody)
    weights: Optional[WeightsBody] = None
    origin: Optional[GeoPointBody] = Field(None, description="Distance origin; defaults to query.location")
