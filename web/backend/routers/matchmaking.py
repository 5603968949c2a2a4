#!/usr/bin/env python3
"""
Matchmaking endpoints - rank tutors against a search query.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from core.matchmaking import (
    GeoPoint,
    MatchmakingService,
    PriceRange,
    ScoredResult,
    SearchQuery,
    WeightProfile,
)
from ..dependencies import get_matchmaking_service
from ..models.requests import GeoPointBody, SearchQueryBody, TutorSearchRequest, WeightsBody
from ..models.responses import GeoPointOut, TutorMatch, TutorSearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tutor", tags=["matchmaking"])


def _to_point(body: Optional[GeoPointBody]) -> Optional[GeoPoint]:
    if body is None:
        return None
    return GeoPoint(body.latitude, body.longitude)


def _to_query(body: SearchQueryBody) -> SearchQuery:
    price_range = None
    if body.price_range is not None:
        price_range = PriceRange(body.price_range.min, body.price_range.max)

    return SearchQuery(
        term=body.term.strip() if body.term and body.term.strip() else None,
        subjects=tuple(body.subjects),
        location=_to_point(body.location),
        radius_km=body.radius_km,
        price_range=price_range,
        availability=tuple(body.availability),
        teaching_styles=tuple(body.teaching_styles),
        min_rating=body.min_rating,
        experience_tier=body.experience_tier,
        restrict_to_radius=body.restrict_to_radius,
        exclude_below_min_rating=body.exclude_below_min_rating,
        require_teaching_style=body.require_teaching_style,
    )


def _to_weights(body: Optional[WeightsBody], defaults: WeightProfile) -> WeightProfile:
    if body is None:
        return defaults
    values = defaults.as_dict()
    values.update(body.model_dump(exclude_none=True))
    return WeightProfile(**values)


def _to_match(result: ScoredResult) -> TutorMatch:
    candidate = result.candidate
    location = None
    if candidate.location is not None:
        location = GeoPointOut(latitude=candidate.location.latitude, longitude=candidate.location.longitude)

    return TutorMatch(
        id=candidate.id,
        name=candidate.name,
        email=candidate.email,
        subjects=list(candidate.subjects),
        hourly_price=candidate.hourly_price,
        location=location,
        experience=candidate.experience,
        availability=list(candidate.availability),
        teaching_styles=list(candidate.teaching_styles),
        rating=candidate.rating,
        match_score=round(result.match_score, 6),
        distance_km=round(result.distance_km, 3) if result.distance_km is not None else None,
        match_breakdown=result.match_breakdown,
    )


@router.post("/search", response_model=TutorSearchResponse)
def search_tutors(
    request: TutorSearchRequest,
    service: MatchmakingService = Depends(get_matchmaking_service)
):
    """
    Rank eligible tutors against the query.

    Results are sorted by match score, then rating, then tutor id.
    Unset constraints score neutral; omitted weights use the configured defaults.
    """
    query = _to_query(request.query)
    weights = _to_weights(request.weights, service.default_weights())
    origin = _to_point(request.origin)

    outcome = service.search(query, weights=weights, origin=origin)

    return TutorSearchResponse(
        success=True,
        count=len(outcome.results),
        total_candidates=outcome.total_candidates,
        search_time_ms=outcome.search_time_ms,
        results=[_to_match(r) for r in outcome.results],
    )
