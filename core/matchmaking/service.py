#!/usr/bin/env python3
"""
Matchmaking Service - rank tutor candidates against a search query.

score() is a pure function of its inputs: it performs no I/O, holds no
state between calls and never mutates the candidate list it is given.

    match_score = sum(weight_i * subscore_i) over the six factors

Each weighted term is computed unconditionally, so a zero weight removes a
factor's contribution without any special-casing. Results are sorted by
match score, then rating (both descending), then candidate id (ascending).
"""

import logging
import time
from typing import List, Optional, Sequence

from core.config_loader import MatchmakingConfig
from core.matchmaking.geo import haversine_km
from core.matchmaking.models import (
    Candidate,
    FACTORS,
    GeoPoint,
    ScoredResult,
    SearchOutcome,
    SearchQuery,
    WeightProfile,
)
from core.matchmaking import subscores
from core.matchmaking.keywords import parse_free_text

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = MatchmakingConfig().default_radius_km
DEFAULT_EXPERIENCE_STEP = MatchmakingConfig().experience_step


def _score_candidate(
    candidate: Candidate,
    query: SearchQuery,
    weights: WeightProfile,
    origin: Optional[GeoPoint],
    radius_km: float,
    experience_step: float
) -> ScoredResult:
    distance_km = None
    if origin is not None and candidate.location is not None:
        distance_km = haversine_km(origin, candidate.location)

    breakdown = {
        "distance": subscores.distance_subscore(distance_km, radius_km),
        "price": subscores.price_subscore(candidate.hourly_price, query.price_range),
        "experience": subscores.experience_subscore(
            candidate.experience, query.experience_tier, experience_step
        ),
        "availability": subscores.availability_subscore(candidate, query.availability),
        "subjects": subscores.subjects_subscore(candidate, query.subjects),
        "rating": subscores.rating_subscore(candidate.rating, query.min_rating),
    }

    # Fixed factor order keeps the float sum identical across runs
    weight_map = weights.as_dict()
    match_score = 0.0
    for factor in FACTORS:
        match_score += weight_map[factor] * breakdown[factor]

    return ScoredResult(
        candidate=candidate,
        match_score=match_score,
        distance_km=distance_km,
        match_breakdown=breakdown
    )


def _is_eligible(result: ScoredResult, query: SearchQuery, origin: Optional[GeoPoint], radius_km: float) -> bool:
    candidate = result.candidate
    if query.restrict_to_radius and not subscores.within_radius(origin, result.distance_km, radius_km):
        return False
    if (
        query.exclude_below_min_rating
        and query.min_rating is not None
        and (candidate.rating or 0.0) < query.min_rating
    ):
        return False
    if query.require_teaching_style and not subscores.shares_teaching_style(candidate, query.teaching_styles):
        return False
    return True


def _rank_key(result: ScoredResult):
    return (-result.match_score, -(result.candidate.rating or 0.0), str(result.candidate.id))


def score(
    candidates: Sequence[Candidate],
    query: SearchQuery,
    weights: WeightProfile,
    origin: Optional[GeoPoint] = None,
    default_radius_km: float = DEFAULT_RADIUS_KM,
    experience_step: float = DEFAULT_EXPERIENCE_STEP
) -> List[ScoredResult]:
    """
    Score and rank candidates.

    Args:
        candidates: Candidate rows from the record store (not modified)
        query: Search constraints; unset constraints are neutral
        weights: Relative importance per factor
        origin: Point to measure distance from; defaults to query.location
        default_radius_km: Radius used when the query carries none
        experience_step: Sub-score lost per experience tier of shortfall

    Returns:
        Ranked list of ScoredResult (empty for an empty candidate list)
    """
    origin = origin if origin is not None else query.location
    radius_km = query.radius_km if query.radius_km is not None else default_radius_km

    scored = [
        _score_candidate(c, query, weights, origin, radius_km, experience_step)
        for c in candidates
    ]
    eligible = [r for r in scored if _is_eligible(r, query, origin, radius_km)]

    return sorted(eligible, key=_rank_key)


class MatchmakingService:
    """
    Loads candidates from the candidate repository and ranks them.

    Holds no per-request state; a new query is scored from fresh rows
    every time.
    """

    def __init__(self, candidates_repo, config: MatchmakingConfig):
        self.candidates_repo = candidates_repo
        self.config = config

    def default_weights(self) -> WeightProfile:
        return WeightProfile(**self.config.default_weights.model_dump())

    def search(
        self,
        query: SearchQuery,
        weights: Optional[WeightProfile] = None,
        origin: Optional[GeoPoint] = None
    ) -> SearchOutcome:
        start = time.monotonic()
        weights = weights or self.default_weights()

        # Free text that names subjects or prices is a keyword query;
        # anything else is matched against tutor name and email.
        name_term = None
        if query.term:
            extracted = parse_free_text(query.term)
            if extracted.is_empty:
                name_term = query.term
            else:
                query = query.merge_keywords(extracted)

        candidates = self.candidates_repo.load_candidates(
            statuses=self.config.eligible_statuses,
            term=name_term
        )
        ranked = score(
            candidates,
            query,
            weights,
            origin=origin,
            default_radius_km=self.config.default_radius_km,
            experience_step=self.config.experience_step
        )
        results = ranked[:self.config.max_results]

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"Scored {len(candidates)} candidates, returning {len(results)} "
            f"(term={query.term!r}, subjects={list(query.subjects)}) in {elapsed_ms}ms"
        )

        return SearchOutcome(
            results=results,
            total_candidates=len(candidates),
            search_time_ms=elapsed_ms
        )
