"""
Matchmaking Module - weighted multi-factor tutor ranking.

Public API:
- score: Pure ranking function over candidate rows
- MatchmakingService: Loads candidates from the store and ranks them
- Candidate, SearchQuery, WeightProfile, GeoPoint, PriceRange, ScoredResult

Modules:
- models.py: Data structures and input validation
- geo.py: Haversine distance
- subscores.py: Per-factor normalized sub-scores
- keywords.py: Free-text subject and price extraction
- service.py: score() and MatchmakingService
"""

from core.matchmaking.models import (
    Candidate,
    GeoPoint,
    PriceRange,
    ScoredResult,
    SearchOutcome,
    SearchQuery,
    WeightProfile,
)
from core.matchmaking.service import MatchmakingService, score

__all__ = [
    'Candidate',
    'GeoPoint',
    'PriceRange',
    'ScoredResult',
    'SearchOutcome',
    'SearchQuery',
    'WeightProfile',
    'MatchmakingService',
    'score',
]
