"""API route handlers."""

from .matchmaking import router as matchmaking_router
from .tutors import router as tutors_router
from .status_types import router as status_types_router
