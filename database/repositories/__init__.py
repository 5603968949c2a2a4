from database.repositories.base import BaseRepository, StoreRepository
from database.repositories.tutor import TutorCandidateRepository
from database.repositories.status_types import TutorStatusTypeRepository

__all__ = [
    'BaseRepository',
    'StoreRepository',
    'TutorCandidateRepository',
    'TutorStatusTypeRepository',
]
