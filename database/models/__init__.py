from .base import Base
from .user import UserUniversal, UserProfile, UserAddress, UserDemographics
from .educator import (
    EducatorDetails,
    TutorAvailabilityConfig,
    TutorTeachingPreferences,
    TutorPersonalityTraits,
    ProgramUnit,
    TutorProgramMapping,
    TutorBankingInfo,
)
from .management import TutorManagement, TutorStatusType
from .document import DocumentStorage
from .audit import UserDeletionAudit

__all__ = [
    'Base',
    'UserUniversal',
    'UserProfile',
    'UserAddress',
    'UserDemographics',
    'EducatorDetails',
    'TutorAvailabilityConfig',
    'TutorTeachingPreferences',
    'TutorPersonalityTraits',
    'ProgramUnit',
    'TutorProgramMapping',
    'TutorBankingInfo',
    'TutorManagement',
    'TutorStatusType',
    'DocumentStorage',
    'UserDeletionAudit',
]
