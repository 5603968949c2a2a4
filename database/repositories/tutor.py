import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from core.exceptions import ValidationError
from core.matchmaking.models import Candidate, GeoPoint
from database.predicates import ilike, in_
from database.repositories.base import StoreRepository

logger = logging.getLogger(__name__)


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _stored_point(educator) -> Optional[GeoPoint]:
    lat = _as_float(educator.get('latitude'))
    lng = _as_float(educator.get('longitude'))
    if lat is None or lng is None:
        return None
    try:
        return GeoPoint(lat, lng)
    except ValidationError as e:
        # Out-of-range stored coordinates score as an unknown location
        logger.warning(f"Ignoring location of educator {educator.get('id')}: {e}")
        return None


class TutorCandidateRepository(StoreRepository):
    """
    Assembles matchmaking Candidates from the tutor tables.

    Rows are joined in Python so the same code runs against any RecordStore.
    """

    def load_candidates(self, statuses: Sequence[str], term: Optional[str] = None) -> List[Candidate]:
        management = self.store.select(
            'tutor_management', [in_('status_tutor', statuses)], columns=['user_id']
        )
        user_ids = list(dict.fromkeys(row['user_id'] for row in management))
        if not user_ids:
            return []

        users = {
            row['id']: row
            for row in self.store.select(
                'users_universal', [in_('id', user_ids)], columns=['id', 'email']
            )
        }
        profiles = {
            row['user_id']: row
            for row in self.store.select(
                'user_profiles', [in_('user_id', user_ids)], columns=['user_id', 'full_name']
            )
        }

        if term:
            pattern = f"%{term}%"
            matched = {
                row['id'] for row in self.store.select(
                    'users_universal', [in_('id', user_ids), ilike('email', pattern)], columns=['id']
                )
            }
            matched |= {
                row['user_id'] for row in self.store.select(
                    'user_profiles', [in_('user_id', user_ids), ilike('full_name', pattern)], columns=['user_id']
                )
            }
            user_ids = [uid for uid in user_ids if uid in matched]
            if not user_ids:
                return []

        educators = self.store.select('educator_details', [in_('user_id', user_ids)])
        tutor_ids = [row['id'] for row in educators]

        subjects = self._subjects_by_tutor(tutor_ids)
        availability = self._list_column_by_tutor('tutor_availability_config', 'available_days', tutor_ids)
        styles = self._list_column_by_tutor('tutor_teaching_preferences', 'teaching_methods', tutor_ids)

        candidates = []
        for educator in educators:
            user_id = educator['user_id']
            user = users.get(user_id)
            if user is None:
                continue
            profile = profiles.get(user_id) or {}

            candidates.append(Candidate(
                id=str(user_id),
                name=profile.get('full_name') or user.get('email') or '',
                subjects=tuple(subjects.get(educator['id'], ())),
                hourly_price=_as_float(educator.get('hourly_rate')),
                location=_stored_point(educator),
                experience=educator.get('experience_summary') or '',
                availability=tuple(availability.get(educator['id'], ())),
                teaching_styles=tuple(styles.get(educator['id'], ())),
                rating=_as_float(educator.get('rating')) or 0.0,
                email=user.get('email'),
            ))

        logger.debug(f"Loaded {len(candidates)} candidates for statuses {list(statuses)}")
        return candidates

    def _subjects_by_tutor(self, tutor_ids: List) -> Dict:
        if not tutor_ids:
            return {}
        mappings = self.store.select(
            'tutor_program_mappings', [in_('tutor_id', tutor_ids)], columns=['tutor_id', 'program_id']
        )
        program_ids = list({row['program_id'] for row in mappings})
        names = {}
        if program_ids:
            names = {
                row['id']: row['program_name']
                for row in self.store.select(
                    'programs_unit', [in_('id', program_ids)], columns=['id', 'program_name']
                )
            }

        subjects = defaultdict(list)
        for row in mappings:
            name = names.get(row['program_id'])
            if name and name not in subjects[row['tutor_id']]:
                subjects[row['tutor_id']].append(name)
        return subjects

    def _list_column_by_tutor(self, table: str, column: str, tutor_ids: List) -> Dict:
        if not tutor_ids:
            return {}
        values = defaultdict(list)
        for row in self.store.select(table, [in_('tutor_id', tutor_ids)], columns=['tutor_id', column]):
            for item in row.get(column) or ():
                if item not in values[row['tutor_id']]:
                    values[row['tutor_id']].append(item)
        return values
