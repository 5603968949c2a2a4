import logging
from typing import Dict, List

from database.repositories.base import StoreRepository

logger = logging.getLogger(__name__)

STATUS_TYPES_TABLE = 'tutor_status_types'

# Recruitment flow used when the lookup table has not been seeded yet
DEFAULT_STATUS_TYPES: List[Dict[str, str]] = [
    {'value': 'registration', 'label': 'Registration - Registrasi'},
    {'value': 'learning_materials', 'label': 'Learning Materials - Belajar Materi'},
    {'value': 'examination', 'label': 'Examination - Ujian'},
    {'value': 'data_completion', 'label': 'Data Completion - Melengkapi Data'},
    {'value': 'active', 'label': 'Active - Aktif'},
    {'value': 'inactive', 'label': 'Inactive - Tidak Aktif'},
    {'value': 'suspended', 'label': 'Suspended - Ditangguhkan'},
]


class TutorStatusTypeRepository(StoreRepository):
    """
    Reads tutor status options from tutor_status_types(value, label, sort_order).

    The table and column names are fixed; a database that lacks them raises
    SchemaMismatchError from the store instead of trying alternative table names.
    """

    def list_status_types(self) -> List[Dict[str, str]]:
        rows = self.store.select(STATUS_TYPES_TABLE, columns=['value', 'label', 'sort_order'])
        if not rows:
            logger.warning(f"{STATUS_TYPES_TABLE} is empty, using built-in status options")
            return [dict(option) for option in DEFAULT_STATUS_TYPES]

        rows = sorted(rows, key=lambda r: (r['sort_order'] or 0, r['value']))
        return [{'value': row['value'], 'label': row['label']} for row in rows]
