# ==============================================================================
# REPOSITORIES LAYER - Data access
# ==============================================================================
# Everything that touches the disk lives here.
#
# STRUCTURE:
# ├── base.py                 → JSON file read/atomic write (BaseRepository)
# └── app_data_repository.py  → it_marine_app_data.json, backup export/import
# ==============================================================================

from .base import BaseRepository
from .app_data_repository import (
    AppDataRepository,
    ImportValidationError,
    parse_import,
    REQUIRED_COLLECTIONS,
)

__all__ = [
    'BaseRepository',
    'AppDataRepository',
    'ImportValidationError',
    'parse_import',
    'REQUIRED_COLLECTIONS',
]
