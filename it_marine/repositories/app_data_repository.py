# ==============================================================================
# APP DATA REPOSITORY - Persistence adapter
# ==============================================================================
# The whole AppData lives in ONE JSON document: <data_dir>/it_marine_app_data.json
#
# RULES:
# - load() never fails: missing or corrupt data gives the default dataset
# - save() overwrites the whole document (write-through, one call per change)
# - Import is strict: malformed backups are rejected, never half-applied
# - shipInspections is the only field ever backfilled (older backups)
# ==============================================================================

import json
import os
from datetime import date, datetime
from typing import Any, BinaryIO, Callable, Dict, Optional, Union

from it_marine.constants import STORAGE_KEY, build_default_data
from it_marine.models import AppData
from it_marine.repositories.base import BaseRepository


# Collections a backup must contain to be accepted
REQUIRED_COLLECTIONS = ('workLogs', 'tickets', 'assets')

EXPORT_PREFIX = 'it_backup_'


class ImportValidationError(ValueError):
    """Raised when a backup file cannot be imported. The message is user-facing."""
    pass


def _backfill(parsed: Dict[str, Any]) -> Dict[str, Any]:
    """Adds the shipInspections collection when an older backup lacks it."""
    if not parsed.get('shipInspections'):
        parsed['shipInspections'] = []
    return parsed


def parse_import(content: Union[str, bytes]) -> AppData:
    """
    Validates and converts the text of a backup file.

    Args:
        content: Raw file contents (str or UTF-8 bytes)

    Returns:
        The imported AppData

    Raises:
        ImportValidationError: Malformed JSON, not an object, or any of
            workLogs / tickets / assets missing or not a list
    """
    if isinstance(content, bytes):
        try:
            content = content.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise ImportValidationError('Failed to parse backup file')

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        raise ImportValidationError('Failed to parse backup file')

    if not isinstance(parsed, dict):
        raise ImportValidationError('Invalid backup file format')

    for key in REQUIRED_COLLECTIONS:
        if not isinstance(parsed.get(key), list):
            raise ImportValidationError('Invalid backup file format')

    try:
        return AppData.from_dict(_backfill(parsed))
    except (AttributeError, TypeError):
        # Records that are not JSON objects
        raise ImportValidationError('Invalid backup file format')


class AppDataRepository(BaseRepository):
    """
    Repository for the single AppData document.

    Format of it_marine_app_data.json:
    {
        "workLogs": [{...}],
        "tickets": [{...}],
        "assets": [{...}],
        "shipInspections": [{...}]
    }
    """

    def __init__(self, base_path: str, default_factory: Callable[[], AppData] = None):
        """
        Args:
            base_path: Folder that holds the data file
            default_factory: Builds the dataset used when nothing usable is stored
        """
        file_path = os.path.join(base_path, f'{STORAGE_KEY}.json')
        super().__init__(file_path)
        self._default_factory = default_factory or build_default_data

    def _empty_data(self) -> None:
        return None

    # =========================================================================
    # LOCAL STORAGE
    # =========================================================================

    def load(self) -> AppData:
        """
        Reads the stored AppData.

        Returns:
            Stored data, or the default dataset when the file is missing,
            corrupt, or not shaped like AppData
        """
        raw = self._read_raw()
        if not isinstance(raw, dict):
            if self.exists():
                print(f"[STORAGE] Unusable data in {os.path.basename(self.file_path)}, using defaults")
            return self._default_factory()
        try:
            return AppData.from_dict(_backfill(raw))
        except (AttributeError, TypeError):
            print(f"[STORAGE] Malformed records in {os.path.basename(self.file_path)}, using defaults")
            return self._default_factory()

    def save(self, data: AppData) -> None:
        """
        Overwrites the stored document with data.

        Args:
            data: Complete application state
        """
        self._write_raw(data.to_dict())

    # =========================================================================
    # EXPORT / IMPORT (backups)
    # =========================================================================

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        """Backup file name: it_backup_YYYY-MM-DD.json"""
        today = today or datetime.now().date()
        return f"{EXPORT_PREFIX}{today.strftime('%Y-%m-%d')}.json"

    @staticmethod
    def export_bytes(data: AppData) -> bytes:
        """Pretty-printed JSON of data, ready to be downloaded."""
        return json.dumps(data.to_dict(), indent=2, ensure_ascii=False).encode('utf-8')

    @staticmethod
    def import_file(stream: BinaryIO) -> Optional[AppData]:
        """
        Reads an uploaded backup.

        Args:
            stream: File-like object opened in binary mode

        Returns:
            The imported AppData, or None when the file is not a valid backup
        """
        try:
            return parse_import(stream.read())
        except ImportValidationError as e:
            print(f"[IMPORT] Rejected backup: {e}")
            return None
