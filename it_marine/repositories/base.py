# ==============================================================================
# BASE REPOSITORY - Shared access to one JSON document on disk
# ==============================================================================

import json
import os
from typing import Any
from abc import ABC, abstractmethod
import threading


class BaseRepository(ABC):
    """
    Abstract base for JSON file repositories.

    Provides:
    - Read of the raw JSON document (None when missing or corrupt)
    - Atomic write through a temporary file
    - A process-wide lock so two writes never interleave
    """

    # Global lock to avoid concurrent writes to the files
    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Initializes the repository with the path to its JSON file.

        Args:
            file_path: Absolute path of the JSON document
        """
        self.file_path = file_path
        directory = os.path.dirname(self.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    @abstractmethod
    def _empty_data(self) -> Any:
        """
        Value returned when there is nothing usable on disk.
        Each concrete repository decides what that is.
        """
        pass

    def exists(self) -> bool:
        return os.path.exists(self.file_path)

    def _read_raw(self) -> Any:
        """
        Reads the raw JSON document.

        Returns:
            Parsed JSON, or _empty_data() when the file is missing,
            unreadable or not valid JSON
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError, OSError):
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        """
        Writes data as JSON.

        Args:
            data: JSON-serializable value

        Raises:
            OSError: If the file cannot be written
        """
        with self._file_lock:
            # Write to a temporary file first, then swap it in
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except Exception:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise
