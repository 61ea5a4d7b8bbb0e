# ==============================================================================
# DEPENDENCY CONTAINER - Wiring of repository, store and services
# ==============================================================================
# One place that builds:
#   - AppDataRepository (it_marine_app_data.json)
#   - DomainStore, loaded from the repository
#   - The auto-save subscriber: every committed snapshot is written once,
#     before the mutation call returns, in mutation order
#   - SummaryClient (Gemini)
#
# Tests build their own container on a temporary folder.
# ==============================================================================

import os
from typing import Callable, Optional

from it_marine import config
from it_marine.models import AppData
from it_marine.repositories import AppDataRepository
from it_marine.services import DomainStore, SummaryClient


class AppContainer:
    """
    Dependency container of the application.

    Usage:
        container = AppContainer(base_path='/path/to/data')
        store = container.store
        container.store.add_work_log(...)   # saved to disk immediately
    """

    def __init__(self, base_path: str = None, summary_client: SummaryClient = None, clock: Callable = None):
        """
        Args:
            base_path: Folder holding the JSON document (config.DATA_DIR by default)
            summary_client: Pre-built AI client (tests)
            clock: "now" provider handed to the store (tests)
        """
        self._base_path = base_path or config.DATA_DIR
        self._clock = clock
        self._app_data_repo: Optional[AppDataRepository] = None
        self._store: Optional[DomainStore] = None
        self._summary_client = summary_client

    @property
    def base_path(self) -> str:
        return self._base_path

    # =========================================================================
    # REPOSITORY
    # =========================================================================

    @property
    def app_data_repo(self) -> AppDataRepository:
        if self._app_data_repo is None:
            self._app_data_repo = AppDataRepository(self._base_path)
        return self._app_data_repo

    # =========================================================================
    # STORE AND SERVICES
    # =========================================================================

    @property
    def store(self) -> DomainStore:
        """Store loaded from disk, with auto-save registered."""
        if self._store is None:
            self._store = DomainStore(self.app_data_repo.load(), clock=self._clock)
            self._store.subscribe(self._auto_save)
        return self._store

    @property
    def summary_client(self) -> SummaryClient:
        if self._summary_client is None:
            self._summary_client = SummaryClient(api_key=config.GEMINI_API_KEY)
        return self._summary_client

    def _auto_save(self, data: AppData) -> None:
        """Write-through save of each new snapshot. Failures are reported, not raised."""
        try:
            self.app_data_repo.save(data)
        except OSError as e:
            print(f"[STORAGE ERROR] Could not save {os.path.basename(self.app_data_repo.file_path)}: {e}")

    # =========================================================================
    # UTILITIES
    # =========================================================================

    def reset(self) -> None:
        """Drops the built instances; the next access reloads from disk."""
        self._app_data_repo = None
        self._store = None


_container: Optional[AppContainer] = None


def get_container(base_path: str = None) -> AppContainer:
    """
    Global container used by the WSGI entry point.

    Args:
        base_path: Data folder (only used on the first call)
    """
    global _container
    if _container is None:
        _container = AppContainer(base_path)
    return _container
