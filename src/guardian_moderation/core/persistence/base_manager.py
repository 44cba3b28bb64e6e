"""
Base data manager for file-backed stores.

Provides common patterns for data managers including initialization,
storage management, and persistence operations.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class BaseDataManager(ABC):
    """Base class for data managers with common initialization and persistence patterns."""

    def __init__(self, storage_path: Path, manager_name: str):
        """
        Initialize base data manager.

        Args:
            storage_path: Path to storage directory
            manager_name: Name of the manager for logging
        """
        self.storage_path = Path(storage_path)
        self.manager_name = manager_name
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the data manager."""
        if not self._initialized:
            self.storage_path.mkdir(parents=True, exist_ok=True)

            await self._load_data()

            self._initialized = True
            logger.info(
                f"{self.manager_name} initialized with storage: {self.storage_path}"
            )

    async def shutdown(self) -> None:
        """Shutdown the data manager."""
        if self._initialized:
            await self._save_data()

            self._initialized = False
            logger.info(f"{self.manager_name} shutdown")

    @abstractmethod
    async def _load_data(self) -> None:
        """Load data during initialization. Must be implemented by subclasses."""
        pass

    @abstractmethod
    async def _save_data(self) -> None:
        """Save data during shutdown. Must be implemented by subclasses."""
        pass
