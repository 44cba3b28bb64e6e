"""
Centralized JSON persistence utilities.

Provides consistent JSON load/save with error handling, logging and atomic
writes for the file-backed request store.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JSONRepository:
    """Centralized JSON persistence with consistent error handling and atomic operations."""

    @staticmethod
    def load_json(
        path: Path, default: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Load JSON data from file with consistent error handling.

        Args:
            path: Path to JSON file
            default: Default value to return if file doesn't exist or fails to load

        Returns:
            Dictionary containing JSON data or default value
        """
        if default is None:
            default = {}

        if not path.exists():
            logger.debug(f"JSON file does not exist: {path}")
            return default

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)

            if data is None:
                logger.warning(f"JSON file is empty: {path}")
                return default

            logger.debug(f"Successfully loaded JSON from {path}")
            return data if isinstance(data, dict) else default

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON file {path}: {e}")
            return default
        except OSError as e:
            logger.error(f"Unexpected error loading JSON file {path}: {e}")
            return default

    @staticmethod
    def save_json(path: Path, data: Dict[str, Any], *, atomic: bool = True) -> bool:
        """
        Save JSON data to file with atomic operation support.

        Args:
            path: Path to save JSON file
            data: Dictionary to save as JSON
            atomic: If True, write to temp file then rename (atomic operation)

        Returns:
            True if successful, False otherwise
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            if atomic:
                temp_file = path.with_suffix(".tmp")
                with open(temp_file, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                temp_file.replace(path)
            else:
                with open(path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)

            logger.debug(f"Successfully saved JSON to {path}")
            return True

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save JSON file {path}: {e}")
            return False

    @staticmethod
    def load_json_objects(
        path: Path,
        from_dict_fn: Callable[[Dict[str, Any]], T],
    ) -> Dict[str, T]:
        """
        Load JSON data and convert to objects using provided conversion function.

        Args:
            path: Path to JSON file
            from_dict_fn: Function to convert dict to object (e.g., ChildApproval.from_dict)

        Returns:
            Dictionary of converted objects; records that fail to convert are skipped
        """
        raw_data = JSONRepository.load_json(path, {})

        objects = {}
        for key, obj_data in raw_data.items():
            if not isinstance(obj_data, dict):
                logger.warning(f"Skipping non-dict value for key '{key}' in {path}")
                continue
            try:
                objects[key] = from_dict_fn(obj_data)
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Skipping unreadable record '{key}' in {path}: {e}")

        logger.debug(f"Loaded {len(objects)} objects from {path}")
        return objects

    @staticmethod
    def save_json_objects(
        path: Path,
        objects: Dict[str, Any],
        to_dict_fn: Callable[[Any], Dict[str, Any]],
        *,
        atomic: bool = True,
    ) -> bool:
        """
        Convert objects to dictionaries and save as JSON.

        Args:
            path: Path to save JSON file
            objects: Dictionary of objects to save
            to_dict_fn: Function to convert object to dict
            atomic: If True, use atomic write operation

        Returns:
            True if successful, False otherwise
        """
        data = {key: to_dict_fn(obj) for key, obj in objects.items()}
        return JSONRepository.save_json(path, data, atomic=atomic)
