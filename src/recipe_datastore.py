#!/usr/bin/env python3
"""
YAML Datastore
Key-path lookups into a directory tree of YAML files, used by report
templates for prices, densities, shelf lives and similar ingredient data.

Two key-path forms are accepted:

    eggs.meta.storage.shelf life    directories, then a .yml file, then keys
    eggs/meta/storage.shelf life    file path before the last '/', keys after
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
import structlog

from report_errors import ReportError, ErrorCategory

logger = structlog.get_logger(__name__)

YAML_EXTENSIONS = (".yml", ".yaml")
KEYPATH_DELIMITER = "/"
KEY_DELIMITER = "."


class DatastoreKeyError(ReportError):
    """Key path does not resolve to a value in the datastore."""

    def __init__(self, key_path: str, reason: str):
        super().__init__(
            f"Key '{key_path}' not found in datastore: {reason}",
            details={"key_path": key_path},
            category=ErrorCategory.RESOLUTION,
        )
        self.key_path = key_path


class Datastore:
    """Read-only view over a directory of YAML documents."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self._documents: Dict[Path, Any] = {}

    def _find_file(self, base: Path) -> Optional[Path]:
        for extension in YAML_EXTENSIONS:
            candidate = base.with_name(base.name + extension)
            if candidate.is_file():
                return candidate
        return None

    def _load(self, path: Path) -> Any:
        if path not in self._documents:
            with open(path, 'r', encoding='utf-8') as f:
                self._documents[path] = yaml.safe_load(f)
        return self._documents[path]

    def _split(self, key_path: str) -> Tuple[Path, List[str]]:
        """Locate the YAML file a key path points into and the keys inside it."""
        if KEYPATH_DELIMITER in key_path:
            path, _, keys = key_path.rpartition(KEYPATH_DELIMITER)
            if not path:
                raise DatastoreKeyError(key_path, "no file before '/'")
            found = self._find_file(self.root / path)
            if found is None:
                raise DatastoreKeyError(key_path, f"no YAML file for '{path}'")
            return found, [k for k in keys.split(KEY_DELIMITER) if k]

        segments = key_path.split(KEY_DELIMITER)
        current = self.root
        for index, segment in enumerate(segments):
            found = self._find_file(current / segment)
            if found is not None:
                return found, segments[index + 1:]
            if (current / segment).is_dir():
                current = current / segment
                continue
            break
        raise DatastoreKeyError(key_path, "no YAML file along the path")

    def get(self, key_path: str) -> Any:
        """
        Look up a value.

        Args:
            key_path: Dotted or slash-separated key path

        Returns:
            The value stored at the key path
        """
        if not key_path or not key_path.strip():
            raise DatastoreKeyError(key_path, "empty key path")

        path, keys = self._split(key_path.strip())
        try:
            value = self._load(path)
        except (OSError, yaml.YAMLError) as e:
            raise DatastoreKeyError(key_path, f"could not read {path}: {e}") from e

        for key in keys:
            if not isinstance(value, dict) or key not in value:
                raise DatastoreKeyError(key_path, f"missing key '{key}'")
            value = value[key]
        return value

    def lookup(self, key_path: str, default: Any = "") -> Any:
        """Look up a value, logging a warning and returning default when missing."""
        try:
            return self.get(key_path)
        except DatastoreKeyError as e:
            logger.warning("Datastore lookup failed", key_path=key_path, error=e.message)
            return default
