"""
Load data files from disk for ingestion.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

from ..config import Config
from ..models.dataclasses import UploadedFile
from ..models.enums import FileKind


logger = logging.getLogger(__name__)


def detect_file_kind(file_name: str) -> Optional[FileKind]:
    """Decide how a file is ingested from its extension (case-insensitive)."""
    suffix = Path(file_name).suffix.lower()
    if suffix in Config.SQLITE_EXTENSIONS:
        return FileKind.SQLITE
    if suffix == ".csv":
        return FileKind.CSV
    if suffix == ".tsv":
        return FileKind.TSV
    return None


def separator_for(file_name: str) -> str:
    return Config.DSV_SEPARATORS[Path(file_name).suffix.lower()]


class FileLoader:
    """Read CSV/TSV/SQLite files into UploadedFile objects."""

    def __init__(self, max_attempts: int = 3, retry_delay: float = 0.5):
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.files: List[Path] = []

    def load_file(self, path: Path) -> UploadedFile:
        """
        Load a single file.

        Args:
            path: Path to the file

        Returns:
            UploadedFile named after the file (extension kept, so the
            ingestor can dispatch on it)
        """
        path = Path(path)
        data = self._read_with_retry(path)
        self.files.append(path)
        return UploadedFile(name=path.name, data=data)

    def load_directory(self, dir_path: Path) -> List[UploadedFile]:
        """
        Load every supported file in a directory, sorted by name.

        Raises:
            ValueError: If dir_path is not a directory
        """
        dir_path = Path(dir_path)

        if not dir_path.is_dir():
            raise ValueError(f"Not a directory: {dir_path}")

        results = []
        for file_path in sorted(dir_path.iterdir()):
            if file_path.is_file() and detect_file_kind(file_path.name) is not None:
                results.append(self.load_file(file_path))

        logger.info(f"Loaded {len(results)} data files from {dir_path}")

        return results

    def _read_with_retry(self, path: Path) -> bytes:
        last_error: Optional[Exception] = None

        for attempt in range(self.max_attempts):
            try:
                return path.read_bytes()
            except PermissionError as e:
                # Typically locked by another program; worth retrying
                last_error = e
                if attempt < self.max_attempts - 1:
                    logger.warning(f"Retry {attempt + 1}/{self.max_attempts} for {path}: {e}")
                    time.sleep(self.retry_delay)

        raise IOError(f"Failed to read {path} after {self.max_attempts} attempts: {last_error}")
