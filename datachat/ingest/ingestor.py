"""
Dispatch uploaded files to the right ingestion path.

CSV/TSV go through TabularDecoder → SchemaSynthesizer → RelationalLoader;
SQLite images go through StoreBridge. Every failure comes back as a
structured IngestResult; nothing raised inside the engine escapes.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..models.dataclasses import IngestError, IngestResult, LoadSummary, UploadedFile
from ..models.enums import FileKind
from ..store import WorkingStore
from .exceptions import (
    EmptyInputError,
    IngestFailure,
    TabularDecodeError,
    UnreadableInputError,
    UnrecognizedFileTypeError,
)
from .file_loader import FileLoader, detect_file_kind, separator_for
from .relational_loader import RelationalLoader
from .schema_synthesizer import SchemaSynthesizer, table_name_from_file
from .store_bridge import StoreBridge
from .tabular_decoder import TabularDecoder


logger = logging.getLogger(__name__)


class Ingestor:
    """Ingestion API consumed by the UI glue and the CLI."""

    def __init__(self, store: WorkingStore):
        self.store = store
        self.decoder = TabularDecoder()
        self.synthesizer = SchemaSynthesizer()
        self.loader = RelationalLoader(store)
        self.bridge = StoreBridge(store)

    def detect_and_ingest(self, file: UploadedFile) -> IngestResult:
        """Ingest one file; never raises for ingestion problems."""
        try:
            summary = self._ingest(file)
        except IngestFailure as e:
            return _failure(file.name, e)

        return IngestResult(file_name=file.name, summary=summary)

    def ingest_all(self, files: Iterable[UploadedFile]) -> List[IngestResult]:
        """Ingest files strictly in order; one file's failure never stops the rest."""
        return [self.detect_and_ingest(f) for f in files]

    def ingest_paths(self, paths: Iterable[Path],
                     loader: Optional[FileLoader] = None) -> List[IngestResult]:
        """
        Ingest files (or every supported file of a directory) from disk.

        A path that cannot be read gets an UNREADABLE_INPUT result and the
        remaining paths are still ingested.
        """
        loader = loader or FileLoader()
        results: List[IngestResult] = []
        for path in paths:
            path = Path(path)
            try:
                if path.is_dir():
                    files = loader.load_directory(path)
                else:
                    files = [loader.load_file(path)]
            except (OSError, ValueError) as e:
                results.append(_failure(path.name, UnreadableInputError(f"Cannot read {path}: {e}")))
                continue
            results.extend(self.ingest_all(files))
        return results

    def _ingest(self, file: UploadedFile) -> LoadSummary:
        kind = detect_file_kind(file.name)

        if kind is None:
            raise UnrecognizedFileTypeError(f"Unknown file type: {file.name}")

        if kind == FileKind.SQLITE:
            tables = self.bridge.import_database(file.as_bytes(), file.name)
            if not tables:
                raise EmptyInputError(f"Database has no tables: {file.name}")
            return LoadSummary(file_name=file.name, file_kind=kind, tables=tables)

        return self._ingest_delimited(file, kind)

    def _ingest_delimited(self, file: UploadedFile, kind: FileKind) -> LoadSummary:
        table_name = table_name_from_file(file.name)

        try:
            text = file.as_text()
        except UnicodeDecodeError as e:
            raise TabularDecodeError(f"File is not UTF-8 text: {e}", table_name=table_name)

        rows = self.decoder.decode(text, separator_for(file.name))
        if not rows:
            raise EmptyInputError(f"File has no rows: {table_name}", table_name=table_name)

        schema = self.synthesizer.synthesize(rows, table_name)
        result = self.loader.load(schema, rows)
        return LoadSummary(file_name=file.name, file_kind=kind, tables=[result])


def _failure(file_name: str, e: IngestFailure) -> IngestResult:
    error = IngestError(
        kind=e.kind,
        message=str(e),
        file_name=file_name,
        table_name=e.table_name,
    )
    if error.is_fatal:
        logger.error(f"{file_name}: {e}")
    else:
        logger.warning(f"{file_name}: {e}")
    return IngestResult(file_name=file_name, error=error)
