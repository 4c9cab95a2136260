"""
Decode delimiter-separated text into typed rows.

pandas does the field splitting (quoting, embedded separators, line endings);
every cell is read as a raw string and typed by TypedValueParser, so the
column type rules stay in one place.
"""

import io
import logging
from typing import List, Optional

import pandas as pd

from ..models.dataclasses import Row
from .exceptions import TabularDecodeError
from .value_parser import TypedValueParser


logger = logging.getLogger(__name__)


class TabularDecoder:
    """Decode CSV/TSV text into an ordered list of rows."""

    def __init__(self, parser: Optional[TypedValueParser] = None):
        self.parser = parser or TypedValueParser()

    def decode(self, text: str, separator: str = ",") -> List[Row]:
        """
        Decode text with a header row.

        Args:
            text: Already-read file content
            separator: Single-character field separator

        Returns:
            Rows in file order; empty list when there are no data rows
        """
        if len(separator) != 1:
            raise ValueError(f"Separator must be a single character, got {separator!r}")

        frame = self._read_frame(text, separator)
        if frame is None or frame.empty:
            return []

        columns = [str(c) for c in frame.columns]
        rows: List[Row] = []
        for record in frame.itertuples(index=False, name=None):
            rows.append({
                column: self.parser.infer(cell)
                for column, cell in zip(columns, record)
            })

        logger.debug(f"Decoded {len(rows)} rows x {len(columns)} columns")
        return rows

    def _read_frame(self, text: str, separator: str) -> Optional[pd.DataFrame]:
        if not text or not text.strip():
            return None

        try:
            return pd.read_csv(
                io.StringIO(text),
                sep=separator,
                dtype=str,
                keep_default_na=False,
                na_filter=False,
                index_col=False,
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError:
            return None
        except pd.errors.ParserError as e:
            raise TabularDecodeError(f"Cannot decode delimited text: {e}")
