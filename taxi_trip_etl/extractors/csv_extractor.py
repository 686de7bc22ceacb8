# taxi_trip_etl/extractors/csv_extractor.py
"""
CSV extraction for NYC Taxi trip files
"""

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, TextIO, Tuple, Union

import pandas as pd

from taxi_trip_etl.models.taxi_trip import TaxiTripRecord, SOURCE_COLUMNS
from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import PipelineError, DataSourceError, HeaderValidationError


Source = Union[str, Path, TextIO]
NumberedLines = Iterator[Tuple[int, str]]

_BOM = "\ufeff"


@dataclass
class ParseStats:
    """Row counters for one extraction"""
    parsed_rows: int = 0
    bad_rows: int = 0


class CsvTripExtractor:
    """
    Reads a taxi trip CSV into TaxiTripRecord objects

    This class is responsible for:
    - Validating that the source can be opened and carries the expected header
    - Mapping columns by header name; unmapped columns are ignored
    - Streaming rows chunk by chunk so large files never sit in memory whole
    - Skipping and counting malformed rows instead of failing the run

    Every physical line is one record. Each line is tokenized on its own with
    a strict CSV dialect, so a broken quote or a surplus field costs exactly
    that line and never shifts or swallows the lines around it. Quoted fields
    spanning line breaks are therefore malformed.

    Structural problems (missing file, missing header, missing columns) are
    raised from extract() itself, before any record is produced. Row-level
    problems accumulate in `stats` while the returned iterator is consumed.
    """

    def __init__(self, datetime_format: Optional[str] = None, chunk_size: int = 10000):
        """
        Initialize CSV extractor

        Args:
            datetime_format: strptime format for timestamp cells; None infers
            chunk_size: Number of rows per DataFrame chunk
        """
        self.datetime_format = datetime_format
        self.chunk_size = chunk_size
        self.stats = ParseStats()
        self.logger = get_logger(__name__)

    def extract(self, source: Source) -> Iterator[TaxiTripRecord]:
        """
        Open a CSV source and return a lazy iterator of records

        Args:
            source: Path to a CSV file or an open text stream

        Returns:
            Iterator yielding one TaxiTripRecord per well-formed row

        Raises:
            DataSourceError: If the source cannot be opened or read
            HeaderValidationError: If the header is absent or lacks a
                required column
        """
        self.stats = ParseStats()
        description = self._describe(source)

        handle, owned = self._open(source, description)
        lines = enumerate(handle, start=1)
        try:
            header = self._read_header(lines, description)
            positions = self._column_positions(header, description)
        except PipelineError:
            if owned:
                handle.close()
            raise

        self.logger.info(f"Reading trip records from: {description}")
        return self._iter_records(handle, owned, lines, len(header), positions, description)

    def _open(self, source: Source, description: str) -> Tuple[TextIO, bool]:
        """Return a text handle and whether this extractor must close it"""
        if not isinstance(source, (str, Path)):
            return source, False

        path = Path(source)
        if not path.exists():
            raise DataSourceError(
                f"CSV input file not found: '{path}'",
                error_code="FILE_NOT_FOUND",
                context={'source': description}
            )
        if not path.is_file():
            raise DataSourceError(
                f"CSV input is not a regular file: '{path}'",
                error_code="SOURCE_UNREADABLE",
                context={'source': description}
            )

        try:
            return open(path, "r", encoding="utf-8-sig", newline=""), True
        except OSError as e:
            raise DataSourceError(
                f"Failed to open CSV input: {e}",
                error_code="SOURCE_UNREADABLE",
                context={'source': description},
                cause=e
            ) from e

    def _read_header(self, lines: NumberedLines, description: str) -> List[str]:
        try:
            for line_number, line in lines:
                if not line.strip():
                    continue
                try:
                    header = self._tokenize(line)
                except csv.Error as e:
                    raise DataSourceError(
                        f"CSV header could not be parsed: {e}",
                        error_code="MALFORMED_SOURCE",
                        context={'source': description, 'line': line_number},
                        cause=e
                    ) from e
                if header and header[0].startswith(_BOM):
                    header[0] = header[0][len(_BOM):]
                return header
        except UnicodeDecodeError as e:
            raise DataSourceError(
                f"CSV input is not valid UTF-8: {e}",
                error_code="SOURCE_UNREADABLE",
                context={'source': description},
                cause=e
            ) from e

        raise HeaderValidationError(
            "CSV input has no header row",
            error_code="MISSING_HEADER",
            context={'source': description}
        )

    def _column_positions(self, header: List[str], description: str) -> List[int]:
        """Index of every source column in the header; the first match wins"""
        missing = [column for column in SOURCE_COLUMNS if column not in header]
        if missing:
            raise HeaderValidationError(
                "CSV header validation failed. Ensure the file has the expected column headers.",
                error_code="MISSING_COLUMNS",
                context={'source': description, 'missing_columns': missing}
            )
        return [header.index(column) for column in SOURCE_COLUMNS]

    def _iter_records(
        self,
        handle: TextIO,
        owned: bool,
        lines: NumberedLines,
        width: int,
        positions: List[int],
        description: str
    ) -> Iterator[TaxiTripRecord]:
        try:
            for chunk in self._chunks(lines, width, positions, description):
                yield from self._chunk_records(chunk)
        finally:
            if owned:
                handle.close()

        self.logger.info(
            f"Parsed {self.stats.parsed_rows:,} records from CSV "
            f"({self.stats.bad_rows} bad rows skipped)"
        )

    def _chunks(
        self,
        lines: NumberedLines,
        width: int,
        positions: List[int],
        description: str
    ) -> Iterator[pd.DataFrame]:
        """Group well-formed lines into DataFrames indexed by line number"""
        rows: List[List[str]] = []
        line_numbers: List[int] = []

        try:
            for line_number, line in lines:
                fields = self._screen_line(line_number, line, width)
                if fields is None:
                    continue

                rows.append(fields)
                line_numbers.append(line_number)
                if len(rows) == self.chunk_size:
                    yield self._to_frame(rows, line_numbers, positions)
                    rows, line_numbers = [], []
        except UnicodeDecodeError as e:
            raise DataSourceError(
                f"CSV input is not valid UTF-8: {e}",
                error_code="SOURCE_UNREADABLE",
                context={'source': description, 'parsed_rows': self.stats.parsed_rows},
                cause=e
            ) from e

        if rows:
            yield self._to_frame(rows, line_numbers, positions)

    def _screen_line(self, line_number: int, line: str, width: int) -> Optional[List[str]]:
        """Tokenize one line; None for blank or malformed lines"""
        if not line.strip():
            return None

        try:
            fields = self._tokenize(line)
        except csv.Error as e:
            self._skip_line(line_number, f"malformed quoting ({e})")
            return None

        if len(fields) > width:
            self._skip_line(line_number, f"{len(fields)} fields but the header has {width}")
            return None

        # Short rows are padded; the missing cells become absent values
        return fields + [""] * (width - len(fields))

    @staticmethod
    def _to_frame(rows: List[List[str]], line_numbers: List[int], positions: List[int]) -> pd.DataFrame:
        frame = pd.DataFrame(rows, index=line_numbers, dtype=object)
        return frame.iloc[:, positions].set_axis(SOURCE_COLUMNS, axis=1)

    def _chunk_records(self, chunk: pd.DataFrame) -> Iterator[TaxiTripRecord]:
        rows = chunk.to_dict(orient="records")
        for line_number, row in zip(chunk.index, rows):
            try:
                record = TaxiTripRecord.from_source_row(row, self.datetime_format)
            except ValueError as e:
                self._skip_line(line_number, str(e))
                continue

            self.stats.parsed_rows += 1
            yield record

    def _skip_line(self, line_number: int, reason: str) -> None:
        self.stats.bad_rows += 1
        self.logger.debug(f"Skipping line {line_number}: {reason}")

    @staticmethod
    def _tokenize(line: str) -> List[str]:
        return next(csv.reader([line], strict=True))

    @staticmethod
    def _describe(source: Source) -> str:
        if isinstance(source, (str, Path)):
            return str(source)
        return getattr(source, 'name', source.__class__.__name__)
