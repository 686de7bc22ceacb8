"""
Audit file writer for records removed as duplicates
"""

from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from taxi_trip_etl.models.taxi_trip import TaxiTripRecord, SOURCE_COLUMNS
from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import AuditWriteError


AUDIT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class DuplicatesWriter:
    """
    Writes duplicate trip records to a CSV in the input column layout

    Timestamps are written exactly as they were read (local time), so the
    file can be diffed against the source.
    """

    def __init__(self, output_path: Union[str, Path]):
        """
        Initialize duplicates writer

        Args:
            output_path: Destination CSV file; parent directories are created
        """
        self.output_path = Path(output_path)
        self.logger = get_logger(__name__)

    def write(self, records: Iterable[TaxiTripRecord]) -> Path:
        """
        Write records to the audit CSV, replacing any previous file

        Args:
            records: Duplicate records in the order they were detected

        Returns:
            Path of the written file

        Raises:
            AuditWriteError: If the file cannot be written
        """
        df = pd.DataFrame(
            [record.to_source_row() for record in records],
            columns=SOURCE_COLUMNS
        )

        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(
                self.output_path,
                index=False,
                date_format=AUDIT_DATETIME_FORMAT,
                encoding="utf-8"
            )
        except OSError as e:
            raise AuditWriteError(
                f"Failed to write duplicates CSV to '{self.output_path}'. "
                "Ensure the directory exists and is writable.",
                error_code="AUDIT_WRITE_FAILED",
                context={'output_path': str(self.output_path)},
                cause=e
            ) from e

        self.logger.info(f"Wrote {len(df):,} duplicates to: {self.output_path}")
        return self.output_path
