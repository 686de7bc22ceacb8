"""Completeness filter: drops trips missing any required field."""

from typing import Iterable, Iterator

from taxi_trip_etl.models.taxi_trip import TaxiTripRecord
from taxi_trip_etl.utils.logger import get_logger


class CompletenessFilter:
    """
    Passes through only records with every required field present

    The store-and-forward flag is exempt. Input order is preserved and
    `dropped` counts the records held back.
    """

    def __init__(self):
        self.dropped = 0
        self.logger = get_logger(__name__)

    def apply(self, records: Iterable[TaxiTripRecord]) -> Iterator[TaxiTripRecord]:
        for record in records:
            if record.is_complete:
                yield record
                continue

            self.dropped += 1
            self.logger.debug(f"Dropping incomplete record, missing: {', '.join(record.missing_fields)}")

        if self.dropped:
            self.logger.info(f"Dropped {self.dropped:,} records with missing required fields")
