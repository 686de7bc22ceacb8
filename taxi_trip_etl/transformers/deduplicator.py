"""
Duplicate detection for taxi trips.

Two trips are duplicates when pickup time, dropoff time and passenger count
all match exactly. Keys are compared on local timestamps, so this stage must
run before timezone conversion.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Set

from taxi_trip_etl.models.taxi_trip import TaxiTripRecord, DedupKey
from taxi_trip_etl.utils.logger import get_logger


@dataclass
class DeduplicationResult:
    """Stable partition of the input into first occurrences and repeats"""
    unique: List[TaxiTripRecord] = field(default_factory=list)
    duplicates: List[TaxiTripRecord] = field(default_factory=list)


class Deduplicator:
    """Partitions records by DedupKey; the first occurrence always wins."""

    def __init__(self):
        self.logger = get_logger(__name__)

    def partition(self, records: Iterable[TaxiTripRecord]) -> DeduplicationResult:
        """
        Split records into unique and duplicate sequences

        A single left-to-right scan: a record whose key is already in the
        seen-set goes to `duplicates` even if its other fields differ from
        the kept record.

        Args:
            records: Complete records in input order

        Returns:
            DeduplicationResult with both lists in input order
        """
        result = DeduplicationResult()
        seen: Set[DedupKey] = set()

        for record in records:
            key = record.dedup_key
            if key in seen:
                result.duplicates.append(record)
                continue
            seen.add(key)
            result.unique.append(record)

        self.logger.info(
            f"Removed {len(result.duplicates):,} duplicates. "
            f"Unique records: {len(result.unique):,}"
        )
        return result
