"""
Normalization of the store_and_fwd_flag free-text field
"""

from dataclasses import replace
from typing import Iterable, Iterator, Optional

from taxi_trip_etl.models.taxi_trip import TaxiTripRecord, StoreAndFwdFlag
from taxi_trip_etl.utils.logger import get_logger


_CANONICAL_LABELS = frozenset(flag.value for flag in StoreAndFwdFlag)


def normalize_flag(value: Optional[str]) -> str:
    """
    Canonicalize a store-and-forward flag

    Args:
        value: Raw flag value, possibly None

    Returns:
        "Yes"/"No" for the Y/N codes in any case; otherwise the trimmed
        value with its case untouched ("" for None)
    """
    trimmed = (value or "").strip()
    flag = StoreAndFwdFlag.from_code(trimmed.upper())
    return flag.value if flag else trimmed


class FlagNormalizer:
    """
    Applies normalize_flag to every record; no other field is touched

    Values outside the Y/N vocabulary pass through and are counted in
    `unrecognized` as a data-quality observation.
    """

    def __init__(self):
        self.unrecognized = 0
        self.logger = get_logger(__name__)

    def apply(self, records: Iterable[TaxiTripRecord]) -> Iterator[TaxiTripRecord]:
        for record in records:
            flag = normalize_flag(record.store_and_fwd_flag)
            if flag and flag not in _CANONICAL_LABELS:
                self.unrecognized += 1
                self.logger.debug(f"Unrecognized store_and_fwd_flag kept as-is: {flag!r}")
            yield replace(record, store_and_fwd_flag=flag)

        if self.unrecognized:
            self.logger.warning(
                f"{self.unrecognized:,} records carry an unrecognized store_and_fwd_flag"
            )
