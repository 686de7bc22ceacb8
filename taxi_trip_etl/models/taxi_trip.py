# taxi_trip_etl/models/taxi_trip.py
"""
Data model for NYC Taxi Trip records
"""

import re
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Dict, Any, List, Mapping, NamedTuple

import pandas as pd


# Source CSV header -> record attribute. Header matching is case-sensitive.
SOURCE_COLUMN_MAP: Dict[str, str] = {
    'tpep_pickup_datetime': 'pickup_datetime',
    'tpep_dropoff_datetime': 'dropoff_datetime',
    'passenger_count': 'passenger_count',
    'trip_distance': 'trip_distance',
    'store_and_fwd_flag': 'store_and_fwd_flag',
    'PULocationID': 'pickup_location_id',
    'DOLocationID': 'dropoff_location_id',
    'fare_amount': 'fare_amount',
    'tip_amount': 'tip_amount',
}

SOURCE_COLUMNS: List[str] = list(SOURCE_COLUMN_MAP)

# Every business field except the flag, which may legitimately be empty
REQUIRED_FIELDS: List[str] = [
    'pickup_datetime',
    'dropoff_datetime',
    'passenger_count',
    'trip_distance',
    'pickup_location_id',
    'dropoff_location_id',
    'fare_amount',
    'tip_amount',
]

# Record attribute -> warehouse column
LOAD_COLUMN_MAP: Dict[str, str] = {
    'pickup_datetime': 'PICKUP_DATETIME_UTC',
    'dropoff_datetime': 'DROPOFF_DATETIME_UTC',
    'passenger_count': 'PASSENGER_COUNT',
    'trip_distance': 'TRIP_DISTANCE',
    'store_and_fwd_flag': 'STORE_AND_FWD_FLAG',
    'pickup_location_id': 'PU_LOCATION_ID',
    'dropoff_location_id': 'DO_LOCATION_ID',
    'fare_amount': 'FARE_AMOUNT',
    'tip_amount': 'TIP_AMOUNT',
}

# Inferred timestamps must carry a full calendar date ("now" or "2020" are rejected)
_CALENDAR_DATE = re.compile(r"\d{1,4}[-/.]\d{1,2}[-/.]\d{1,4}")


class StoreAndFwdFlag(Enum):
    """Canonical labels for the store-and-forward flag"""
    YES = "Yes"
    NO = "No"

    @classmethod
    def from_code(cls, code: str) -> Optional['StoreAndFwdFlag']:
        """Map a single-letter source code (already uppercased) to its label"""
        return _FLAG_CODES.get(code)


_FLAG_CODES = {
    'Y': StoreAndFwdFlag.YES,
    'N': StoreAndFwdFlag.NO,
}


class DedupKey(NamedTuple):
    """Composite key deciding whether two trips are the same logical trip"""
    pickup_datetime: datetime
    dropoff_datetime: datetime
    passenger_count: int


@dataclass(frozen=True)
class TaxiTripRecord:
    """
    One parsed taxi trip row

    Every attribute is optional until the completeness filter has run;
    None marks a value that was absent in the source. Records are immutable:
    cleaning stages derive new records with dataclasses.replace.
    """

    pickup_datetime: Optional[datetime] = None
    dropoff_datetime: Optional[datetime] = None
    passenger_count: Optional[int] = None
    trip_distance: Optional[Decimal] = None
    store_and_fwd_flag: Optional[str] = None
    pickup_location_id: Optional[int] = None
    dropoff_location_id: Optional[int] = None
    fare_amount: Optional[Decimal] = None
    tip_amount: Optional[Decimal] = None

    @property
    def missing_fields(self) -> List[str]:
        """Required fields that are absent"""
        return [name for name in REQUIRED_FIELDS if getattr(self, name) is None]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    @property
    def dedup_key(self) -> DedupKey:
        return DedupKey(self.pickup_datetime, self.dropoff_datetime, self.passenger_count)

    @property
    def travel_time_seconds(self) -> Optional[int]:
        """Trip duration in whole seconds"""
        if self.pickup_datetime is None or self.dropoff_datetime is None:
            return None
        return int((self.dropoff_datetime - self.pickup_datetime).total_seconds())

    def to_source_row(self) -> Dict[str, Any]:
        """Render the record keyed by source CSV column names"""
        return {
            column: getattr(self, attribute)
            for column, attribute in SOURCE_COLUMN_MAP.items()
        }

    def to_load_row(self) -> Dict[str, Any]:
        """Render the record keyed by warehouse column names"""
        return {
            column: getattr(self, attribute)
            for attribute, column in LOAD_COLUMN_MAP.items()
        }

    @classmethod
    def from_source_row(
        cls,
        row: Mapping[str, Any],
        datetime_format: Optional[str] = None
    ) -> 'TaxiTripRecord':
        """
        Build a record from one header-keyed CSV row

        Args:
            row: Mapping of source column name to raw cell value
            datetime_format: strptime format for timestamp cells; when None
                the format is inferred per value

        Returns:
            TaxiTripRecord with None for every empty or missing cell

        Raises:
            ValueError: If a non-empty cell cannot be converted to its type
        """
        cells = {
            attribute: _clean_cell(row.get(column))
            for column, attribute in SOURCE_COLUMN_MAP.items()
        }

        values: Dict[str, Any] = {}
        for field in fields(cls):
            text = cells[field.name]
            if text is None:
                values[field.name] = None
                continue
            try:
                values[field.name] = _CONVERTERS[field.name](text, datetime_format)
            except ValueError as e:
                raise ValueError(f"Invalid value for {field.name}: {text!r} ({e})") from e

        return cls(**values)


def _clean_cell(value: Any) -> Optional[str]:
    """Trim a raw cell; empty or NA cells become None"""
    if value is None:
        return None
    if not isinstance(value, str):
        if pd.isna(value):
            return None
        value = str(value)
    value = value.strip()
    return value or None


def _parse_datetime(text: str, datetime_format: Optional[str]) -> datetime:
    if datetime_format:
        return datetime.strptime(text, datetime_format)

    if not _CALENDAR_DATE.search(text):
        raise ValueError("not a calendar timestamp")
    timestamp = pd.Timestamp(text)
    if pd.isna(timestamp):
        raise ValueError("not a timestamp")
    if timestamp.tzinfo is not None:
        raise ValueError("expected a local timestamp without UTC offset")
    return timestamp.to_pydatetime()


def _parse_decimal(text: str, datetime_format: Optional[str] = None) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise ValueError("not a decimal number") from e
    if not value.is_finite():
        raise ValueError("not a finite number")
    return value


def _parse_int(text: str, datetime_format: Optional[str] = None) -> int:
    # Accepts integral decimals such as "1.0", which some exports emit
    value = _parse_decimal(text)
    if value != value.to_integral_value():
        raise ValueError("not an integer")
    return int(value)


def _parse_text(text: str, datetime_format: Optional[str] = None) -> str:
    return text


_CONVERTERS = {
    'pickup_datetime': _parse_datetime,
    'dropoff_datetime': _parse_datetime,
    'passenger_count': _parse_int,
    'trip_distance': _parse_decimal,
    'store_and_fwd_flag': _parse_text,
    'pickup_location_id': _parse_int,
    'dropoff_location_id': _parse_int,
    'fare_amount': _parse_decimal,
    'tip_amount': _parse_decimal,
}
