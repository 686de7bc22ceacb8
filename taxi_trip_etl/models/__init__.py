"""Data models"""

from .taxi_trip import (
    TaxiTripRecord, DedupKey, StoreAndFwdFlag,
    SOURCE_COLUMN_MAP, SOURCE_COLUMNS, REQUIRED_FIELDS, LOAD_COLUMN_MAP
)

__all__ = [
    'TaxiTripRecord', 'DedupKey', 'StoreAndFwdFlag',
    'SOURCE_COLUMN_MAP', 'SOURCE_COLUMNS', 'REQUIRED_FIELDS', 'LOAD_COLUMN_MAP'
]
