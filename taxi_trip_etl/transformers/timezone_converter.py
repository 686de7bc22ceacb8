"""
Conversion of local trip timestamps to UTC
"""

from dataclasses import replace
from datetime import datetime, tzinfo
from typing import Iterable, List, Union

import pytz

from taxi_trip_etl.config.settings import DEFAULT_SOURCE_TIMEZONE
from taxi_trip_etl.models.taxi_trip import TaxiTripRecord
from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import TimezoneResolutionError


def resolve_timezone(zone: Union[str, tzinfo]) -> tzinfo:
    """
    Resolve a timezone name into rules usable for conversion

    Args:
        zone: IANA zone name, or a tzinfo carrying its own rules

    Returns:
        tzinfo for the zone

    Raises:
        TimezoneResolutionError: If the name is unknown
    """
    if isinstance(zone, tzinfo):
        return zone

    try:
        return pytz.timezone(zone)
    except pytz.UnknownTimeZoneError as e:
        raise TimezoneResolutionError(
            f"Unknown source timezone: {zone!r}",
            error_code="UNKNOWN_TIMEZONE",
            context={'timezone': zone},
            cause=e
        ) from e


class TimezoneConverter:
    """
    Reinterprets naive wall-clock timestamps in a fixed zone as UTC instants

    DST edge cases resolve to the offset in force after the transition:
    - repeated hour (fall back): the standard-time reading
    - skipped hour (spring forward): the daylight-time offset, so 02:30
      America/New_York on a spring-forward date becomes 06:30 UTC
    """

    def __init__(self, source_timezone: Union[str, tzinfo] = DEFAULT_SOURCE_TIMEZONE):
        """
        Initialize timezone converter

        Args:
            source_timezone: Zone name or tzinfo the source timestamps use

        Raises:
            TimezoneResolutionError: If the zone cannot be resolved
        """
        self.zone = resolve_timezone(source_timezone)
        self.logger = get_logger(__name__)

    def to_utc(self, local: datetime) -> datetime:
        """Convert one naive local timestamp to an aware UTC datetime"""
        if hasattr(self.zone, 'localize'):
            aware = self._localize_pytz(local)
        else:
            aware = local.replace(tzinfo=self.zone, fold=1)
        return aware.astimezone(pytz.utc)

    def to_local(self, instant: datetime) -> datetime:
        """Convert an aware instant back to naive wall-clock time in the zone"""
        return instant.astimezone(self.zone).replace(tzinfo=None)

    def _localize_pytz(self, local: datetime) -> datetime:
        try:
            return self.zone.localize(local, is_dst=None)
        except pytz.AmbiguousTimeError:
            return self.zone.localize(local, is_dst=False)
        except pytz.NonExistentTimeError:
            return self.zone.localize(local, is_dst=True)

    def convert(self, records: Iterable[TaxiTripRecord]) -> List[TaxiTripRecord]:
        """
        Return copies of the records with pickup/dropoff times in UTC

        Args:
            records: Complete records holding naive local timestamps

        Returns:
            New records in the same order
        """
        converted = [
            replace(
                record,
                pickup_datetime=self.to_utc(record.pickup_datetime),
                dropoff_datetime=self.to_utc(record.dropoff_datetime),
            )
            for record in records
        ]
        self.logger.info(f"Converted {len(converted):,} records from {self.zone} to UTC")
        return converted
