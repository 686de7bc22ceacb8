# tests/unit/test_cleaning_pipeline.py
"""
Unit tests for TripCleaningPipeline
"""

import pytest
import pytz
from datetime import datetime
from decimal import Decimal

from taxi_trip_etl.config.settings import CleaningConfig
from taxi_trip_etl.orchestrator.cleaning_pipeline import TripCleaningPipeline, PipelineStats
from taxi_trip_etl.utils.exceptions import (
    DataSourceError, HeaderValidationError, TimezoneResolutionError
)


def _row(pickup, dropoff, passengers="1", distance="1.20", flag="N",
         pu="238", do="239", fare="6.00", tip="1.47"):
    return ",".join([pickup, dropoff, passengers, distance, flag, pu, do, fare, tip])


class TestTripCleaningPipeline:
    """Test the full cleaning sequence on small files"""

    def test_removes_duplicate_and_converts_to_utc(self, write_csv, sample_rows, cleaning_config):
        """Test a repeated trip is split off and the rest is in UTC"""
        path = write_csv(sample_rows)

        result = TripCleaningPipeline(cleaning_config).run(path)

        assert len(result.unique) == 2
        assert len(result.duplicates) == 1
        assert result.unique[0].pickup_datetime == datetime(2020, 1, 1, 5, 47, 35, tzinfo=pytz.utc)
        assert result.unique[0].fare_amount == Decimal("6.00")
        assert result.unique[1].pickup_datetime == datetime(2020, 1, 1, 6, 10, tzinfo=pytz.utc)

    def test_duplicates_keep_local_time(self, write_csv, sample_rows, cleaning_config):
        """Test removed duplicates are reported as read, with normalized flags"""
        path = write_csv(sample_rows)

        result = TripCleaningPipeline(cleaning_config).run(path)

        [duplicate] = result.duplicates
        assert duplicate.pickup_datetime == datetime(2020, 1, 1, 0, 47, 35)
        assert duplicate.fare_amount == Decimal("7.50")
        assert duplicate.store_and_fwd_flag == "No"

    def test_incomplete_row_dropped(self, write_csv, cleaning_config):
        """Test a row with an empty trip_distance never reaches the output"""
        path = write_csv([
            _row("2020-01-01 00:47:35", "2020-01-01 00:53:52", distance=""),
            _row("2020-01-01 01:00:00", "2020-01-01 01:10:00"),
        ])

        result = TripCleaningPipeline(cleaning_config).run(path)

        assert result.stats.dropped_incomplete == 1
        assert len(result.unique) == 1
        assert result.duplicates == []

    def test_incomplete_rows_excluded_from_duplicate_detection(self, write_csv, cleaning_config):
        """Test an incomplete copy of a trip does not displace the complete one"""
        path = write_csv([
            _row("2020-01-01 00:47:35", "2020-01-01 00:53:52", fare=""),
            _row("2020-01-01 00:47:35", "2020-01-01 00:53:52"),
        ])

        result = TripCleaningPipeline(cleaning_config).run(path)

        assert len(result.unique) == 1
        assert result.unique[0].fare_amount == Decimal("6.00")
        assert result.stats.duplicates == 0

    def test_spring_forward_time(self, write_csv, cleaning_config):
        """Test 02:30 on the spring-forward date becomes 06:30 UTC"""
        path = write_csv([_row("2020-03-08 02:30:00", "2020-03-08 03:15:00")])

        result = TripCleaningPipeline(cleaning_config).run(path)

        [record] = result.unique
        assert record.pickup_datetime == datetime(2020, 3, 8, 6, 30, tzinfo=pytz.utc)
        assert record.dropoff_datetime == datetime(2020, 3, 8, 7, 15, tzinfo=pytz.utc)

    def test_flags_normalized(self, write_csv, cleaning_config):
        """Test Y/N codes in any case map to labels; other values pass through"""
        flags = ["Y", "y", " Y ", "N", "n", "Z"]
        path = write_csv([
            _row(f"2020-01-01 0{i}:00:00", f"2020-01-01 0{i}:30:00", flag=flag)
            for i, flag in enumerate(flags)
        ])

        result = TripCleaningPipeline(cleaning_config).run(path)

        assert [r.store_and_fwd_flag for r in result.unique] == ["Yes", "Yes", "Yes", "No", "No", "Z"]
        assert result.stats.unrecognized_flags == 1

    def test_counts_add_up(self, write_csv, sample_rows, cleaning_config):
        """Test parsed rows equal dropped plus duplicates plus unique"""
        path = write_csv(sample_rows + [
            _row("2020-01-01 02:00:00", "2020-01-01 02:10:00", tip=""),
            _row("2020-01-01 02:00:00", "2020-01-01 02:10:00", passengers="x"),
        ])

        stats = TripCleaningPipeline(cleaning_config).run(path).stats

        assert stats == PipelineStats(
            parsed_rows=4, bad_rows=1, dropped_incomplete=1,
            unrecognized_flags=0, duplicates=1, unique=2
        )
        assert stats.parsed_rows == stats.dropped_incomplete + stats.complete_rows

    def test_malformed_lines_do_not_disturb_neighbours(self, write_csv, sample_rows, cleaning_config):
        """Test a too-wide first row and an unclosed quote each cost one line"""
        path = write_csv([
            sample_rows[0] + ",surplus",
            sample_rows[1],
            '2020-01-01 02:00:00,"2020-01-01 02:10:00,1,1.00,N,1,2,5.00,0.00',
            sample_rows[2],
            _row("2020-01-01 03:00:00", "2020-01-01 03:10:00"),
        ])

        result = TripCleaningPipeline(cleaning_config).run(path)

        assert result.stats == PipelineStats(
            parsed_rows=3, bad_rows=2, dropped_incomplete=0,
            unrecognized_flags=0, duplicates=0, unique=3
        )
        assert [r.fare_amount for r in result.unique] == [
            Decimal("7.50"), Decimal("14.50"), Decimal("6.00")
        ]

    def test_relative_timestamp_is_a_bad_row(self, write_csv, sample_rows, cleaning_config):
        path = write_csv([_row("now", "2020-01-01 00:10:00"), sample_rows[2]])

        stats = TripCleaningPipeline(cleaning_config).run(path).stats

        assert stats.bad_rows == 1
        assert stats.unique == 1

    def test_deterministic(self, write_csv, sample_rows, cleaning_config):
        """Test two runs over the same file produce identical output"""
        path = write_csv(sample_rows * 2)
        pipeline = TripCleaningPipeline(cleaning_config)

        first = pipeline.run(path)
        second = pipeline.run(path)

        assert first.unique == second.unique
        assert first.duplicates == second.duplicates
        assert first.stats == second.stats

    def test_unique_keys_are_distinct(self, write_csv, sample_rows, cleaning_config):
        """Test no two loaded records share a pickup, dropoff and passenger count"""
        path = write_csv(sample_rows * 4)

        result = TripCleaningPipeline(cleaning_config).run(path)

        keys = [r.dedup_key for r in result.unique]
        assert len(keys) == len(set(keys))

    def test_header_only_input(self, write_csv, cleaning_config):
        """Test an input without rows produces empty, successful output"""
        result = TripCleaningPipeline(cleaning_config).run(write_csv([]))

        assert result.unique == []
        assert result.duplicates == []
        assert result.stats == PipelineStats()

    def test_explicit_datetime_format(self, write_csv):
        """Test a configured timestamp format is used for parsing"""
        config = CleaningConfig(datetime_format="%m/%d/%Y %I:%M:%S %p")
        path = write_csv([_row("01/01/2020 12:47:35 AM", "01/01/2020 12:53:52 AM")])

        result = TripCleaningPipeline(config).run(path)

        assert result.unique[0].pickup_datetime == datetime(2020, 1, 1, 5, 47, 35, tzinfo=pytz.utc)


class TestTripCleaningPipelineFailures:
    """Test structural failures abort the run"""

    def test_unknown_timezone_rejected_at_construction(self):
        with pytest.raises(TimezoneResolutionError):
            TripCleaningPipeline(CleaningConfig(source_timezone="Not/A_Zone"))

    def test_missing_column(self, write_csv, csv_header, cleaning_config):
        path = write_csv([], header=csv_header.replace(",tip_amount", ""))

        with pytest.raises(HeaderValidationError):
            TripCleaningPipeline(cleaning_config).run(path)

    def test_missing_file(self, tmp_path, cleaning_config):
        with pytest.raises(DataSourceError):
            TripCleaningPipeline(cleaning_config).run(tmp_path / "missing.csv")
