# tests/unit/conftest.py
"""
Shared pytest fixtures for the taxi trip ETL tests
"""

import pytest
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

from taxi_trip_etl.config.settings import SnowflakeConfig, CleaningConfig
from taxi_trip_etl.models.taxi_trip import TaxiTripRecord


CSV_HEADER = (
    "tpep_pickup_datetime,tpep_dropoff_datetime,passenger_count,trip_distance,"
    "store_and_fwd_flag,PULocationID,DOLocationID,fare_amount,tip_amount"
)


@pytest.fixture
def csv_header():
    """Header line of a trip CSV in source column order"""
    return CSV_HEADER


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing a trip CSV with the standard header to a temp file"""
    def _write(rows, header=CSV_HEADER, filename="trips.csv"):
        path = tmp_path / filename
        lines = [header] + list(rows) if header is not None else list(rows)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sample_rows():
    """Three well-formed rows, the second a duplicate of the first"""
    return [
        "2020-01-01 00:47:35,2020-01-01 00:53:52,1,1.20,N,238,239,6.00,1.47",
        "2020-01-01 00:47:35,2020-01-01 00:53:52,1,1.20,N,238,239,7.50,0.00",
        "2020-01-01 01:10:00,2020-01-01 01:25:00,2,3.40,Y,48,68,14.50,3.00",
    ]


@pytest.fixture
def make_record():
    """Factory for a complete record in local time; fields can be overridden"""
    def _make(**overrides):
        values = {
            'pickup_datetime': datetime(2020, 1, 1, 0, 47, 35),
            'dropoff_datetime': datetime(2020, 1, 1, 0, 53, 52),
            'passenger_count': 1,
            'trip_distance': Decimal("1.20"),
            'store_and_fwd_flag': "No",
            'pickup_location_id': 238,
            'dropoff_location_id': 239,
            'fare_amount': Decimal("6.00"),
            'tip_amount': Decimal("1.47"),
        }
        values.update(overrides)
        return TaxiTripRecord(**values)
    return _make


@pytest.fixture
def snowflake_config():
    """Create a test Snowflake configuration"""
    return SnowflakeConfig(
        account="test_account",
        username="test_user",
        password="test_password",
        warehouse="test_warehouse",
        database="test_database",
        schema="test_schema",
        role="test_role",
        table="taxi_trips"
    )


@pytest.fixture
def cleaning_config():
    """Cleaning configuration with a small chunk size to exercise chunking"""
    return CleaningConfig(source_timezone="America/New_York", chunk_size=2)


@pytest.fixture
def mock_snowflake_connection():
    """Create a mock Snowflake connection"""
    connection = Mock()
    cursor = Mock()
    connection.cursor.return_value = cursor

    cursor.execute.return_value = None
    cursor.fetchone.return_value = None
    cursor.close.return_value = None
    connection.close.return_value = None

    return connection


@pytest.fixture
def snowflake_env(tmp_path):
    """Environment variables for a complete Snowflake configuration"""
    return {
        'SNOWFLAKE_ACCOUNT': 'test_account',
        'SNOWFLAKE_USERNAME': 'test_user',
        'SNOWFLAKE_PASSWORD': 'test_password',
        'OUTPUT_DIR': str(tmp_path / "output"),
    }
