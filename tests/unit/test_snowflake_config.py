# tests/unit/test_snowflake_config.py
"""Tests for SnowflakeConfig."""

import os
from unittest.mock import patch

from taxi_trip_etl.config.settings import SnowflakeConfig


class TestSnowflakeConfig:
    """Test SnowflakeConfig creation and environment loading."""

    def test_snowflake_config_creation(self):
        """Test direct construction with explicit values."""
        config = SnowflakeConfig(
            account="acct",
            username="user",
            password="secret",
            warehouse="WH",
            database="DB",
            schema="RAW"
        )

        assert config.account == "acct"
        assert config.role is None
        assert config.table == "TAXI_TRIPS"

    def test_snowflake_config_from_env(self):
        """Test loading every field from environment variables."""
        env_vars = {
            'SNOWFLAKE_ACCOUNT': 'test_account',
            'SNOWFLAKE_USERNAME': 'test_user',
            'SNOWFLAKE_PASSWORD': 'test_password',
            'SNOWFLAKE_WAREHOUSE': 'ETL_WH',
            'SNOWFLAKE_DATABASE': 'TAXI',
            'SNOWFLAKE_SCHEMA': 'STAGING',
            'SNOWFLAKE_ROLE': 'LOADER',
            'SNOWFLAKE_TABLE': 'CLEAN_TRIPS'
        }

        with patch.dict(os.environ, env_vars, clear=True):
            config = SnowflakeConfig.from_env()

        assert config.account == 'test_account'
        assert config.username == 'test_user'
        assert config.password == 'test_password'
        assert config.warehouse == 'ETL_WH'
        assert config.database == 'TAXI'
        assert config.schema == 'STAGING'
        assert config.role == 'LOADER'
        assert config.table == 'CLEAN_TRIPS'

    def test_snowflake_config_from_env_defaults(self):
        """Test defaults when no environment variables are set."""
        with patch.dict(os.environ, {}, clear=True):
            config = SnowflakeConfig.from_env()

        assert config.account == ''
        assert config.username == ''
        assert config.password == ''
        assert config.warehouse == 'COMPUTE_WH'
        assert config.database == 'NYC_TAXI_DB'
        assert config.schema == 'RAW'
        assert config.role is None
        assert config.table == 'TAXI_TRIPS'
