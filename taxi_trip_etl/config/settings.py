"""
Configuration management for the NYC Taxi Trip ETL
"""

import os
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

from taxi_trip_etl.utils.exceptions import ConfigurationError


DEFAULT_SOURCE_TIMEZONE = "America/New_York"


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"Environment variable {name} must be an integer, got {raw!r}",
            error_code="INVALID_SETTING",
            cause=e
        ) from e


@dataclass
class SnowflakeConfig:
    """Snowflake connection configuration"""
    account: str
    username: str
    password: str
    warehouse: str
    database: str
    schema: str
    role: Optional[str] = None
    table: str = "TAXI_TRIPS"

    @classmethod
    def from_env(cls) -> 'SnowflakeConfig':
        """Load Snowflake config from environment variables"""
        return cls(
            account=os.getenv('SNOWFLAKE_ACCOUNT', ''),
            username=os.getenv('SNOWFLAKE_USERNAME', ''),
            password=os.getenv('SNOWFLAKE_PASSWORD', ''),
            warehouse=os.getenv('SNOWFLAKE_WAREHOUSE', 'COMPUTE_WH'),
            database=os.getenv('SNOWFLAKE_DATABASE', 'NYC_TAXI_DB'),
            schema=os.getenv('SNOWFLAKE_SCHEMA', 'RAW'),
            role=os.getenv('SNOWFLAKE_ROLE'),
            table=os.getenv('SNOWFLAKE_TABLE', 'TAXI_TRIPS')
        )


@dataclass
class CleaningConfig:
    """
    Settings for the record cleaning pipeline

    Attributes:
        source_timezone: IANA name of the civil timezone the source
            timestamps were recorded in
        datetime_format: strptime format for timestamp cells; None lets
            pandas infer it per value
        chunk_size: Number of CSV rows read per chunk
    """
    source_timezone: str = DEFAULT_SOURCE_TIMEZONE
    datetime_format: Optional[str] = None
    chunk_size: int = 10000

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ConfigurationError(
                f"chunk_size must be a positive integer, got {self.chunk_size}",
                error_code="INVALID_SETTING"
            )

    @classmethod
    def from_env(cls) -> 'CleaningConfig':
        """Load cleaning config from environment variables"""
        return cls(
            source_timezone=os.getenv('SOURCE_TIMEZONE', DEFAULT_SOURCE_TIMEZONE),
            datetime_format=os.getenv('DATETIME_FORMAT') or None,
            chunk_size=_int_from_env('CHUNK_SIZE', 10000)
        )


@dataclass
class PipelineConfig:
    """Main pipeline configuration"""
    input_path: Optional[Path] = None
    output_dir: Path = Path("./output")
    duplicates_filename: str = "duplicates.csv"
    batch_size: int = 10000
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        if self.input_path is not None:
            self.input_path = Path(self.input_path)
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)

    @property
    def duplicates_path(self) -> Path:
        """Location of the duplicates audit file"""
        return self.output_dir / self.duplicates_filename


class Settings:
    """
    Main settings class that aggregates all configuration
    """

    def __init__(self):
        self.snowflake = SnowflakeConfig.from_env()
        self.cleaning = CleaningConfig.from_env()
        self.pipeline = PipelineConfig(
            input_path=os.getenv('INPUT_PATH') or None,
            output_dir=os.getenv('OUTPUT_DIR', './output'),
            duplicates_filename=os.getenv('DUPLICATES_FILENAME', 'duplicates.csv'),
            batch_size=_int_from_env('BATCH_SIZE', 10000),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
            log_dir=os.getenv('LOG_DIR') or None
        )

    def validate(self) -> bool:
        """
        Validate that everything needed for a warehouse load is present

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        required_snowflake_fields = [
            self.snowflake.account,
            self.snowflake.username,
            self.snowflake.password,
            self.snowflake.table
        ]

        if not all(required_snowflake_fields):
            return False

        if self.pipeline.batch_size <= 0:
            return False

        return True


# Global settings instance
settings = Settings()
