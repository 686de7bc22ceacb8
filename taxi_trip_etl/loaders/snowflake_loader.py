# taxi_trip_etl/loaders/snowflake_loader.py
"""
Snowflake full-refresh loader for cleaned taxi trips
"""

from contextlib import contextmanager
from typing import Dict, List, Any, Sequence

import pandas as pd
import snowflake.connector
from snowflake.connector.pandas_tools import write_pandas

from taxi_trip_etl.config.settings import SnowflakeConfig
from taxi_trip_etl.models.taxi_trip import TaxiTripRecord, LOAD_COLUMN_MAP
from taxi_trip_etl.utils.logger import get_logger
from taxi_trip_etl.utils.exceptions import LoaderError


LOAD_COLUMNS: List[str] = list(LOAD_COLUMN_MAP.values())
DATETIME_COLUMNS = ['PICKUP_DATETIME_UTC', 'DROPOFF_DATETIME_UTC']


class SnowflakeLoader:
    """
    Loads cleaned taxi trips into Snowflake as a full refresh

    Every load replaces the table contents: the table is truncated and the
    current run's records are bulk-loaded through write_pandas. Running the
    same input twice therefore leaves the table in the same state.
    """

    def __init__(self, config: SnowflakeConfig):
        """
        Initialize Snowflake loader

        Args:
            config: Snowflake configuration object
        """
        self.config = config
        self.table_name = config.table.upper()
        self.logger = get_logger(__name__)

    @contextmanager
    def get_connection(self):
        """
        Context manager for Snowflake database connections

        Ensures proper connection handling and cleanup
        """
        connection = None
        try:
            connection = snowflake.connector.connect(
                account=self.config.account,
                user=self.config.username,
                password=self.config.password,
                warehouse=self.config.warehouse,
                database=self.config.database,
                schema=self.config.schema,
                role=self.config.role
            )
            self.logger.info("Connected to Snowflake successfully")
            yield connection

        except snowflake.connector.errors.Error as e:
            self.logger.error(f"Snowflake operation failed: {str(e)}")
            raise LoaderError(f"Snowflake connection failed: {str(e)}", cause=e) from e

        finally:
            if connection:
                connection.close()
                self.logger.info("Snowflake connection closed")

    def ensure_table(self) -> bool:
        """
        Create the trips table if it does not exist yet

        Returns:
            True once the table exists

        Raises:
            LoaderError: If table creation fails
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(self._create_table_sql())
                cursor.close()
        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(f"Failed to create table {self.table_name}: {str(e)}", cause=e) from e

        self.logger.info(f"Table {self.table_name} ensured")
        return True

    def full_refresh(
        self,
        records: Sequence[TaxiTripRecord],
        batch_size: int = 10000
    ) -> Dict[str, Any]:
        """
        Replace the table contents with the given records

        Args:
            records: Cleaned records with UTC timestamps
            batch_size: Number of rows per write_pandas call

        Returns:
            Dictionary with load statistics

        Raises:
            LoaderError: If truncation or any batch fails
        """
        if batch_size <= 0:
            raise LoaderError(
                f"Batch size must be a positive integer, got {batch_size}",
                error_code="INVALID_BATCH_SIZE"
            )

        df = self.records_to_dataframe(records)
        total_records = len(df)
        loaded_records = 0

        self.logger.info(
            f"Full refresh of {self.table_name}: {total_records:,} records "
            f"(batch size {batch_size:,})"
        )

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"TRUNCATE TABLE IF EXISTS {self.table_name}")
                cursor.close()

                for i in range(0, total_records, batch_size):
                    batch_df = df.iloc[i:i + batch_size]
                    success, nchunks, nrows, _ = write_pandas(
                        conn=conn,
                        df=batch_df,
                        table_name=self.table_name,
                        database=self.config.database,
                        schema=self.config.schema,
                        chunk_size=batch_size,
                        compression='gzip',
                        quote_identifiers=False
                    )

                    if not success:
                        raise LoaderError(
                            f"Failed to load batch {i // batch_size + 1} into {self.table_name}",
                            error_code="BATCH_LOAD_FAILED",
                            context={'loaded_records': loaded_records}
                        )

                    loaded_records += nrows
                    self.logger.info(f"Loaded batch {i // batch_size + 1}: {nrows} records")

        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(
                f"Full refresh of {self.table_name} failed: {str(e)}",
                context={'loaded_records': loaded_records},
                cause=e
            ) from e

        self.logger.info(
            f"Load completed: {loaded_records}/{total_records} records loaded into {self.table_name}"
        )

        return {
            "status": "completed",
            "total_records": total_records,
            "loaded_records": loaded_records,
            "table_name": self.table_name,
            "load_timestamp": pd.Timestamp.now(tz="UTC").isoformat()
        }

    def get_row_count(self) -> int:
        """
        Count the rows currently in the trips table

        Raises:
            LoaderError: If the query fails
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT COUNT(*) FROM {self.table_name}")
                result = cursor.fetchone()
                cursor.close()
        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(f"Failed to retrieve row count from {self.table_name}: {str(e)}", cause=e) from e

        return int(result[0]) if result else 0

    @staticmethod
    def records_to_dataframe(records: Sequence[TaxiTripRecord]) -> pd.DataFrame:
        """
        Build the load DataFrame in warehouse column layout

        Timestamps become naive UTC values for the TIMESTAMP_NTZ columns.
        """
        df = pd.DataFrame([record.to_load_row() for record in records], columns=LOAD_COLUMNS)
        for column in DATETIME_COLUMNS:
            df[column] = pd.to_datetime(df[column], utc=True).dt.tz_localize(None)
        return df

    def _create_table_sql(self) -> str:
        """DDL for the trips table"""
        return f"""
        CREATE TABLE IF NOT EXISTS {self.table_name} (
            PICKUP_DATETIME_UTC TIMESTAMP_NTZ(0) NOT NULL,
            DROPOFF_DATETIME_UTC TIMESTAMP_NTZ(0) NOT NULL,
            PASSENGER_COUNT NUMBER(3, 0) NOT NULL,
            TRIP_DISTANCE NUMBER(8, 2) NOT NULL,
            STORE_AND_FWD_FLAG VARCHAR(3) NOT NULL,
            PU_LOCATION_ID NUMBER(5, 0) NOT NULL,
            DO_LOCATION_ID NUMBER(5, 0) NOT NULL,
            FARE_AMOUNT NUMBER(10, 2) NOT NULL,
            TIP_AMOUNT NUMBER(10, 2) NOT NULL,
            -- Derived column for travel-time queries
            TRAVEL_TIME_SECONDS NUMBER AS (DATEDIFF('second', PICKUP_DATETIME_UTC, DROPOFF_DATETIME_UTC))
        )
        CLUSTER BY (PU_LOCATION_ID)
        """
