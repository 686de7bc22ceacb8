# taxi_trip_etl/orchestrator/ingestion_pipeline.py
"""
Main orchestrator for the NYC Taxi Trip ETL
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from taxi_trip_etl.config.settings import Settings, settings as default_settings
from taxi_trip_etl.loaders.duplicates_writer import DuplicatesWriter
from taxi_trip_etl.loaders.snowflake_loader import SnowflakeLoader
from taxi_trip_etl.orchestrator.cleaning_pipeline import TripCleaningPipeline, PipelineStats
from taxi_trip_etl.utils.logger import get_logger, PerformanceLogger, timed_operation
from taxi_trip_etl.utils.exceptions import PipelineError, ConfigurationError, ErrorCollector


@dataclass
class IngestionResult:
    """Results from an ingestion run"""
    status: str
    stats: PipelineStats
    duplicates_path: Optional[Path]
    rows_loaded: int
    table_row_count: Optional[int]
    processing_time_seconds: float
    warnings: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'stats': self.stats.to_dict(),
            'duplicates_path': str(self.duplicates_path) if self.duplicates_path else None,
            'rows_loaded': self.rows_loaded,
            'table_row_count': self.table_row_count,
            'processing_time_seconds': self.processing_time_seconds,
            'warnings': self.warnings
        }


class IngestionPipeline:
    """
    End-to-end ETL run for one taxi trip CSV

    Steps:
    1. Clean the CSV (parse, filter, normalize, deduplicate, convert to UTC)
    2. Write removed duplicates to the audit CSV
    3. Ensure the Snowflake table exists
    4. Full-refresh the table with the unique records

    Any structural failure aborts the run with a PipelineError. Cleaning and
    the audit write both finish before the warehouse is touched, so a bad
    input never empties the table.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        loader: Optional[SnowflakeLoader] = None,
        writer: Optional[DuplicatesWriter] = None
    ):
        """
        Initialize the ingestion pipeline

        Args:
            app_settings: Settings to run with; the global settings by default
            loader: Warehouse loader; built from the Snowflake config if omitted
            writer: Duplicates writer; built from the pipeline config if omitted

        Raises:
            TimezoneResolutionError: If the configured source zone is unknown
        """
        self.settings = app_settings or default_settings
        self.logger = get_logger(__name__)
        self.performance_logger = PerformanceLogger(__name__)

        self.cleaning_pipeline = TripCleaningPipeline(self.settings.cleaning)
        self.loader = loader or SnowflakeLoader(self.settings.snowflake)
        self.writer = writer or DuplicatesWriter(self.settings.pipeline.duplicates_path)

        self.logger.info("Ingestion pipeline initialized successfully")

    def run(self, input_path: Union[str, Path], load: bool = True) -> IngestionResult:
        """
        Run the ETL for one input file

        Args:
            input_path: CSV file to ingest
            load: Whether to full-refresh the warehouse table; when False the
                run stops after writing the duplicates audit file

        Returns:
            IngestionResult with counts and load statistics

        Raises:
            ConfigurationError: If loading is requested without valid settings
            PipelineError: On any structural failure
        """
        if load and not self.settings.validate():
            raise ConfigurationError(
                "Invalid configuration - check required Snowflake environment variables"
            )

        error_collector = ErrorCollector()

        with timed_operation("ingest_file", self.logger) as run_timer:
            try:
                with timed_operation("clean_trips", self.logger):
                    cleaned = self.cleaning_pipeline.run(input_path)

                with timed_operation("write_duplicates", self.logger):
                    duplicates_path = self.writer.write(cleaned.duplicates)

                rows_loaded = 0
                table_row_count = None
                if load:
                    with timed_operation("load_trips", self.logger):
                        self.loader.ensure_table()
                        load_stats = self.loader.full_refresh(
                            cleaned.unique, self.settings.pipeline.batch_size
                        )
                        rows_loaded = load_stats['loaded_records']
                        table_row_count = self.loader.get_row_count()

            except PipelineError as e:
                self.performance_logger.log_error_metrics(
                    e.error_code, e.message, input_path=str(input_path)
                )
                self.logger.error(f"Ingestion failed: {e}")
                raise

        self._collect_warnings(cleaned.stats, error_collector)

        status = "completed"
        if load and table_row_count is not None and table_row_count != rows_loaded:
            error_collector.add_warning(
                "Table row count does not match the number of loaded records",
                {'rows_loaded': rows_loaded, 'table_row_count': table_row_count}
            )
            status = "completed_with_warnings"

        result = IngestionResult(
            status=status,
            stats=cleaned.stats,
            duplicates_path=duplicates_path,
            rows_loaded=rows_loaded,
            table_row_count=table_row_count,
            processing_time_seconds=run_timer.duration,
            warnings=error_collector.warnings
        )

        if error_collector.has_warnings:
            self.logger.warning(f"Ingestion produced {error_collector.warning_count} warnings")
        self.logger.info(f"Ingestion finished: {result.status}")
        return result

    def _collect_warnings(self, stats: PipelineStats, error_collector: ErrorCollector) -> None:
        """Surface row-level data-quality observations as warnings"""
        if stats.bad_rows:
            error_collector.add_warning(
                f"{stats.bad_rows} malformed rows were skipped",
                {'bad_rows': stats.bad_rows}
            )
        if stats.dropped_incomplete:
            error_collector.add_warning(
                f"{stats.dropped_incomplete} rows were missing required fields",
                {'dropped_incomplete': stats.dropped_incomplete}
            )
        if stats.unrecognized_flags:
            error_collector.add_warning(
                f"{stats.unrecognized_flags} rows carry an unrecognized store_and_fwd_flag",
                {'unrecognized_flags': stats.unrecognized_flags}
            )
