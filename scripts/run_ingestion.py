# scripts/run_ingestion.py
"""
Main execution script for the NYC Taxi Trip ETL

Cleans a taxi trip CSV, writes removed duplicates to an audit CSV and
full-refreshes the Snowflake trips table.

Usage Examples:
    # Full run with settings from the environment
    python scripts/run_ingestion.py data/sample-cab-data.csv

    # Clean and write the duplicates file only
    python scripts/run_ingestion.py data/sample-cab-data.csv --skip-load

    # Source timestamps recorded in another zone, explicit timestamp format
    python scripts/run_ingestion.py trips.csv --timezone America/Chicago \\
        --datetime-format "%m/%d/%Y %I:%M:%S %p"

    # Machine-readable summary
    python scripts/run_ingestion.py trips.csv --output-format json
"""

import argparse
import sys
from pathlib import Path
import json

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from taxi_trip_etl.orchestrator.ingestion_pipeline import IngestionPipeline
from taxi_trip_etl.utils.logger import setup_pipeline_logging, get_logger
from taxi_trip_etl.utils.exceptions import (
    PipelineError, ConfigurationError, DataSourceError, handle_pipeline_exception
)


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='NYC Taxi Trip ETL',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        'input',
        nargs='?',
        help='CSV file to ingest (default: INPUT_PATH environment variable)'
    )

    parser.add_argument(
        '--duplicates-output',
        type=str,
        help='Path of the duplicates audit CSV (default: OUTPUT_DIR/duplicates.csv)'
    )

    # Cleaning options
    parser.add_argument(
        '--timezone',
        type=str,
        help='Timezone the source timestamps were recorded in (default: America/New_York)'
    )

    parser.add_argument(
        '--datetime-format',
        type=str,
        help='strptime format of the timestamp columns (default: inferred)'
    )

    parser.add_argument(
        '--chunk-size',
        type=int,
        help='Rows read from the CSV per chunk (default: 10000)'
    )

    # Load options
    parser.add_argument(
        '--batch-size',
        type=int,
        help='Rows per bulk-load batch (default: 10000)'
    )

    parser.add_argument(
        '--skip-load',
        action='store_true',
        help='Clean and write the duplicates file without touching Snowflake'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Validate configuration and exit'
    )

    # Logging options
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        help='Directory for log files (default: console only)'
    )

    parser.add_argument(
        '--output-format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )

    return parser.parse_args(argv)


def setup_environment(args):
    """Apply command line overrides on top of environment settings"""
    setup_pipeline_logging(log_level=args.log_level, log_dir=args.log_dir)

    from taxi_trip_etl.config.settings import settings

    if args.timezone:
        settings.cleaning.source_timezone = args.timezone

    if args.datetime_format:
        settings.cleaning.datetime_format = args.datetime_format

    if args.chunk_size is not None:
        if args.chunk_size <= 0:
            raise ConfigurationError("--chunk-size must be a positive integer")
        settings.cleaning.chunk_size = args.chunk_size

    if args.batch_size is not None:
        if args.batch_size <= 0:
            raise ConfigurationError("--batch-size must be a positive integer")
        settings.pipeline.batch_size = args.batch_size

    if args.duplicates_output:
        duplicates_path = Path(args.duplicates_output)
        settings.pipeline.output_dir = duplicates_path.parent
        settings.pipeline.duplicates_filename = duplicates_path.name

    settings.pipeline.log_level = args.log_level
    return settings


def print_results(result, output_format: str):
    """Print ingestion results"""
    if output_format == 'json':
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    stats = result.stats
    print("=== Ingestion Results ===")
    print(f"Status: {result.status}")
    print(f"Parsed Rows: {stats.parsed_rows:,}")
    print(f"Bad Rows Skipped: {stats.bad_rows:,}")
    print(f"Incomplete Rows Dropped: {stats.dropped_incomplete:,}")
    print(f"Duplicates Removed: {stats.duplicates:,}")
    print(f"Unique Records: {stats.unique:,}")
    print(f"Duplicates File: {result.duplicates_path}")

    if result.table_row_count is not None:
        print(f"Rows Loaded: {result.rows_loaded:,}")
        print(f"Rows In Table: {result.table_row_count:,}")

    print(f"Processing Time: {result.processing_time_seconds:.2f} seconds")

    if result.warnings:
        print(f"Warnings: {len(result.warnings)}")
        for warning in result.warnings[:3]:
            print(f"  - {warning.get('message', 'Unknown warning')}")
        if len(result.warnings) > 3:
            print(f"  ... and {len(result.warnings) - 3} more warnings")


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    try:
        settings = setup_environment(args)
        logger = get_logger(__name__)

        logger.info("Starting NYC Taxi Trip ETL")
        logger.info(f"Arguments: {vars(args)}")

        if args.validate_config:
            if settings.validate():
                print("✓ Configuration is valid")
                return 0
            print("✗ Configuration is invalid - check required environment variables")
            return 1

        input_path = args.input or settings.pipeline.input_path
        if not input_path:
            print("Configuration Error: no input file given (pass a path or set INPUT_PATH)")
            return 1

        pipeline = IngestionPipeline(settings)
        result = pipeline.run(input_path, load=not args.skip_load)

        print_results(result, args.output_format)
        logger.info("Pipeline completed successfully")
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}")
        return 1

    except DataSourceError as e:
        print(f"Input Error: {e}")
        return 1

    except PipelineError as e:
        print(f"Pipeline Error: {e}")
        return 2

    except KeyboardInterrupt:
        print("\nPipeline interrupted by user")
        return 130

    except Exception as e:
        error = handle_pipeline_exception("main", e)
        get_logger(__name__).error(
            f"Pipeline aborted: {error}", extra={'error_code': error.error_code, 'context': error.context}
        )
        print(f"Unexpected error: {error}")
        if args.log_level == 'DEBUG':
            import traceback
            traceback.print_exc()
        return 3


if __name__ == '__main__':
    sys.exit(main())
