# taxi_trip_etl/orchestrator/cleaning_pipeline.py
"""
Record cleaning pipeline: parse, filter, normalize, deduplicate, convert
"""

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional

from taxi_trip_etl.config.settings import CleaningConfig
from taxi_trip_etl.extractors.csv_extractor import CsvTripExtractor, Source
from taxi_trip_etl.models.taxi_trip import TaxiTripRecord
from taxi_trip_etl.transformers.completeness_filter import CompletenessFilter
from taxi_trip_etl.transformers.flag_normalizer import FlagNormalizer
from taxi_trip_etl.transformers.deduplicator import Deduplicator
from taxi_trip_etl.transformers.timezone_converter import TimezoneConverter
from taxi_trip_etl.utils.logger import get_logger, PerformanceLogger


@dataclass
class PipelineStats:
    """Per-stage row counts of one cleaning run"""
    parsed_rows: int = 0
    bad_rows: int = 0
    dropped_incomplete: int = 0
    unrecognized_flags: int = 0
    duplicates: int = 0
    unique: int = 0

    @property
    def complete_rows(self) -> int:
        """Records that survived the completeness filter"""
        return self.unique + self.duplicates

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CleaningResult:
    """
    Output of a cleaning run

    Attributes:
        unique: First occurrences with UTC timestamps, ready for loading
        duplicates: Later occurrences, still in local time, for the audit file
        stats: Per-stage counts
    """
    unique: List[TaxiTripRecord] = field(default_factory=list)
    duplicates: List[TaxiTripRecord] = field(default_factory=list)
    stats: PipelineStats = field(default_factory=PipelineStats)


class TripCleaningPipeline:
    """
    Sequences the cleaning stages in their fixed order

    parse -> completeness filter -> flag normalization -> deduplication ->
    timezone conversion

    The pipeline is a one-shot transformation: each run() builds fresh stage
    state, so identical input always yields identical output. A structural
    failure raises before a result is returned; row-level problems only
    show up in the stats.
    """

    def __init__(self, config: Optional[CleaningConfig] = None):
        """
        Initialize cleaning pipeline

        Args:
            config: Cleaning configuration; defaults are used when omitted

        Raises:
            TimezoneResolutionError: If the configured zone is unknown
        """
        self.config = config or CleaningConfig()
        self.converter = TimezoneConverter(self.config.source_timezone)
        self.logger = get_logger(__name__)
        self.performance_logger = PerformanceLogger(__name__)

    def run(self, source: Source) -> CleaningResult:
        """
        Clean one CSV source

        Args:
            source: Path to a CSV file or an open text stream

        Returns:
            CleaningResult with unique and duplicate records plus counts

        Raises:
            DataSourceError: If the source cannot be opened or read
            HeaderValidationError: If the header lacks required columns
        """
        extractor = CsvTripExtractor(
            datetime_format=self.config.datetime_format,
            chunk_size=self.config.chunk_size
        )
        completeness_filter = CompletenessFilter()
        flag_normalizer = FlagNormalizer()
        deduplicator = Deduplicator()

        records = extractor.extract(source)
        records = completeness_filter.apply(records)
        records = flag_normalizer.apply(records)
        partitioned = deduplicator.partition(records)
        unique = self.converter.convert(partitioned.unique)

        stats = PipelineStats(
            parsed_rows=extractor.stats.parsed_rows,
            bad_rows=extractor.stats.bad_rows,
            dropped_incomplete=completeness_filter.dropped,
            unrecognized_flags=flag_normalizer.unrecognized,
            duplicates=len(partitioned.duplicates),
            unique=len(unique),
        )
        self.performance_logger.log_data_metrics(**stats.to_dict())

        return CleaningResult(unique=unique, duplicates=partitioned.duplicates, stats=stats)
