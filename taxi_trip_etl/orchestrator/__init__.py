"""Pipeline orchestration"""

from .cleaning_pipeline import TripCleaningPipeline, CleaningResult, PipelineStats
from .ingestion_pipeline import IngestionPipeline, IngestionResult

__all__ = [
    'TripCleaningPipeline', 'CleaningResult', 'PipelineStats',
    'IngestionPipeline', 'IngestionResult'
]
