"""Source extraction"""

from .csv_extractor import CsvTripExtractor, ParseStats

__all__ = ['CsvTripExtractor', 'ParseStats']
