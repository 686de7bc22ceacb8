"""Record cleaning stages"""

from .completeness_filter import CompletenessFilter
from .flag_normalizer import FlagNormalizer, normalize_flag
from .deduplicator import Deduplicator, DeduplicationResult
from .timezone_converter import TimezoneConverter, resolve_timezone

__all__ = [
    'CompletenessFilter', 'FlagNormalizer', 'normalize_flag',
    'Deduplicator', 'DeduplicationResult', 'TimezoneConverter', 'resolve_timezone'
]
