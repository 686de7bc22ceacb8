"""Output collaborators: audit file and warehouse"""

from .duplicates_writer import DuplicatesWriter
from .snowflake_loader import SnowflakeLoader

__all__ = ['DuplicatesWriter', 'SnowflakeLoader']
