"""
NYC Taxi Trip ETL

Cleans, deduplicates and timezone-normalizes NYC taxi trip CSV files and
loads them into Snowflake as a full refresh.
"""

__version__ = "1.0.0"
__author__ = "Data Engineering Team"
