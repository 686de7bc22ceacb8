# tests/unit/test_pipeline_config.py
"""Tests for PipelineConfig and CleaningConfig."""

import pytest
import os
from pathlib import Path
from unittest.mock import patch

from taxi_trip_etl.config.settings import PipelineConfig, CleaningConfig, DEFAULT_SOURCE_TIMEZONE
from taxi_trip_etl.utils.exceptions import ConfigurationError


class TestPipelineConfig:
    """Test PipelineConfig defaults and path handling."""

    def test_pipeline_config_defaults(self):
        """Test default values."""
        config = PipelineConfig()

        assert config.input_path is None
        assert config.output_dir == Path("./output")
        assert config.duplicates_filename == "duplicates.csv"
        assert config.batch_size == 10000
        assert config.log_level == "INFO"
        assert config.log_dir is None

    def test_pipeline_config_converts_strings_to_paths(self):
        """Test string paths are converted to Path objects."""
        config = PipelineConfig(
            input_path="data/trips.csv",
            output_dir="out",
            log_dir="logs"
        )

        assert config.input_path == Path("data/trips.csv")
        assert config.output_dir == Path("out")
        assert config.log_dir == Path("logs")

    def test_duplicates_path(self):
        """Test duplicates path joins output dir and filename."""
        config = PipelineConfig(output_dir="audit", duplicates_filename="removed.csv")

        assert config.duplicates_path == Path("audit") / "removed.csv"


class TestCleaningConfig:
    """Test CleaningConfig validation and environment loading."""

    def test_cleaning_config_defaults(self):
        """Test default values."""
        config = CleaningConfig()

        assert config.source_timezone == DEFAULT_SOURCE_TIMEZONE == "America/New_York"
        assert config.datetime_format is None
        assert config.chunk_size == 10000

    @pytest.mark.parametrize("chunk_size", [0, -5])
    def test_non_positive_chunk_size_raises(self, chunk_size):
        """Test a non-positive chunk size is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            CleaningConfig(chunk_size=chunk_size)

        assert exc_info.value.error_code == "INVALID_SETTING"

    def test_empty_datetime_format_env_means_inferred(self):
        """Test an empty DATETIME_FORMAT falls back to inference."""
        with patch.dict(os.environ, {'DATETIME_FORMAT': ''}, clear=True):
            config = CleaningConfig.from_env()

        assert config.datetime_format is None

    def test_invalid_chunk_size_env_raises(self):
        """Test a non-numeric CHUNK_SIZE is rejected."""
        with patch.dict(os.environ, {'CHUNK_SIZE': 'big'}, clear=True):
            with pytest.raises(ConfigurationError):
                CleaningConfig.from_env()
