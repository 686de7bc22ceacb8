"""Configuration management module"""

from .settings import settings, Settings, SnowflakeConfig, CleaningConfig, PipelineConfig

__all__ = ['settings', 'Settings', 'SnowflakeConfig', 'CleaningConfig', 'PipelineConfig']
