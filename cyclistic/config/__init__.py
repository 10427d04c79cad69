"""Configuration management module"""

from .settings import Settings, SourceConfig, CleaningConfig, OutputConfig, PipelineConfig, parse_sources

__all__ = ['Settings', 'SourceConfig', 'CleaningConfig', 'OutputConfig', 'PipelineConfig', 'parse_sources']
