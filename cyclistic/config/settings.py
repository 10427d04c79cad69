"""
Configuration management for the Cyclistic trip cleaning pipeline
"""

import os
from dataclasses import dataclass, field
from typing import Optional, List
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cyclistic.models.trip_record import SchemaVariant, TimezonePolicy
from cyclistic.utils.exceptions import ConfigurationError


DEFAULT_TRIP_SOURCES = (
    "divvy_2019=raw_data/Divvy_Trips_2019_Q1.csv,"
    "divvy_2020=raw_data/Divvy_Trips_2020_Q1.csv"
)


@dataclass
class SourceConfig:
    """One input file and the schema variant it is declared to use"""
    path: Path
    variant: SchemaVariant

    def __post_init__(self):
        self.path = Path(self.path)
        self.variant = SchemaVariant.from_value(self.variant)


@dataclass
class CleaningConfig:
    """Timestamp interpretation and validity bounds"""
    min_ride_seconds: float = 60.0
    max_ride_seconds: float = 86400.0
    timezone_policy: TimezonePolicy = TimezonePolicy.ASSUME_UTC
    local_timezone: Optional[str] = "America/Chicago"

    def __post_init__(self):
        self.timezone_policy = TimezonePolicy.from_value(self.timezone_policy)

    @classmethod
    def from_env(cls) -> 'CleaningConfig':
        """Load cleaning config from environment variables"""
        return cls(
            min_ride_seconds=_float_env('MIN_RIDE_SECONDS', 60.0),
            max_ride_seconds=_float_env('MAX_RIDE_SECONDS', 86400.0),
            timezone_policy=os.getenv('TIMEZONE_POLICY', TimezonePolicy.ASSUME_UTC.value),
            local_timezone=os.getenv('LOCAL_TIMEZONE', 'America/Chicago')
        )


@dataclass
class OutputConfig:
    """Where and how the cleaned table is persisted"""
    output_dir: Path = Path("processed_data")
    csv_filename: str = "cyclistic_trips_2019_2020_q1_cleaned.csv"
    snapshot_filename: str = "cyclistic_trips_cleaned.parquet"
    write_snapshot: bool = True

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)

    @property
    def csv_path(self) -> Path:
        return self.output_dir / self.csv_filename

    @property
    def snapshot_path(self) -> Path:
        return self.output_dir / self.snapshot_filename

    @classmethod
    def from_env(cls) -> 'OutputConfig':
        """Load output config from environment variables"""
        return cls(
            output_dir=os.getenv('OUTPUT_DIR', 'processed_data'),
            csv_filename=os.getenv('OUTPUT_CSV_NAME', 'cyclistic_trips_2019_2020_q1_cleaned.csv'),
            snapshot_filename=os.getenv('SNAPSHOT_NAME', 'cyclistic_trips_cleaned.parquet'),
            write_snapshot=os.getenv('WRITE_SNAPSHOT', 'true').lower() == 'true'
        )


@dataclass
class PipelineConfig:
    """Main pipeline configuration"""
    sources: List[SourceConfig] = field(default_factory=list)
    log_level: str = "INFO"
    log_dir: Optional[str] = None


def parse_sources(value: str) -> List[SourceConfig]:
    """
    Parse a ``variant=path,variant=path`` source list

    Args:
        value: Comma separated list of variant/path pairs

    Returns:
        List of SourceConfig in the order given

    Raises:
        ConfigurationError: If an entry is malformed or names an unknown variant
    """
    sources = []
    for entry in value.split(','):
        entry = entry.strip()
        if not entry:
            continue
        variant, sep, path = entry.partition('=')
        if not sep or not variant.strip() or not path.strip():
            raise ConfigurationError(
                f"Invalid trip source entry {entry!r}, expected VARIANT=PATH",
                context={'setting': 'TRIP_SOURCES'}
            )
        sources.append(SourceConfig(path=path.strip(), variant=variant.strip()))
    return sources


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            context={'setting': name},
            cause=e
        ) from e


class Settings:
    """
    Main settings class that aggregates all configuration
    """

    def __init__(self):
        self.cleaning = CleaningConfig.from_env()
        self.output = OutputConfig.from_env()
        self.pipeline = PipelineConfig(
            sources=parse_sources(os.getenv('TRIP_SOURCES', DEFAULT_TRIP_SOURCES)),
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
            log_dir=os.getenv('LOG_DIR') or None
        )

    @property
    def sources(self) -> List[SourceConfig]:
        return self.pipeline.sources

    def validation_errors(self) -> List[str]:
        """
        Collect every configuration problem instead of stopping at the first

        Returns:
            List of human-readable problems, empty when the settings are usable
        """
        errors = []

        if not self.pipeline.sources:
            errors.append("No trip sources configured")

        if self.cleaning.min_ride_seconds < 0:
            errors.append("min_ride_seconds must not be negative")

        if self.cleaning.min_ride_seconds >= self.cleaning.max_ride_seconds:
            errors.append(
                f"min_ride_seconds ({self.cleaning.min_ride_seconds}) must be below "
                f"max_ride_seconds ({self.cleaning.max_ride_seconds})"
            )

        if self.cleaning.timezone_policy is TimezonePolicy.ASSUME_LOCAL:
            if not self.cleaning.local_timezone:
                errors.append("assume-local policy requires local_timezone")
            else:
                try:
                    ZoneInfo(self.cleaning.local_timezone)
                except (ZoneInfoNotFoundError, ValueError):
                    errors.append(f"Unknown time zone: {self.cleaning.local_timezone}")

        if not self.output.csv_filename:
            errors.append("csv_filename must not be empty")

        if self.output.write_snapshot and not self.output.snapshot_filename:
            errors.append("snapshot_filename must not be empty when snapshots are enabled")

        return errors

    def validate(self) -> bool:
        """
        Validate that the configuration is usable

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        return not self.validation_errors()
