# cyclistic/orchestrator/cleaning_pipeline.py
"""
Main orchestrator for the Cyclistic trip cleaning pipeline
"""

from pathlib import Path
from typing import Dict, List, Any, Optional, Sequence, Tuple
from datetime import datetime, timezone
from dataclasses import dataclass

import pandas as pd

from cyclistic.config.settings import Settings
from cyclistic.extractors.trip_reader import TripFileReader
from cyclistic.loaders.trip_writer import TripWriter
from cyclistic.models.trip_record import SchemaVariant
from cyclistic.reporting.summary import TripSummary, build_summary
from cyclistic.transforms.deriver import derive_fields
from cyclistic.transforms.merger import count_duplicate_ride_ids, merge_tables
from cyclistic.transforms.normalizer import normalize_table
from cyclistic.transforms.validity_filter import (
    ValidityRules,
    exclusion_counts,
    filter_valid_trips,
)
from cyclistic.utils.logger import get_logger, PerformanceLogger, timed_operation
from cyclistic.utils.exceptions import ConfigurationError, handle_pipeline_exception


@dataclass
class CleaningResult:
    """Results from a cleaning run"""
    status: str
    sources: List[Dict[str, Any]]
    rows_merged: int
    rows_kept: int
    rows_excluded: int
    exclusions: Dict[str, int]
    duplicate_ride_ids: int
    output_csv: Optional[Path]
    output_snapshot: Optional[Path]
    summary: TripSummary
    processing_time_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'sources': self.sources,
            'rows_merged': self.rows_merged,
            'rows_kept': self.rows_kept,
            'rows_excluded': self.rows_excluded,
            'exclusions': self.exclusions,
            'duplicate_ride_ids': self.duplicate_ride_ids,
            'output_csv': str(self.output_csv) if self.output_csv else None,
            'output_snapshot': str(self.output_snapshot) if self.output_snapshot else None,
            'summary': self.summary.to_dict(),
            'processing_time_seconds': self.processing_time_seconds
        }


@dataclass
class CleanedTrips:
    """In-memory outcome of the transform stages"""
    merged: pd.DataFrame
    derived: pd.DataFrame
    cleaned: pd.DataFrame
    exclusions: Dict[str, int]
    duplicate_ride_ids: int


class CleaningPipeline:
    """
    Runs extract → normalize → merge → derive → filter → report → write

    Each stage materializes a new table from the previous one. Every
    source is read and checked before anything is transformed, and
    nothing is written unless all transform stages succeed.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the pipeline

        Args:
            settings: Pipeline settings; loaded from the environment if omitted

        Raises:
            ConfigurationError: If the settings are not usable
        """
        self.logger = get_logger(__name__)
        self.performance_logger = PerformanceLogger(__name__)
        self.settings = settings or Settings()

        errors = self.settings.validation_errors()
        if errors:
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(errors),
                context={'errors': errors}
            )

        self.rules = ValidityRules(
            min_ride_seconds=self.settings.cleaning.min_ride_seconds,
            max_ride_seconds=self.settings.cleaning.max_ride_seconds
        )
        self.reader = TripFileReader()

    def run(self) -> CleaningResult:
        """
        Execute the full pipeline against the configured sources

        Returns:
            CleaningResult with row counts, summary and output paths
        """
        start_time = datetime.now(timezone.utc)
        self.logger.info(f"Starting cleaning run over {len(self.settings.sources)} sources")

        raw_tables = []
        source_info = []
        with timed_operation("extract", self.logger):
            for source in self.settings.sources:
                table = self._run_stage('extract', self.reader.read, source,
                                        context={'source': str(source.path)})
                metadata = self.reader.get_file_metadata(source.path)
                raw_tables.append((table, source.variant, str(source.path)))
                source_info.append({
                    'path': str(source.path),
                    'variant': source.variant.value,
                    'rows': len(table),
                    'size_bytes': metadata['size_bytes'],
                    'md5_hash': metadata['md5_hash']
                })

        trips = self.clean_tables(raw_tables)

        with timed_operation("report", self.logger):
            summary = build_summary(trips.cleaned)
            if summary.negative_ride_count:
                self.logger.error(
                    f"{summary.negative_ride_count} rides with negative length survived filtering"
                )

        output_csv, output_snapshot = self._persist(trips.cleaned)

        processing_time = (datetime.now(timezone.utc) - start_time).total_seconds()
        result = CleaningResult(
            status="completed",
            sources=source_info,
            rows_merged=len(trips.merged),
            rows_kept=len(trips.cleaned),
            rows_excluded=len(trips.derived) - len(trips.cleaned),
            exclusions=trips.exclusions,
            duplicate_ride_ids=trips.duplicate_ride_ids,
            output_csv=output_csv,
            output_snapshot=output_snapshot,
            summary=summary,
            processing_time_seconds=processing_time
        )

        self.performance_logger.log_data_metrics(
            rows_merged=result.rows_merged,
            rows_kept=result.rows_kept,
            rows_excluded=result.rows_excluded,
            processing_time_seconds=processing_time
        )
        self.logger.info(f"Cleaning run completed: {result.rows_kept:,} rows kept")
        return result

    def clean_tables(
        self,
        raw_tables: Sequence[Tuple[pd.DataFrame, SchemaVariant, Optional[str]]]
    ) -> CleanedTrips:
        """
        Run the transform stages on raw tables already in memory

        Args:
            raw_tables: (raw table, declared variant, source label) triples,
                in the order their rows should appear in the output

        Returns:
            CleanedTrips holding the merged, derived and cleaned tables
        """
        with timed_operation("normalize", self.logger):
            normalized = [
                self._run_stage('normalize', normalize_table, raw, variant, source,
                                context={'source': source})
                for raw, variant, source in raw_tables
            ]

        with timed_operation("merge", self.logger):
            merged = self._run_stage('merge', merge_tables, normalized)
            duplicates = count_duplicate_ride_ids(merged)

        with timed_operation("derive", self.logger):
            derived = self._run_stage(
                'derive', derive_fields, merged,
                self.settings.cleaning.timezone_policy,
                self.settings.cleaning.local_timezone
            )

        with timed_operation("filter", self.logger):
            exclusions = exclusion_counts(derived, self.rules)
            cleaned = self._run_stage('filter', filter_valid_trips, derived, self.rules)

        self.logger.info(f"Excluded rows by rule: {exclusions}")
        return CleanedTrips(
            merged=merged,
            derived=derived,
            cleaned=cleaned,
            exclusions=exclusions,
            duplicate_ride_ids=duplicates
        )

    def _persist(self, cleaned: pd.DataFrame) -> Tuple[Path, Optional[Path]]:
        output = self.settings.output
        snapshot_filename = output.snapshot_filename if output.write_snapshot else None
        with timed_operation("write", self.logger):
            writer = self._run_stage('write', TripWriter, output.output_dir)
            return self._run_stage('write', writer.write_outputs, cleaned,
                                   output.csv_filename, snapshot_filename)

    def _run_stage(self, stage: str, func, *args, context: Optional[Dict[str, Any]] = None):
        """Call a stage function, tagging any failure with the stage name"""
        try:
            return func(*args)
        except Exception as e:
            error = handle_pipeline_exception(stage, e, context)
            self.logger.error(f"Stage {stage} failed: {error.message}", extra={'error': error.to_dict()})
            if error is e:
                raise
            raise error from e

    def describe(self) -> Dict[str, Any]:
        """Configuration overview for dry runs"""
        cleaning = self.settings.cleaning
        output = self.settings.output
        return {
            'sources': [
                {
                    'path': str(source.path),
                    'variant': source.variant.value,
                    'exists': source.path.exists()
                }
                for source in self.settings.sources
            ],
            'timezone_policy': cleaning.timezone_policy.value,
            'local_timezone': cleaning.local_timezone,
            'min_ride_seconds': cleaning.min_ride_seconds,
            'max_ride_seconds': cleaning.max_ride_seconds,
            'output_csv': str(output.csv_path),
            'output_snapshot': str(output.snapshot_path) if output.write_snapshot else None
        }
