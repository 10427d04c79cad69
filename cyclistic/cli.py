"""
Command-line interface for the Cyclistic trip cleaning pipeline

Usage Examples:
    # Clean the default 2019 Q1 and 2020 Q1 Divvy files
    cyclistic-clean

    # Explicit sources, one per schema variant
    cyclistic-clean --source divvy_2019 raw_data/Divvy_Trips_2019_Q1.csv \\
                    --source divvy_2020 raw_data/Divvy_Trips_2020_Q1.csv

    # Interpret zone-less timestamps as Chicago wall-clock time
    cyclistic-clean --timezone-policy assume-local --local-timezone America/Chicago

    # Summary as JSON, no Parquet snapshot
    cyclistic-clean --output-format json --no-snapshot
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from cyclistic.config.settings import Settings, SourceConfig
from cyclistic.models.trip_record import SchemaVariant, TimezonePolicy
from cyclistic.orchestrator.cleaning_pipeline import CleaningPipeline, CleaningResult
from cyclistic.reporting.summary import format_summary
from cyclistic.utils.logger import setup_pipeline_logging, get_logger
from cyclistic.utils.exceptions import PipelineError, ConfigurationError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='cyclistic-clean',
        description='Cyclistic bike-share trip cleaning pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--source',
        nargs=2,
        action='append',
        metavar=('VARIANT', 'PATH'),
        help=(
            'Input file and its schema variant '
            f"({', '.join(v.value for v in SchemaVariant)}); repeatable, "
            'rows are output in the order sources are given'
        )
    )

    # Output options
    parser.add_argument('--output-dir', help='Directory for the cleaned outputs')
    parser.add_argument('--output-name', help='File name of the cleaned CSV')
    parser.add_argument('--snapshot-name', help='File name of the Parquet snapshot')
    parser.add_argument(
        '--no-snapshot',
        action='store_true',
        help='Skip writing the Parquet snapshot'
    )

    # Cleaning options
    parser.add_argument(
        '--timezone-policy',
        choices=[p.value for p in TimezonePolicy],
        help='How timestamps without a zone are interpreted (default: assume-utc)'
    )
    parser.add_argument(
        '--local-timezone',
        help='IANA zone used by assume-local (default: America/Chicago)'
    )
    parser.add_argument(
        '--min-ride-seconds',
        type=float,
        help='Rides at or below this length are dropped (default: 60)'
    )
    parser.add_argument(
        '--max-ride-seconds',
        type=float,
        help='Rides at or above this length are dropped (default: 86400)'
    )

    # Logging options
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )
    parser.add_argument('--log-dir', help='Directory for log files (default: console only)')

    parser.add_argument(
        '--output-format',
        choices=['text', 'json'],
        default='text',
        help='Summary format on stdout (default: text)'
    )
    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Validate configuration and exit'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be processed without reading any data'
    )

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Load settings from the environment and apply command line overrides"""
    settings = Settings()

    if args.source:
        settings.pipeline.sources = [
            SourceConfig(path=path, variant=variant) for variant, path in args.source
        ]
    if args.output_dir:
        settings.output.output_dir = Path(args.output_dir)
    if args.output_name:
        settings.output.csv_filename = args.output_name
    if args.snapshot_name:
        settings.output.snapshot_filename = args.snapshot_name
    if args.no_snapshot:
        settings.output.write_snapshot = False
    if args.timezone_policy:
        settings.cleaning.timezone_policy = TimezonePolicy.from_value(args.timezone_policy)
    if args.local_timezone:
        settings.cleaning.local_timezone = args.local_timezone
    if args.min_ride_seconds is not None:
        settings.cleaning.min_ride_seconds = args.min_ride_seconds
    if args.max_ride_seconds is not None:
        settings.cleaning.max_ride_seconds = args.max_ride_seconds
    if args.log_level:
        settings.pipeline.log_level = args.log_level
    if args.log_dir:
        settings.pipeline.log_dir = args.log_dir

    return settings


def print_results(result: CleaningResult, output_format: str) -> None:
    """Print run results and the trip summary to stdout"""
    if output_format == 'json':
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print("=== Cleaning Results ===")
    print(f"Status: {result.status}")
    for source in result.sources:
        print(f"Source: {source['path']} ({source['variant']}): {source['rows']:,} rows")
    print(f"Rows Merged: {result.rows_merged:,}")
    print(f"Rows Kept: {result.rows_kept:,}")
    print(f"Rows Excluded: {result.rows_excluded:,}")
    for rule, count in result.exclusions.items():
        if rule != 'total_excluded':
            print(f"  - {rule.replace('_', ' ')}: {count:,}")
    if result.duplicate_ride_ids:
        print(f"Duplicate Ride Ids (kept): {result.duplicate_ride_ids:,}")
    print(f"Output CSV: {result.output_csv}")
    if result.output_snapshot:
        print(f"Snapshot: {result.output_snapshot}")
    print(f"Processing Time: {result.processing_time_seconds:.2f} seconds")
    print()
    print(format_summary(result.summary, 'text'))


def print_error(label: str, error: Exception) -> None:
    if isinstance(error, PipelineError) and error.stage:
        label = f"{label} [stage={error.stage}]"
    print(f"{label}: {error}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_arguments(argv)
    load_dotenv()

    try:
        settings = build_settings(args)
        setup_pipeline_logging(log_level=settings.pipeline.log_level, log_dir=settings.pipeline.log_dir)
        logger = get_logger(__name__)

        logger.info("Starting Cyclistic trip cleaning pipeline")
        logger.debug(f"Arguments: {vars(args)}")

        if args.validate_config:
            errors = settings.validation_errors()
            if not errors:
                print("✓ Configuration is valid")
                return 0
            print("✗ Configuration is invalid:")
            for error in errors:
                print(f"  - {error}")
            return 1

        pipeline = CleaningPipeline(settings)

        if args.dry_run:
            description = pipeline.describe()
            if args.output_format == 'json':
                print(json.dumps(description, indent=2))
            else:
                print("=== Dry Run ===")
                for source in description['sources']:
                    marker = "" if source['exists'] else " (missing)"
                    print(f"  - {source['variant']}: {source['path']}{marker}")
                print(f"Time Zone Policy: {description['timezone_policy']}")
                print(f"Ride Length Bounds: ({description['min_ride_seconds']}, "
                      f"{description['max_ride_seconds']}) seconds")
                print(f"Output CSV: {description['output_csv']}")
                print(f"Snapshot: {description['output_snapshot'] or 'disabled'}")
            return 0

        result = pipeline.run()
        print_results(result, args.output_format)
        logger.info("Pipeline completed successfully")
        return 0

    except ConfigurationError as e:
        print_error("Configuration Error", e)
        return 1

    except PipelineError as e:
        print_error("Pipeline Error", e)
        return 2

    except KeyboardInterrupt:
        print("\nPipeline interrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print_error("Unexpected error", e)
        if args.log_level == 'DEBUG':
            import traceback
            traceback.print_exc()
        return 3


if __name__ == '__main__':
    sys.exit(main())
