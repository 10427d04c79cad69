# cyclistic/transforms/deriver.py
"""
Derived trip fields computed from the start and end timestamps
"""

from typing import Optional

import pandas as pd

from cyclistic.models.trip_record import (
    CANONICAL_COLUMNS,
    MONTH_LABELS,
    OUTPUT_COLUMNS,
    WEEKDAY_NAMES,
    TimezonePolicy,
)
from cyclistic.utils.logger import get_logger
from cyclistic.utils.exceptions import ConfigurationError, SchemaError

logger = get_logger(__name__)

# Trailing zone designator after a clock time: Z, UTC, +06, +0600 or +06:00
_ZONE_SUFFIX = r"\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?\s*(?:[Zz]|UTC|[+-]\d{2}(?::?\d{2})?)$"


def parse_timestamps(
    values: pd.Series,
    policy: TimezonePolicy = TimezonePolicy.ASSUME_UTC,
    local_timezone: Optional[str] = None
) -> pd.Series:
    """
    Parse timestamp strings under an explicit time zone policy

    ASSUME_UTC reads zone-less strings as UTC and converts zoned ones to
    UTC. ASSUME_LOCAL reads zone-less strings as wall-clock time in
    ``local_timezone``; times that fall into a DST gap or overlap become
    missing. Strings that carry their own offset are converted to
    ``local_timezone``. Unparseable values become NaT.

    Raises:
        ConfigurationError: If ASSUME_LOCAL is requested without a zone name
    """
    if policy is TimezonePolicy.ASSUME_UTC:
        return pd.to_datetime(values, errors="coerce", utc=True, format="ISO8601")

    if not local_timezone:
        raise ConfigurationError(
            "assume-local time zone policy requires a local_timezone",
            context={'stage': 'derive'}
        )

    # Zoned and zone-less strings cannot be parsed together without utc=True
    zoned = values.astype("string").str.strip().str.contains(_ZONE_SUFFIX, na=False)
    if not zoned.any():
        return _localize(values, local_timezone)
    if zoned.all():
        return _convert(values, local_timezone)

    positional = values.reset_index(drop=True)
    mask = zoned.to_numpy()
    combined = pd.concat([
        _localize(positional[~mask], local_timezone),
        _convert(positional[mask], local_timezone),
    ]).sort_index()
    combined.index = values.index
    return combined.rename(values.name)


def _localize(values: pd.Series, local_timezone: str) -> pd.Series:
    parsed = pd.to_datetime(values, errors="coerce", format="ISO8601")
    return parsed.dt.tz_localize(local_timezone, ambiguous="NaT", nonexistent="NaT")


def _convert(values: pd.Series, local_timezone: str) -> pd.Series:
    parsed = pd.to_datetime(values, errors="coerce", utc=True, format="ISO8601")
    return parsed.dt.tz_convert(local_timezone)


def derive_fields(
    table: pd.DataFrame,
    policy: TimezonePolicy = TimezonePolicy.ASSUME_UTC,
    local_timezone: Optional[str] = None
) -> pd.DataFrame:
    """
    Parse timestamps and add ride length and calendar fields

    Args:
        table: Merged canonical table
        policy: How zone-less timestamps are interpreted
        local_timezone: IANA zone name used by ASSUME_LOCAL

    Returns:
        New DataFrame with OUTPUT_COLUMNS. Rows whose timestamps did not
        parse carry missing derived fields.
    """
    absent = [column for column in CANONICAL_COLUMNS if column not in table.columns]
    if absent:
        raise SchemaError(
            f"Cannot derive fields: missing columns {absent}",
            error_code="MISSING_COLUMNS",
            context={'stage': 'derive', 'columns': absent}
        )

    derived = table.loc[:, CANONICAL_COLUMNS].copy()
    started = parse_timestamps(table['started_at'], policy, local_timezone)
    ended = parse_timestamps(table['ended_at'], policy, local_timezone)

    unparsed = int(
        (table['started_at'].notna() & started.isna()).sum()
        + (table['ended_at'].notna() & ended.isna()).sum()
    )
    if unparsed:
        logger.warning(f"{unparsed:,} timestamp values could not be parsed and were set to missing")

    derived['started_at'] = started
    derived['ended_at'] = ended

    # Signed on purpose: negative durations are left for the filter
    derived['ride_length_sec'] = (ended - started).dt.total_seconds()
    derived['ride_length_min'] = derived['ride_length_sec'] / 60

    weekday = started.dt.dayofweek
    derived['day_of_week'] = ((weekday + 1) % 7 + 1).astype("Int64")
    derived['day_name'] = weekday.map(WEEKDAY_NAMES)
    derived['start_hour'] = started.dt.hour.astype("Int64")
    derived['date'] = started.dt.date
    derived['month'] = pd.Categorical(
        started.dt.month.map(lambda m: MONTH_LABELS[int(m) - 1] if pd.notna(m) else None),
        categories=MONTH_LABELS,
        ordered=True
    )

    return derived.loc[:, OUTPUT_COLUMNS]
