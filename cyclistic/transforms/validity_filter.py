# cyclistic/transforms/validity_filter.py
"""
Data-quality filter removing implausible or incomplete trips
"""

from dataclasses import dataclass
from typing import Dict, Optional

import pandas as pd

from cyclistic.utils.logger import get_logger
from cyclistic.utils.exceptions import ConfigurationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValidityRules:
    """
    Ride length bounds, both exclusive

    Rides at or under a minute are docking false starts; rides of a day
    or more are lost, stolen or maintenance moves.
    """
    min_ride_seconds: float = 60.0
    max_ride_seconds: float = 86400.0

    def __post_init__(self):
        if self.min_ride_seconds >= self.max_ride_seconds:
            raise ConfigurationError(
                f"min_ride_seconds ({self.min_ride_seconds}) must be below "
                f"max_ride_seconds ({self.max_ride_seconds})",
                context={'stage': 'filter'}
            )


def _rule_masks(table: pd.DataFrame, rules: ValidityRules) -> Dict[str, pd.Series]:
    seconds = table['ride_length_sec']
    return {
        'unparsed_duration': seconds.isna(),
        'too_short': seconds <= rules.min_ride_seconds,
        'too_long': seconds >= rules.max_ride_seconds,
        'missing_started_at': table['started_at'].isna(),
        'missing_ended_at': table['ended_at'].isna(),
        'missing_member_casual': table['member_casual'].isna(),
    }


def filter_valid_trips(
    table: pd.DataFrame,
    rules: Optional[ValidityRules] = None
) -> pd.DataFrame:
    """
    Keep trips whose ride length is within bounds and whose required fields are present

    A row survives iff min < ride_length_sec < max and started_at,
    ended_at and member_casual are all present. Survivors keep their
    relative order; no row is modified.

    Args:
        table: Table with derived fields
        rules: Ride length bounds (defaults to 60s / 24h)

    Returns:
        New DataFrame holding the surviving rows with a fresh index
    """
    rules = rules or ValidityRules()
    seconds = table['ride_length_sec']

    keep = (
        (seconds > rules.min_ride_seconds)
        & (seconds < rules.max_ride_seconds)
        & table['started_at'].notna()
        & table['ended_at'].notna()
        & table['member_casual'].notna()
    )

    kept = table.loc[keep].reset_index(drop=True)
    logger.info(f"Validity filter kept {len(kept):,} of {len(table):,} rows")
    return kept


def exclusion_counts(
    table: pd.DataFrame,
    rules: Optional[ValidityRules] = None
) -> Dict[str, int]:
    """
    Count rows failing each rule

    Rules overlap (a row with no end time also has no duration), so the
    per-rule counts can add up to more than ``total_excluded``.
    """
    rules = rules or ValidityRules()
    masks = _rule_masks(table, rules)

    failed = pd.Series(False, index=table.index)
    for mask in masks.values():
        failed |= mask

    counts = {name: int(mask.sum()) for name, mask in masks.items()}
    counts['total_excluded'] = int(failed.sum())
    return counts
