# cyclistic/transforms/merger.py
"""
Concatenation of canonical trip tables
"""

from typing import Sequence

import pandas as pd

from cyclistic.models.trip_record import CANONICAL_COLUMNS
from cyclistic.utils.logger import get_logger
from cyclistic.utils.exceptions import SchemaError

logger = get_logger(__name__)


def merge_tables(tables: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """
    Stack canonical tables in the order given

    Every row is kept, duplicates included; nothing is sorted.

    Args:
        tables: Canonical tables, one per source

    Returns:
        Single DataFrame with CANONICAL_COLUMNS and a fresh index

    Raises:
        SchemaError: If no table is given or a table's columns differ
            from the canonical set
    """
    if not tables:
        raise SchemaError(
            "No tables to merge",
            error_code="NO_TABLES",
            context={'stage': 'merge'}
        )

    expected = set(CANONICAL_COLUMNS)
    for position, table in enumerate(tables):
        columns = list(table.columns)
        if set(columns) != expected or len(columns) != len(expected):
            raise SchemaError(
                f"Table {position} does not expose exactly the canonical columns",
                error_code="NON_CANONICAL_TABLE",
                context={
                    'stage': 'merge',
                    'table': position,
                    'missing': sorted(expected - set(columns)),
                    'unexpected': sorted(set(columns) - expected)
                }
            )

    merged = pd.concat(
        [table.loc[:, CANONICAL_COLUMNS] for table in tables],
        ignore_index=True
    )

    duplicates = count_duplicate_ride_ids(merged)
    if duplicates:
        logger.warning(f"{duplicates:,} ride ids appear more than once; keeping all rows")

    logger.info(f"Merged {len(tables)} tables into {len(merged):,} rows")
    return merged


def count_duplicate_ride_ids(table: pd.DataFrame) -> int:
    """Number of distinct non-missing ride ids that occur more than once"""
    counts = table['ride_id'].dropna().value_counts()
    return int((counts > 1).sum())
