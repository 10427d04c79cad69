# cyclistic/transforms/normalizer.py
"""
Schema normalization: maps raw variant tables onto the canonical trip schema
"""

from typing import Optional

import pandas as pd

from cyclistic.models.trip_record import (
    CANONICAL_COLUMNS,
    COLUMN_MAPPINGS,
    USER_TYPE_VOCABULARIES,
    SchemaVariant,
    user_type_column,
)
from cyclistic.utils.logger import get_logger
from cyclistic.utils.exceptions import SchemaError, VocabularyError

logger = get_logger(__name__)


def normalize_table(
    raw: pd.DataFrame,
    variant: SchemaVariant,
    source: Optional[str] = None
) -> pd.DataFrame:
    """
    Rename and select a raw table into the six canonical columns

    Args:
        raw: Raw trips as read from one source file
        variant: Schema variant declared for that file
        source: Source label used in error context

    Returns:
        New DataFrame with exactly CANONICAL_COLUMNS, in input row order

    Raises:
        SchemaError: If a mapped column is absent
        VocabularyError: If a user category is outside the variant's vocabulary
    """
    mapping = COLUMN_MAPPINGS[variant]
    absent = [column for column in mapping if column not in raw.columns]
    if absent:
        raise SchemaError(
            f"Cannot normalize {source or 'table'}: missing columns {absent} "
            f"for variant {variant.value}",
            error_code="MISSING_COLUMNS",
            context={
                'stage': 'normalize',
                'source': source,
                'variant': variant.value,
                'columns': absent
            }
        )

    table = raw.loc[:, list(mapping)].rename(columns=mapping)
    table['member_casual'] = recode_member_casual(
        raw[user_type_column(variant)], variant, source
    ).to_numpy()

    logger.debug(f"Normalized {len(table):,} {variant.value} rows from {source}")
    return table.loc[:, CANONICAL_COLUMNS].reset_index(drop=True)


def recode_member_casual(
    values: pd.Series,
    variant: SchemaVariant,
    source: Optional[str] = None
) -> pd.Series:
    """
    Recode raw user categories into member/casual

    The lookup is total: every non-missing value must be in the variant's
    vocabulary. Missing values stay missing.

    Raises:
        VocabularyError: Listing every unknown value found
    """
    vocabulary = USER_TYPE_VOCABULARIES[variant]
    present = values.dropna()
    unknown = sorted({str(v) for v in present[~present.isin(list(vocabulary))]})

    if unknown:
        raise VocabularyError(
            f"Unknown user category value(s) {unknown} in {source or 'table'} "
            f"for variant {variant.value}",
            error_code="UNKNOWN_VOCABULARY",
            context={
                'stage': 'normalize',
                'source': source,
                'column': user_type_column(variant),
                'values': unknown
            }
        )

    return values.map(vocabulary)
