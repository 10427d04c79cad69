# cyclistic/reporting/summary.py
"""
Diagnostic summary of the cleaned trip table
"""

import json
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional

import pandas as pd

from cyclistic.models.trip_record import MemberType


@dataclass
class TripSummary:
    """Row counts and ride length distribution of a trip table"""
    total_rows: int
    member_casual_counts: Dict[str, int]
    ride_length_min_stats: Dict[str, Optional[float]]
    negative_ride_count: int
    columns: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_summary(table: pd.DataFrame) -> TripSummary:
    """
    Summarize a cleaned trip table

    Args:
        table: Table carrying at least member_casual, ride_length_sec
            and ride_length_min

    Returns:
        TripSummary; statistics are None when there are no rides
    """
    counts = table['member_casual'].value_counts()
    member_casual_counts = {
        member_type.value: int(counts.get(member_type.value, 0))
        for member_type in MemberType
    }

    minutes = table['ride_length_min'].dropna()
    if minutes.empty:
        stats = {key: None for key in ('min', 'q1', 'median', 'mean', 'q3', 'max')}
        stats['count'] = 0
    else:
        stats = {
            'count': int(minutes.count()),
            'min': float(minutes.min()),
            'q1': float(minutes.quantile(0.25)),
            'median': float(minutes.median()),
            'mean': float(minutes.mean()),
            'q3': float(minutes.quantile(0.75)),
            'max': float(minutes.max()),
        }

    return TripSummary(
        total_rows=len(table),
        member_casual_counts=member_casual_counts,
        ride_length_min_stats=stats,
        negative_ride_count=int((table['ride_length_sec'] < 0).sum()),
        columns={column: str(dtype) for column, dtype in table.dtypes.items()}
    )


def format_summary(summary: TripSummary, output_format: str = 'text') -> str:
    """
    Render a summary for standard output

    Args:
        summary: Summary to render
        output_format: 'text' or 'json'
    """
    if output_format == 'json':
        return json.dumps(summary.to_dict(), indent=2, default=str)

    lines = ["=== Trip Summary ==="]
    lines.append(f"Rows: {summary.total_rows:,}")
    lines.append("")
    lines.append("Rides by user type:")
    for category, count in summary.member_casual_counts.items():
        lines.append(f"  {category:<8}{count:>12,}")

    lines.append("")
    lines.append("Ride length (minutes):")
    stats = summary.ride_length_min_stats
    for key, label in (('min', 'Min'), ('q1', '1st Qu.'), ('median', 'Median'),
                       ('mean', 'Mean'), ('q3', '3rd Qu.'), ('max', 'Max')):
        value = stats.get(key)
        rendered = f"{value:.2f}" if value is not None else "n/a"
        lines.append(f"  {label:<8}{rendered:>12}")

    lines.append("")
    lines.append(f"Rides with negative length: {summary.negative_ride_count}")
    return "\n".join(lines)
