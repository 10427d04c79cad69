# scripts/run_cleaning.py
"""
Main execution script for the Cyclistic trip cleaning pipeline

Usage Examples:
    # Clean the default Divvy 2019 Q1 / 2020 Q1 files
    python scripts/run_cleaning.py

    # Explicit sources and output directory
    python scripts/run_cleaning.py --source divvy_2019 raw_data/Divvy_Trips_2019_Q1.csv \
        --source divvy_2020 raw_data/Divvy_Trips_2020_Q1.csv --output-dir processed_data

    # Run with debug logging
    python scripts/run_cleaning.py --log-level DEBUG
"""

import sys
from pathlib import Path

# Add project root to path so the script runs from a source checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from cyclistic.cli import main


if __name__ == '__main__':
    sys.exit(main())
