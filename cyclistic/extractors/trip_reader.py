# cyclistic/extractors/trip_reader.py
"""
Source file reading for the Cyclistic trip cleaning pipeline
"""

import hashlib
from pathlib import Path
from typing import Dict, Any

import pandas as pd

from cyclistic.config.settings import SourceConfig
from cyclistic.models.trip_record import EXPECTED_COLUMNS, missing_columns
from cyclistic.utils.logger import get_logger
from cyclistic.utils.exceptions import ExtractionError, SchemaError


class TripFileReader:
    """
    Reads raw trip logs from delimited text files

    Responsible for:
    - Loading each source in full, every column as text
    - Checking the header against the declared schema variant
    - Reporting file lineage (size, checksum)

    Nothing is inferred from file contents: the variant comes from
    configuration.
    """

    def __init__(self, delimiter: str = ","):
        """
        Initialize the reader

        Args:
            delimiter: Field delimiter of the source files
        """
        self.delimiter = delimiter
        self.logger = get_logger(__name__)

    def read(self, source: SourceConfig) -> pd.DataFrame:
        """
        Read one source file and check its header

        Args:
            source: Source path and declared schema variant

        Returns:
            Raw DataFrame with string columns; empty cells are missing

        Raises:
            ExtractionError: If the file cannot be found, read or parsed
            SchemaError: If an expected column is absent
        """
        path = source.path

        if not path.exists():
            raise ExtractionError(
                f"Source file does not exist: {path}",
                error_code="FILE_NOT_FOUND",
                context={'stage': 'extract', 'source': str(path)}
            )

        self.logger.info(f"Reading {source.variant.value} trips from {path}")

        try:
            table = pd.read_csv(path, sep=self.delimiter, dtype=str)
        except pd.errors.EmptyDataError as e:
            raise ExtractionError(
                f"Source file is empty: {path}",
                error_code="EMPTY_FILE",
                context={'stage': 'extract', 'source': str(path)},
                cause=e
            ) from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ExtractionError(
                f"Failed to parse {path}: {str(e)}",
                error_code="PARSE_ERROR",
                context={'stage': 'extract', 'source': str(path)},
                cause=e
            ) from e
        except OSError as e:
            raise ExtractionError(
                f"Failed to read {path}: {str(e)}",
                error_code="READ_ERROR",
                context={'stage': 'extract', 'source': str(path)},
                cause=e
            ) from e

        self.validate_columns(table, source)

        extra = [c for c in table.columns if c not in EXPECTED_COLUMNS[source.variant]]
        if extra:
            self.logger.debug(f"Ignoring extra columns in {path.name}: {extra}")

        self.logger.info(f"Read {len(table):,} rows from {path.name}")
        return table

    def validate_columns(self, table: pd.DataFrame, source: SourceConfig) -> None:
        """
        Check that a raw table carries every column of its variant

        Raises:
            SchemaError: Listing the absent columns
        """
        absent = missing_columns(table.columns, source.variant)
        if absent:
            raise SchemaError(
                f"{source.path} is missing columns {absent} "
                f"expected for variant {source.variant.value}",
                error_code="MISSING_COLUMNS",
                context={
                    'stage': 'extract',
                    'source': str(source.path),
                    'variant': source.variant.value,
                    'columns': absent
                }
            )

    def get_file_metadata(self, file_path: Path) -> Dict[str, Any]:
        """
        Get lineage metadata for a source file

        Args:
            file_path: Path to the file

        Returns:
            Dictionary with name, path, size and MD5 hash
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise ExtractionError(
                f"File does not exist: {file_path}",
                error_code="FILE_NOT_FOUND",
                context={'stage': 'extract', 'source': str(file_path)}
            )

        stat = file_path.stat()

        return {
            'filename': file_path.name,
            'file_path': str(file_path),
            'size_bytes': stat.st_size,
            'size_mb': stat.st_size / (1024 * 1024),
            'md5_hash': self._calculate_md5(file_path)
        }

    def _calculate_md5(self, file_path: Path) -> str:
        hash_md5 = hashlib.md5()

        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                hash_md5.update(chunk)

        return hash_md5.hexdigest()
