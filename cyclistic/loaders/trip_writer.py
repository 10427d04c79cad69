# cyclistic/loaders/trip_writer.py
"""
Persistence of the cleaned trip table (CSV output and Parquet snapshot)
"""

from pathlib import Path
from typing import Callable, Optional, Tuple, Union

import pandas as pd

from cyclistic.utils.logger import get_logger
from cyclistic.utils.exceptions import LoaderError

# ISO 8601 with numeric offset, e.g. 2019-01-01T08:00:00+0000
CSV_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class TripWriter:
    """
    Writes the cleaned table to disk

    Both writers go through a temporary file that is renamed into place,
    so a failed write never leaves a truncated output behind.
    """

    def __init__(self, output_dir: Union[str, Path]):
        """
        Initialize writer

        Args:
            output_dir: Directory receiving the output files

        Raises:
            LoaderError: If the directory cannot be created
        """
        self.output_dir = Path(output_dir)
        self.logger = get_logger(__name__)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LoaderError(
                f"Cannot create output directory {self.output_dir}: {str(e)}",
                error_code="OUTPUT_DIR_ERROR",
                context={'stage': 'write', 'path': str(self.output_dir)},
                cause=e
            ) from e

    def write_csv(self, table: pd.DataFrame, filename: str) -> Path:
        """
        Write the table as a delimited text file with a header row

        Timestamps are written as ISO 8601 with their UTC offset.

        Returns:
            Path of the written file
        """
        path = self.output_dir / filename
        self._publish(self._stage(path, self._csv_writer(table)), path)
        self.logger.info(f"Wrote {len(table):,} rows to {path}")
        return path

    def write_snapshot(self, table: pd.DataFrame, filename: str) -> Path:
        """
        Write a Parquet snapshot for fast reload

        Returns:
            Path of the written file
        """
        path = self.output_dir / filename
        self._publish(self._stage(path, self._snapshot_writer(table)), path)
        self.logger.info(f"Wrote snapshot of {len(table):,} rows to {path}")
        return path

    def write_outputs(
        self,
        table: pd.DataFrame,
        csv_filename: str,
        snapshot_filename: Optional[str] = None
    ) -> Tuple[Path, Optional[Path]]:
        """
        Write the CSV and, if named, the snapshot as one unit

        Both files are fully written to temporary paths before either is
        renamed into place, so a failed snapshot leaves no new CSV behind.

        Returns:
            (csv path, snapshot path or None)
        """
        targets = [(self.output_dir / csv_filename, self._csv_writer(table))]
        if snapshot_filename:
            targets.append((self.output_dir / snapshot_filename, self._snapshot_writer(table)))

        staged = []
        try:
            for path, writer in targets:
                staged.append((self._stage(path, writer), path))
        except LoaderError:
            for temp_path, _ in staged:
                temp_path.unlink(missing_ok=True)
            raise

        for temp_path, path in staged:
            self._publish(temp_path, path)
            self.logger.info(f"Wrote {len(table):,} rows to {path}")

        csv_path = staged[0][1]
        snapshot_path = staged[1][1] if len(staged) > 1 else None
        return csv_path, snapshot_path

    def load_snapshot(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Reload a snapshot written by write_snapshot

        Raises:
            LoaderError: If the file is missing or not a readable snapshot
        """
        path = Path(path)
        try:
            return pd.read_parquet(path, engine="pyarrow")
        except Exception as e:
            raise LoaderError(
                f"Failed to load snapshot {path}: {str(e)}",
                error_code="SNAPSHOT_READ_ERROR",
                context={'stage': 'write', 'path': str(path)},
                cause=e
            ) from e

    @staticmethod
    def _csv_writer(table: pd.DataFrame) -> Callable[[Path], None]:
        return lambda temp_path: table.to_csv(temp_path, index=False, date_format=CSV_TIMESTAMP_FORMAT)

    @staticmethod
    def _snapshot_writer(table: pd.DataFrame) -> Callable[[Path], None]:
        return lambda temp_path: table.to_parquet(temp_path, index=False, engine="pyarrow")

    def _stage(self, path: Path, writer: Callable[[Path], None]) -> Path:
        """Write to a temporary sibling of ``path`` and return it"""
        temp_path = path.with_suffix(path.suffix + '.tmp')
        try:
            writer(temp_path)
        except Exception as e:
            temp_path.unlink(missing_ok=True)
            raise self._write_error(path, e) from e
        return temp_path

    def _publish(self, temp_path: Path, path: Path) -> None:
        try:
            temp_path.replace(path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise self._write_error(path, e) from e

    @staticmethod
    def _write_error(path: Path, error: Exception) -> LoaderError:
        return LoaderError(
            f"Failed to write {path}: {str(error)}",
            error_code="WRITE_ERROR",
            context={'stage': 'write', 'path': str(path)},
            cause=error
        )
