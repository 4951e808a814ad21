"""
Local file reporter.

Stores each error report as one JSON file so reports survive an unreachable
webhook and can be inspected later. Files are named after the report
timestamp truncated to seconds: two reports captured within the same second
share a file name and the later one overwrites the earlier.
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from api_error_monitor.errors import StorageError
from api_error_monitor.models.report import ApiErrorReport
from api_error_monitor.utils.logging import get_logger

logger = get_logger(__name__)


DEFAULT_LOG_DIRECTORY = Path.home() / ".api_error_monitor" / "logs"
FILE_PREFIX = "error_"
FILE_SUFFIX = ".json"


def report_file_name(report: ApiErrorReport) -> str:
    """File name for a report: ``error_2026-10-18T14-05-09.json``."""
    return f"{FILE_PREFIX}{report.timestamp.strftime('%Y-%m-%dT%H-%M-%S')}{FILE_SUFFIX}"


class LocalFileReporter:
    """Saves error reports to a local directory."""

    def __init__(self, enabled: bool = True, custom_log_directory: Optional[str] = None):
        """
        Initialize the local file reporter.

        Args:
            enabled: When False, every operation is a no-op returning a failure value
            custom_log_directory: Directory for report files (default: ~/.api_error_monitor/logs)
        """
        self.enabled = enabled
        self.custom_log_directory = custom_log_directory
        if custom_log_directory:
            self._log_directory = Path(custom_log_directory).expanduser()
        else:
            self._log_directory = DEFAULT_LOG_DIRECTORY

    def directory_path(self) -> str:
        """Get the log directory path."""
        return str(self._log_directory)

    def initialize(self) -> None:
        """
        Create the log directory if needed.

        Raises:
            StorageError: If the directory cannot be created
        """
        try:
            self._log_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create log directory {self._log_directory}: {e}") from e

    def persist(self, report: ApiErrorReport) -> bool:
        """
        Save a report as a JSON file.

        Args:
            report: Report to save

        Returns:
            True if the file was written
        """
        if not self.enabled:
            return False

        try:
            self.initialize()
            path = self._log_directory / report_file_name(report)
            path.write_text(json.dumps(report.to_json()), encoding="utf-8")
            logger.debug(f"Report saved to {path}")
            return True
        except Exception as e:
            logger.warning(f"Failed to save report locally: {e}")
            return False

    def _report_files(self) -> List[Path]:
        if not self._log_directory.is_dir():
            return []
        return [
            path for path in self._log_directory.iterdir()
            if path.is_file() and path.suffix == FILE_SUFFIX
        ]

    def list_all(self) -> List[ApiErrorReport]:
        """
        Load every stored report, most recent first.

        Unreadable or invalid files are skipped.

        Returns:
            List of reports
        """
        if not self.enabled:
            return []

        try:
            files = self._report_files()
        except OSError as e:
            logger.warning(f"Failed to list local reports: {e}")
            return []

        loaded = []
        for path in files:
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                loaded.append((ApiErrorReport.from_json(data), path.name))
            except (OSError, ValueError, TypeError, ValidationError) as e:
                logger.debug(f"Skipping unreadable report file {path.name}: {e}")
                continue

        loaded.sort(key=lambda item: (item[0].timestamp, item[1]), reverse=True)
        return [report for report, _ in loaded]

    def clear_all(self) -> bool:
        """
        Delete every stored report.

        Returns:
            True if all report files were removed
        """
        if not self.enabled:
            return False

        try:
            for path in self._report_files():
                path.unlink()
            return True
        except OSError as e:
            logger.warning(f"Failed to clear local reports: {e}")
            return False

    # Async wrappers; file I/O runs in a worker thread

    async def report(self, report: ApiErrorReport) -> bool:
        return await asyncio.to_thread(self.persist, report)

    async def get_all_reports(self) -> List[ApiErrorReport]:
        return await asyncio.to_thread(self.list_all)

    async def clear_reports(self) -> bool:
        return await asyncio.to_thread(self.clear_all)
