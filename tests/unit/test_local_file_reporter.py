"""
Unit tests for the local file reporter.
"""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from api_error_monitor.errors import StorageError
from api_error_monitor.models.report import ApiErrorReport
from api_error_monitor.services.local_file_reporter import (
    DEFAULT_LOG_DIRECTORY,
    LocalFileReporter,
    report_file_name,
)


BASE_TIME = datetime(2026, 10, 18, 14, 5, 9, tzinfo=timezone.utc)


def make_report(offset_seconds: int = 0, **overrides) -> ApiErrorReport:
    data = {
        "app_name": "shop",
        "endpoint": "/api/products",
        "error_message": "type 'String' is not a subtype of type 'int'",
        "timestamp": BASE_TIME + timedelta(seconds=offset_seconds),
        "key": "stock",
        "expected_type": "int",
        "received_type": "String",
    }
    data.update(overrides)
    return ApiErrorReport(**data)


@pytest.fixture
def reporter(tmp_path) -> LocalFileReporter:
    """Create a reporter writing under a temporary directory."""
    return LocalFileReporter(custom_log_directory=str(tmp_path / "logs"))


class TestPersist:
    """Test saving reports."""

    def test_file_name(self):
        assert report_file_name(make_report()) == "error_2026-10-18T14-05-09.json"

    def test_persist_writes_camel_case_json(self, reporter, tmp_path):
        assert reporter.persist(make_report(request_data={"id": 7}, response_data=[1, 2]))

        path = tmp_path / "logs" / "error_2026-10-18T14-05-09.json"
        data = json.loads(path.read_text())
        assert data["appName"] == "shop"
        assert data["expectedType"] == "int"
        assert data["receivedType"] == "String"
        assert data["requestData"] == {"id": 7}
        assert data["responseData"] == [1, 2]

    def test_persist_creates_directory(self, tmp_path):
        reporter = LocalFileReporter(custom_log_directory=str(tmp_path / "a" / "b"))

        assert reporter.persist(make_report())
        assert (tmp_path / "a" / "b").is_dir()

    def test_same_second_overwrites(self, reporter):
        reporter.persist(make_report(key="first"))
        reporter.persist(make_report(key="second"))

        reports = reporter.list_all()
        assert len(reports) == 1
        assert reports[0].key == "second"

    def test_unwritable_directory_returns_false(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        reporter = LocalFileReporter(custom_log_directory=str(blocker / "logs"))

        assert reporter.persist(make_report()) is False

    def test_initialize_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        reporter = LocalFileReporter(custom_log_directory=str(blocker / "logs"))

        with pytest.raises(StorageError):
            reporter.initialize()

    def test_disabled(self, tmp_path):
        reporter = LocalFileReporter(enabled=False, custom_log_directory=str(tmp_path / "logs"))

        assert reporter.persist(make_report()) is False
        assert reporter.list_all() == []
        assert reporter.clear_all() is False
        assert not (tmp_path / "logs").exists()


class TestListAndClear:
    """Test loading and deleting stored reports."""

    def test_round_trip(self, reporter):
        original = make_report(request_data={"page": 2})
        reporter.persist(original)

        assert reporter.list_all() == [original]

    def test_most_recent_first(self, reporter):
        for offset in (0, 30, 10):
            reporter.persist(make_report(offset_seconds=offset))

        timestamps = [report.timestamp for report in reporter.list_all()]

        assert timestamps == [
            BASE_TIME + timedelta(seconds=30),
            BASE_TIME + timedelta(seconds=10),
            BASE_TIME,
        ]

    def test_corrupt_files_skipped(self, reporter, tmp_path):
        reporter.persist(make_report())
        directory = tmp_path / "logs"
        (directory / "error_broken.json").write_text("{not json")
        (directory / "error_incomplete.json").write_text(json.dumps({"appName": "shop"}))
        (directory / "notes.txt").write_text("ignored")

        reports = reporter.list_all()

        assert len(reports) == 1
        assert reports[0].key == "stock"

    def test_missing_directory_lists_nothing(self, reporter):
        assert reporter.list_all() == []

    def test_clear_all(self, reporter, tmp_path):
        reporter.persist(make_report())
        reporter.persist(make_report(offset_seconds=5))
        (tmp_path / "logs" / "keep.txt").write_text("not a report")

        assert reporter.clear_all() is True
        assert reporter.list_all() == []
        assert (tmp_path / "logs" / "keep.txt").exists()

    def test_clear_failure_returns_false(self, reporter):
        reporter.persist(make_report())

        with patch("pathlib.Path.unlink", side_effect=PermissionError("denied")):
            assert reporter.clear_all() is False


class TestDirectory:
    """Test directory configuration."""

    def test_default_directory(self):
        assert LocalFileReporter().directory_path() == str(DEFAULT_LOG_DIRECTORY)

    def test_custom_directory(self, tmp_path):
        reporter = LocalFileReporter(custom_log_directory=str(tmp_path))

        assert reporter.directory_path() == str(tmp_path)


class TestAsyncWrappers:
    """Test the asyncio wrappers."""

    @pytest.mark.asyncio
    async def test_report_and_get_all(self, reporter):
        assert await reporter.report(make_report())

        reports = await reporter.get_all_reports()
        assert len(reports) == 1

        assert await reporter.clear_reports()
        assert await reporter.get_all_reports() == []
