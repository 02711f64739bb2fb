"""
Unit tests for the summary report and raw log handling of a run.
"""

import pytest

from pidmonitor.models.config import MonitorConfig
from pidmonitor.models.results import MetricStats, ProcessSummary
from pidmonitor.models.runtime import MonitorRequest
from pidmonitor.orchestration.log_manager import (
    LogManager,
    render_process_section,
    render_report,
)
from pidmonitor.validation import MonitorEnvironmentError

TIMESTAMP = "20261019_101500"


@pytest.fixture
def request_two_pids():
    return MonitorRequest(duration_seconds=3, process_ids=(4242, 99999), timestamp=TIMESTAMP)


@pytest.fixture
def log_manager(temp_dir, request_two_pids):
    config = MonitorConfig(log_root_dir=temp_dir)
    manager = LogManager(config, request_two_pids)
    manager.create_run_directory()
    return manager


@pytest.mark.unit
class TestRunPaths:
    """Test cases for the generated run paths."""

    def test_run_directory_layout(self, temp_dir, request_two_pids):
        manager = LogManager(MonitorConfig(log_root_dir=temp_dir), request_two_pids)
        paths = manager.paths

        assert paths.log_dir == temp_dir / f"monitoring_logs_{TIMESTAMP}"
        assert paths.raw_log_file == paths.log_dir / "raw_output.log"
        assert paths.summary_report_file == paths.log_dir / "summary_report.txt"
        assert paths.cpu_capture_file(4242) == paths.log_dir / "cpu_4242.tmp"
        assert paths.memory_capture_file(4242) == paths.log_dir / "mem_4242.tmp"

    def test_capture_file_order(self, log_manager):
        names = [p.name for p in log_manager.capture_files([20, 10])]
        assert names == ["cpu_20.tmp", "mem_20.tmp", "cpu_10.tmp", "mem_10.tmp"]

    def test_create_run_directory_failure(self, temp_dir, request_two_pids):
        blocker = temp_dir / "not_a_dir"
        blocker.write_text("")
        manager = LogManager(MonitorConfig(log_root_dir=blocker), request_two_pids)

        with pytest.raises(MonitorEnvironmentError):
            manager.create_run_directory()


@pytest.mark.unit
class TestReportRendering:
    """Test cases for the summary report text."""

    def test_process_section_with_data(self):
        summary = ProcessSummary(
            process_id=4242,
            cpu=MetricStats(average=20.0, maximum=30.0, sample_count=3),
            memory=MetricStats(average=2.0, maximum=3.0, sample_count=3),
        )

        assert render_process_section(summary) == [
            "-" * 50,
            ">> Analysis Results (PID: 4242)",
            "-" * 50,
            "Average CPU Usage (%CPU): 20.00%",
            "Maximum CPU Usage (%CPU): 30.00%",
            "Average Memory Usage (RSS): 2.00 MB",
            "Maximum Memory Usage (RSS): 3.00 MB",
            "",
        ]

    def test_process_section_without_data(self):
        lines = render_process_section(ProcessSummary(process_id=7))

        assert "No CPU data found." in lines
        assert "No memory data found." in lines

    def test_report_lists_all_requested_pids(self, request_two_pids):
        text = render_report(request_two_pids, [])

        assert text.startswith("#" * 50 + "\n#      Process Performance Summary Report      #\n")
        assert f"Monitoring Time : {TIMESTAMP}\n" in text
        assert "Total Duration  : 3 seconds\n" in text
        assert "Target PIDs     : 4242 99999\n" in text
        assert ">> Analysis Results" not in text

    def test_sections_follow_summary_order(self, request_two_pids):
        text = render_report(
            request_two_pids, [ProcessSummary(process_id=20), ProcessSummary(process_id=10)]
        )

        assert text.index("(PID: 20)") < text.index("(PID: 10)")


@pytest.mark.unit
class TestRawLogCombination:
    """Test cases for writing the result files."""

    def test_combine_raw_logs_in_order_and_cleanup(self, log_manager):
        paths = log_manager.paths
        paths.cpu_capture_file(20).write_text("cpu 20\n")
        paths.memory_capture_file(20).write_text("mem 20\n")
        paths.cpu_capture_file(10).write_text("cpu 10\n")
        paths.memory_capture_file(10).write_text("mem 10\n")

        log_manager.combine_raw_logs([20, 10])

        assert paths.raw_log_file.read_text() == "cpu 20\nmem 20\ncpu 10\nmem 10\n"
        assert sorted(p.name for p in paths.log_dir.iterdir()) == ["raw_output.log"]

    def test_missing_capture_file_is_skipped(self, log_manager):
        paths = log_manager.paths
        paths.cpu_capture_file(20).write_text("cpu 20\n")

        log_manager.combine_raw_logs([20])

        assert paths.raw_log_file.read_text() == "cpu 20\n"

    def test_no_live_processes_gives_empty_raw_log(self, log_manager):
        log_manager.combine_raw_logs([])

        assert log_manager.paths.raw_log_file.read_text() == ""

    def test_write_summary_report(self, log_manager):
        path = log_manager.write_summary_report([ProcessSummary(process_id=4242)])

        content = path.read_text()
        assert ">> Analysis Results (PID: 4242)" in content
        assert content.endswith("No memory data found.\n\n")
