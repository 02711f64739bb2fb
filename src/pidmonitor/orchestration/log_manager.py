"""
Log management for a monitoring run.

This module handles every file operation of a run: creating the run
directory, writing the summary report, concatenating the transient capture
files into the combined raw log and removing them afterwards.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Sequence

from ..models.config import MonitorConfig
from ..models.results import ProcessSummary
from ..models.runtime import METRICS, MonitorRequest, RunPaths
from ..validation import ErrorSeverity, MonitorEnvironmentError, handle_file_error

logger = logging.getLogger(__name__)

BANNER_RULE = "#" * 50
SECTION_RULE = "-" * 50


def render_report_header(request: MonitorRequest) -> List[str]:
    """Header block of the summary report."""
    return [
        BANNER_RULE,
        "#      Process Performance Summary Report      #",
        BANNER_RULE,
        "",
        f"Monitoring Time : {request.timestamp}",
        f"Total Duration  : {request.duration_seconds} seconds",
        f"Target PIDs     : {' '.join(str(pid) for pid in request.process_ids)}",
        "",
    ]


def render_process_section(summary: ProcessSummary) -> List[str]:
    """Report section for one process, with the "no data" fallbacks."""
    lines = [
        SECTION_RULE,
        f">> Analysis Results (PID: {summary.process_id})",
        SECTION_RULE,
    ]
    if summary.cpu is not None:
        lines.append(f"Average CPU Usage (%CPU): {summary.cpu.average:.2f}%")
        lines.append(f"Maximum CPU Usage (%CPU): {summary.cpu.maximum:.2f}%")
    else:
        lines.append("No CPU data found.")
    if summary.memory is not None:
        lines.append(f"Average Memory Usage (RSS): {summary.memory.average:.2f} MB")
        lines.append(f"Maximum Memory Usage (RSS): {summary.memory.maximum:.2f} MB")
    else:
        lines.append("No memory data found.")
    lines.append("")
    return lines


def render_report(request: MonitorRequest, summaries: Sequence[ProcessSummary]) -> str:
    """Full text of the summary report."""
    lines = render_report_header(request)
    for summary in summaries:
        lines.extend(render_process_section(summary))
    return "\n".join(lines) + "\n"


class LogManager:
    """
    Handles all file operations of one monitoring run.
    """

    def __init__(self, config: MonitorConfig, request: MonitorRequest):
        self.config = config
        self.request = request
        log_dir = config.log_root_dir / f"{config.log_dir_prefix}{request.timestamp}"
        self.paths = RunPaths(
            log_dir=log_dir,
            raw_log_file=log_dir / config.raw_log_name,
            summary_report_file=log_dir / config.summary_report_name,
        )

    def create_run_directory(self) -> RunPaths:
        """
        Create the run directory.

        Raises:
            MonitorEnvironmentError: If the directory cannot be created
        """
        try:
            self.paths.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MonitorEnvironmentError(
                f"Could not create log directory '{self.paths.log_dir}': {e}",
                path=str(self.paths.log_dir),
            ) from e
        logger.info(f"Results will be saved in the '{self.paths.log_dir}' directory.")
        return self.paths

    def capture_files(self, process_ids: Sequence[int]) -> List[Path]:
        """Transient capture files in concatenation order: per process, CPU then memory."""
        return [
            self.paths.capture_file(pid, metric)
            for pid in process_ids
            for metric in METRICS
        ]

    def write_summary_report(self, summaries: Sequence[ProcessSummary]) -> Path:
        """Write the summary report and return its path."""
        with open(self.paths.summary_report_file, "w", encoding="utf-8") as f:
            f.write(render_report(self.request, summaries))
        logger.info(f"Summary report written to {self.paths.summary_report_file}")
        return self.paths.summary_report_file

    def combine_raw_logs(self, process_ids: Sequence[int]) -> Path:
        """
        Concatenate the capture files of `process_ids` into the raw log, then
        delete them. Files are only deleted once the raw log is complete.
        """
        sources = self.capture_files(process_ids)
        with open(self.paths.raw_log_file, "wb") as combined:
            for source in sources:
                if not source.exists():
                    logger.warning(f"Capture file missing, not combined: {source}")
                    continue
                with open(source, "rb") as f:
                    shutil.copyfileobj(f, combined)
        logger.info(f"Combined raw output written to {self.paths.raw_log_file}")

        self.remove_capture_files(sources)
        return self.paths.raw_log_file

    def remove_capture_files(self, sources: Sequence[Path]) -> None:
        for source in sources:
            try:
                source.unlink(missing_ok=True)
            except OSError as e:
                handle_file_error(
                    error=e,
                    context=f"removing capture file {source}",
                    severity=ErrorSeverity.WARNING,
                    reraise=False,
                    logger=logger,
                )
