"""
Parser for pidstat text output.

This is the only module that knows the column layout of `pidstat -u` and
`pidstat -r` output. Both sampler backends write that layout, and every
consumer of captured sampler output (the summary aggregation and the plotter
tool) goes through the parser defined here.

Column positions are taken from the most recent header line of the stream:

    10:00:01      UID       PID    %usr %system  %guest   %wait    %CPU   CPU  Command
    10:00:01      UID       PID  minflt/s  majflt/s     VSZ     RSS   %MEM  Command

so output in a 12-hour locale (an extra AM/PM column) or from sysstat
versions without the `%wait` column is handled. Until a header has been seen
the `LC_ALL=C` layout of current sysstat releases applies.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..models.results import SampleRecord
from ..models.runtime import CPU_METRIC, MEMORY_METRIC

logger = logging.getLogger(__name__)

PID_COLUMN = "PID"
# Header token that names the value column for each metric.
VALUE_COLUMNS: Dict[str, str] = {
    CPU_METRIC: "%CPU",
    MEMORY_METRIC: "RSS",
}
_MERIDIEM_TOKENS = ("AM", "PM")


@dataclass(frozen=True)
class ColumnLayout:
    """0-based token positions of the fields the monitor reads."""

    pid_index: int
    value_index: int


DEFAULT_LAYOUTS: Dict[str, ColumnLayout] = {
    CPU_METRIC: ColumnLayout(pid_index=2, value_index=7),
    MEMORY_METRIC: ColumnLayout(pid_index=2, value_index=6),
}


def layout_from_header(tokens: List[str]) -> Optional[Tuple[str, ColumnLayout]]:
    """Recognize a pidstat header line.

    Args:
        tokens: The whitespace-separated tokens of one line.

    Returns:
        (metric, layout) if the tokens form a CPU or memory header, else None.
    """
    if PID_COLUMN not in tokens:
        return None
    pid_index = tokens.index(PID_COLUMN)
    for metric, column in VALUE_COLUMNS.items():
        if column in tokens:
            return metric, ColumnLayout(pid_index=pid_index, value_index=tokens.index(column))
    return None


class PidstatOutputParser:
    """
    Incremental parser for one stream of pidstat output.

    Feed lines in order; each data line yields a SampleRecord attributed to the
    metric of the most recent header. Banner lines, blank lines, headers and
    `Average:` lines yield nothing.
    """

    def __init__(self, metric: Optional[str] = None):
        """
        Args:
            metric: Metric assumed for data lines that precede any header.
                    None means such lines are ignored.
        """
        if metric is not None and metric not in VALUE_COLUMNS:
            raise ValueError(f"Unknown metric: {metric}")
        self.metric = metric
        self.layout: Optional[ColumnLayout] = DEFAULT_LAYOUTS.get(metric) if metric else None

    def feed(self, line: str) -> Optional[Tuple[str, SampleRecord]]:
        """Parse one line.

        Returns:
            (metric, record) for a data line, otherwise None.
        """
        tokens = line.split()
        if not tokens:
            return None

        header = layout_from_header(tokens)
        if header is not None:
            self.metric, self.layout = header
            return None

        # Data lines start with the time of day; banners and "Average:" do not.
        if not tokens[0][0].isdigit() or self.layout is None:
            return None

        layout = self.layout
        if len(tokens) <= max(layout.pid_index, layout.value_index):
            logger.debug(f"Skipping short pidstat line: '{line.rstrip()}'")
            return None

        pid_token = tokens[layout.pid_index]
        if not pid_token.isdigit():
            return None

        timestamp = tokens[0]
        if len(tokens) > 1 and tokens[1] in _MERIDIEM_TOKENS:
            timestamp = f"{tokens[0]} {tokens[1]}"

        value_token = tokens[layout.value_index]
        try:
            if self.metric == CPU_METRIC:
                record = SampleRecord(
                    timestamp=timestamp,
                    process_id=int(pid_token),
                    cpu_percent=float(value_token),
                )
            else:
                record = SampleRecord(
                    timestamp=timestamp,
                    process_id=int(pid_token),
                    resident_memory_kb=int(value_token),
                )
        except ValueError:
            logger.debug(f"Skipping pidstat line with non-numeric value: '{line.rstrip()}'")
            return None

        return self.metric, record


def parse_capture_lines(
    lines: Iterable[str], metric: str, process_id: Optional[int] = None
) -> List[SampleRecord]:
    """Parse the captured output of a single sampler run.

    Args:
        lines: Output lines of one `pidstat -u` or `pidstat -r` run.
        metric: The metric the run was sampling.
        process_id: If given, keep only records for this process.

    Returns:
        Records of the requested metric, in stream order.
    """
    parser = PidstatOutputParser(metric)
    records: List[SampleRecord] = []
    for line in lines:
        parsed = parser.feed(line)
        if parsed is None:
            continue
        parsed_metric, record = parsed
        if parsed_metric != metric:
            continue
        if process_id is not None and record.process_id != process_id:
            continue
        records.append(record)
    return records


def parse_combined_lines(lines: Iterable[str]) -> List[Tuple[str, SampleRecord]]:
    """Parse a combined raw log holding several concatenated sampler runs.

    Returns:
        (metric, record) pairs in log order.
    """
    parser = PidstatOutputParser()
    results: List[Tuple[str, SampleRecord]] = []
    for line in lines:
        parsed = parser.feed(line)
        if parsed is not None:
            results.append(parsed)
    return results
