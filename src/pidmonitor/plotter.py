"""
Generates plots from a finished monitoring run.

This module reads the combined raw log of a run directory, parses it with the
same pidstat column parser the monitor uses, collects the samples into a
Polars DataFrame and renders an interactive Plotly chart with one CPU and one
memory panel, each with a line per process.
"""

import logging
from pathlib import Path
from typing import Optional

# Third-party library imports
import plotly.graph_objects as go
import polars as pl
from plotly.subplots import make_subplots

from .collectors.parsing import parse_combined_lines
from .models.runtime import CPU_METRIC, MEMORY_METRIC
from .monitoring.summary import KB_PER_MB

logger = logging.getLogger(__name__)

PLOT_BASE_FILENAME = "resource_usage"

_SAMPLE_SCHEMA = {
    "Timestamp": pl.Utf8,
    "PID": pl.Int64,
    "Metric": pl.Utf8,
    "Value": pl.Float64,
}


def load_samples_frame(raw_log_file: Path) -> pl.DataFrame:
    """
    Parse a combined raw log into a DataFrame.

    Columns: Timestamp, PID, Metric ("cpu" or "memory"), Value (%CPU or RSS in
    MB) and Sample, the 0-based position of the sample within its
    (PID, Metric) series.
    """
    with open(raw_log_file, "r", encoding="utf-8", errors="replace") as f:
        parsed = parse_combined_lines(f)

    rows = []
    for metric, record in parsed:
        if metric == CPU_METRIC:
            value = record.cpu_percent
        else:
            value = record.resident_memory_kb / KB_PER_MB
        rows.append((record.timestamp, record.process_id, metric, float(value)))

    df = pl.DataFrame(rows, schema=_SAMPLE_SCHEMA, orient="row")
    return df.with_columns(
        pl.int_range(0, pl.len()).over(["PID", "Metric"]).alias("Sample")
    )


def build_figure(df: pl.DataFrame, title: str) -> go.Figure:
    """Two stacked panels (CPU %, RSS MB) with one line per process."""
    fig = make_subplots(
        rows=2,
        cols=1,
        shared_xaxes=True,
        subplot_titles=("CPU Usage (%CPU)", "Memory Usage (RSS, MB)"),
    )
    for row, metric in enumerate((CPU_METRIC, MEMORY_METRIC), start=1):
        metric_df = df.filter(pl.col("Metric") == metric)
        for (pid,), group_df in metric_df.group_by("PID", maintain_order=True):
            group_df = group_df.sort("Sample")
            fig.add_trace(
                go.Scatter(
                    x=group_df["Sample"].to_list(),
                    y=group_df["Value"].to_list(),
                    text=group_df["Timestamp"].to_list(),
                    mode="lines+markers",
                    name=f"PID {pid} ({metric})",
                    legendgroup=str(pid),
                    hovertemplate="%{text}<br>%{y:.2f}<extra>PID " + str(pid) + "</extra>",
                ),
                row=row,
                col=1,
            )

    fig.update_layout(title_text=title, hovermode="x unified")
    fig.update_xaxes(title_text="Sample", row=2, col=1)
    fig.update_yaxes(title_text="%CPU", row=1, col=1)
    fig.update_yaxes(title_text="MB", row=2, col=1)
    return fig


def _save_plotly_figure(fig: go.Figure, base_filename: str, output_dir: Path) -> Optional[Path]:
    """
    Saves a Plotly figure as an interactive HTML file.

    Returns:
        The path of the written file, or None if saving failed.
    """
    plot_filename_html = output_dir / f"{base_filename}.html"
    try:
        fig.write_html(plot_filename_html)
    except OSError as e:
        logger.error(f"Failed to save plot {plot_filename_html} using Plotly: {e}")
        return None
    logger.info(f"Interactive plot saved to: {plot_filename_html}")
    return plot_filename_html


def generate_plots(
    log_dir: Path,
    raw_log_name: str = "raw_output.log",
    output_dir: Optional[Path] = None,
) -> Optional[Path]:
    """
    Plot the raw log of one run directory.

    Returns:
        Path of the HTML file, or None when there is nothing to plot.

    Raises:
        FileNotFoundError: If the raw log does not exist
    """
    raw_log_file = log_dir / raw_log_name
    if not raw_log_file.is_file():
        raise FileNotFoundError(f"Raw log not found: {raw_log_file}")

    df = load_samples_frame(raw_log_file)
    if df.is_empty():
        logger.warning(f"No samples found in {raw_log_file}. Skipping plot.")
        return None

    logger.info(
        f"Loaded {df.height} samples for {df['PID'].n_unique()} process(es) from {raw_log_file}"
    )
    fig = build_figure(df, title=f"Process Resource Usage - {log_dir.name}")
    return _save_plotly_figure(fig, PLOT_BASE_FILENAME, output_dir or log_dir)
