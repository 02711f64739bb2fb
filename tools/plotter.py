"""Standalone Command-Line Tool for Plotting a pidmonitor Run.

This script reads the combined raw log (`raw_output.log`) of a run directory
and writes an interactive `resource_usage.html` chart showing CPU and memory
usage of every monitored process over time.

It is invoked automatically by `pidmonitor` after a run when
`monitor.generate_plots = true`, or can be run manually to re-plot an
existing run.

Usage examples:
  # Plot a run into its own directory
  python tools/plotter.py --log-dir ./monitoring_logs_20250624_103000

  # Write the chart somewhere else
  python tools/plotter.py --log-dir ./monitoring_logs_20250624_103000 --output-dir /tmp/plots
"""

import argparse
import logging
import sys
from pathlib import Path

# Allow running from a source checkout without installing the package.
_SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if _SRC_DIR.is_dir() and str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from pidmonitor.plotter import generate_plots  # noqa: E402

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("PlotterTool")


def main() -> None:
    """Parses arguments and generates the plot for one run directory."""
    parser = argparse.ArgumentParser(
        description="Generate plots from a pidmonitor run directory.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        required=True,
        help="Run directory containing the raw output log.",
    )
    parser.add_argument(
        "--raw-log-name",
        type=str,
        default="raw_output.log",
        help="Name of the raw log inside --log-dir.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory to save plots. Defaults to the specified --log-dir.",
    )
    args = parser.parse_args()

    if not args.log_dir.is_dir():
        logger.error(f"Log directory does not exist: {args.log_dir}")
        sys.exit(1)

    if args.output_dir is not None:
        try:
            args.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create output directory '{args.output_dir}': {e}")
            sys.exit(1)

    try:
        plot_file = generate_plots(args.log_dir, args.raw_log_name, args.output_dir)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)

    if plot_file is None:
        logger.info("Nothing to plot.")


if __name__ == "__main__":
    main()
