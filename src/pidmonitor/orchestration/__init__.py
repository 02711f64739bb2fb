"""
Run output management.

This module provides the LogManager, which owns the run directory and every
file written into it, and the summary report renderers.
"""

from .log_manager import (
    LogManager,
    render_process_section,
    render_report,
    render_report_header,
)

__all__ = [
    "LogManager",
    "render_process_section",
    "render_report",
    "render_report_header",
]
