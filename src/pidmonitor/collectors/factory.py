"""
Sampler factory.

This module provides the SamplerFactory class, which resolves the configured
sampler backend once and then creates one sampler instance per sampling task.
"""

import logging
from typing import Optional

from ..models.runtime import SamplingTask
from ..system.commands import check_pidstat_installed
from ..validation import MonitorEnvironmentError
from .base import AbstractSampler, ConsoleEcho

logger = logging.getLogger(__name__)


def resolve_sampler_name(requested: str) -> str:
    """
    Turn a configured sampler choice into a concrete backend name.

    Args:
        requested: "auto", "pidstat" or "psutil"

    Returns:
        "pidstat" or "psutil"

    Raises:
        MonitorEnvironmentError: If pidstat was requested but is not installed
        ValueError: If the choice is unknown
    """
    if requested == "auto":
        if check_pidstat_installed():
            return "pidstat"
        logger.info("pidstat not found in PATH, falling back to the psutil sampler")
        return "psutil"
    if requested == "pidstat":
        if not check_pidstat_installed():
            raise MonitorEnvironmentError(
                "Sampler is 'pidstat' but pidstat is not installed. "
                "Please install it (e.g., 'sudo apt-get install sysstat') or "
                "choose the 'psutil' sampler."
            )
        return "pidstat"
    if requested == "psutil":
        return "psutil"
    raise ValueError(f"Unknown sampler: {requested}")


class SamplerFactory:
    """
    Creates sampler instances for sampling tasks.
    """

    def __init__(
        self,
        sampler_name: str,
        console: Optional[ConsoleEcho] = None,
        **kwargs,
    ):
        """
        Args:
            sampler_name: Requested backend ("auto", "pidstat" or "psutil")
            console: Shared console echo for all samplers, or None
            **kwargs: Passed to every sampler (e.g. shutdown_timeout)
        """
        self.sampler_name = resolve_sampler_name(sampler_name)
        self.console = console
        self.kwargs = kwargs

        logger.info(f"SamplerFactory initialized: sampler={self.sampler_name}")

    def create_sampler(self, task: SamplingTask) -> AbstractSampler:
        """
        Create the sampler for one task.

        Raises:
            ValueError: If the backend is unknown
        """
        if self.sampler_name == "pidstat":
            from .pidstat_sampler import PidstatSampler

            return PidstatSampler(task, self.console, **self.kwargs)
        elif self.sampler_name == "psutil":
            from .psutil_sampler import PsutilSampler

            return PsutilSampler(task, self.console, **self.kwargs)
        else:
            raise ValueError(f"Unknown sampler: {self.sampler_name}")
