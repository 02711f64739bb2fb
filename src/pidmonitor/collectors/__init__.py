"""
Samplers for per-process CPU and memory statistics.

- An abstract sampler defining the capture contract
- Two backends producing the same pidstat text layout:
  - pidstat (sysstat), run as a subprocess
  - psutil, sampled in-process when pidstat is unavailable
- A factory for runtime backend selection
- The parser for captured pidstat output
"""

from .base import AbstractSampler, ConsoleEcho
from .factory import SamplerFactory, resolve_sampler_name
from .parsing import (
    ColumnLayout,
    PidstatOutputParser,
    parse_capture_lines,
    parse_combined_lines,
)
from .pidstat_sampler import PidstatSampler
from .psutil_sampler import PsutilSampler

__all__ = [
    "AbstractSampler",
    "ConsoleEcho",
    "SamplerFactory",
    "resolve_sampler_name",
    "ColumnLayout",
    "PidstatOutputParser",
    "parse_capture_lines",
    "parse_combined_lines",
    "PidstatSampler",
    "PsutilSampler",
]
