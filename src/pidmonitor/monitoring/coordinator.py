"""
Process resource monitor.

The ProcessMonitor runs one monitoring request end to end:

1. validate  - split the requested PIDs into live and skipped ones (once)
2. sample    - run one sampling task per (live PID, metric), all in parallel,
               and wait for every task at a single join barrier
3. summarize - aggregate each process's capture files
4. finalize  - write the summary report, combine the capture files into the
               raw log and delete them
"""

import logging
from concurrent.futures import Future
from typing import Dict, List, Optional, Sequence, Tuple

from ..collectors.base import AbstractSampler, ConsoleEcho
from ..collectors.factory import SamplerFactory
from ..executor.thread_pool import ManagedThreadPoolExecutor, ThreadPoolConfig
from ..models.config import MonitorConfig
from ..models.results import MonitoringResults, ProcessSummary
from ..models.runtime import METRICS, MonitorRequest, SamplingTask
from ..orchestration.log_manager import LogManager
from ..system.processes import validate_targets
from ..validation import ErrorSeverity, handle_error
from .summary import summarize_files

logger = logging.getLogger(__name__)


class ProcessMonitor:
    """
    Samples CPU and memory of a set of processes for a fixed duration.
    """

    def __init__(
        self,
        config: MonitorConfig,
        request: MonitorRequest,
        sampler_factory: Optional[SamplerFactory] = None,
        console: Optional[ConsoleEcho] = None,
    ):
        """
        Args:
            config: Monitor configuration
            request: The immutable monitoring request
            sampler_factory: Factory for sampler backends; built from `config` if None
            console: Console echo shared by the samplers; built from `config` if None

        Raises:
            MonitorEnvironmentError: If the configured sampler is unavailable
        """
        self.config = config
        self.request = request
        self.console = console if console is not None else ConsoleEcho(enabled=config.echo_samples)
        self.sampler_factory = sampler_factory or SamplerFactory(
            config.sampler,
            console=self.console,
            shutdown_timeout=config.shutdown_timeout,
        )
        self.log_manager = LogManager(config, request)
        self._active_samplers: List[AbstractSampler] = []

    @property
    def paths(self):
        return self.log_manager.paths

    def validate(self) -> Tuple[List[int], List[int]]:
        """Return (live_ids, skipped_ids) for the requested PIDs."""
        return validate_targets(self.request.process_ids)

    def build_tasks(self, live_ids: Sequence[int]) -> List[SamplingTask]:
        """One task per (process, metric), CPU before memory for each process."""
        return [
            SamplingTask(
                process_id=pid,
                metric=metric,
                duration_seconds=self.request.duration_seconds,
                interval_seconds=self.config.interval_seconds,
                output_file=self.paths.capture_file(pid, metric),
            )
            for pid in live_ids
            for metric in METRICS
        ]

    def sample(self, live_ids: Sequence[int]) -> Dict[SamplingTask, Optional[int]]:
        """
        Run every sampling task in parallel and wait for all of them.

        A task that fails is logged and treated like a sampler that ended
        early; its siblings are not affected.

        Returns:
            Lines captured per task, None for a task that failed.
        """
        tasks = self.build_tasks(live_ids)
        if not tasks:
            return {}

        samplers = [self.sampler_factory.create_sampler(task) for task in tasks]
        self._active_samplers = samplers
        logger.info(
            f"Starting monitoring: PIDs [{' '.join(str(pid) for pid in live_ids)}] / "
            f"Duration: {self.request.duration_seconds} seconds"
        )

        futures: Dict[Future, SamplingTask] = {}
        pool_config = ThreadPoolConfig(max_workers=len(tasks))
        try:
            with ManagedThreadPoolExecutor(pool_config) as pool:
                for sampler in samplers:
                    futures[pool.submit(sampler.run)] = sampler.task
                try:
                    pool.wait_all(list(futures))
                except KeyboardInterrupt:
                    # Samplers must be stopped before the pool joins its workers.
                    logger.warning("Interrupted, stopping samplers...")
                    self.stop()
                    raise
        finally:
            self._active_samplers = []

        pool_stats = pool.get_stats()
        logger.info(
            f"Sampling finished: {pool_stats['tasks_completed']} of "
            f"{pool_stats['tasks_submitted']} tasks completed, "
            f"{pool_stats['tasks_failed']} failed"
        )

        results: Dict[SamplingTask, Optional[int]] = {}
        for future, task in futures.items():
            error = future.exception()
            if error is not None:
                handle_error(
                    error=error,
                    context=f"sampling {task.metric} of PID {task.process_id}",
                    severity=ErrorSeverity.ERROR,
                    reraise=False,
                    logger=logger,
                )
                results[task] = None
            else:
                results[task] = future.result()
        return results

    def stop(self) -> None:
        """Stop all samplers that are still running."""
        for sampler in list(self._active_samplers):
            sampler.stop()

    def summarize(self, live_ids: Sequence[int]) -> List[ProcessSummary]:
        """Aggregate the capture files of every live process, in request order."""
        return [
            summarize_files(
                self.paths.cpu_capture_file(pid),
                self.paths.memory_capture_file(pid),
                pid,
            )
            for pid in live_ids
        ]

    def finalize(self, summaries: Sequence[ProcessSummary], live_ids: Sequence[int]) -> None:
        """Write the summary report and the combined raw log."""
        logger.info("Monitoring finished. Generating summary report...")
        self.log_manager.write_summary_report(summaries)
        self.log_manager.combine_raw_logs(live_ids)

    def run(self) -> MonitoringResults:
        """
        Execute the whole request.

        Raises:
            MonitorEnvironmentError: If the run directory cannot be created
        """
        self.log_manager.create_run_directory()

        live_ids, skipped_ids = self.validate()
        if not live_ids:
            logger.warning("None of the requested PIDs is running; the summary will be empty.")

        self.sample(live_ids)
        summaries = self.summarize(live_ids)
        self.finalize(summaries, live_ids)

        logger.info("Done!")
        logger.info(f"Summary Report:    {self.paths.summary_report_file}")
        logger.info(f"Full Raw Output Log: {self.paths.raw_log_file}")

        return MonitoringResults(
            request=self.request,
            paths=self.paths,
            live_ids=list(live_ids),
            skipped_ids=list(skipped_ids),
            summaries=summaries,
        )
