"""
Unit tests for the sampler backends and the sampler factory.
"""

import io
import subprocess
from unittest.mock import Mock, patch

import pytest

from pidmonitor.collectors.base import ConsoleEcho
from pidmonitor.collectors.factory import SamplerFactory, resolve_sampler_name
from pidmonitor.collectors.parsing import parse_capture_lines
from pidmonitor.collectors.pidstat_sampler import PidstatSampler
from pidmonitor.collectors.psutil_sampler import PsutilSampler
from pidmonitor.models.runtime import CPU_METRIC, MEMORY_METRIC, SamplingTask
from pidmonitor.validation import MonitorEnvironmentError


def make_task(temp_dir, metric=CPU_METRIC, pid=4242, duration=3):
    return SamplingTask(
        process_id=pid,
        metric=metric,
        duration_seconds=duration,
        interval_seconds=1,
        output_file=temp_dir / f"{metric}_{pid}.tmp",
    )


def make_popen(output: str, returncode: int = 0) -> Mock:
    proc = Mock()
    proc.pid = 777
    proc.stdout = io.StringIO(output)
    proc.wait.return_value = returncode
    proc.poll.return_value = returncode
    return proc


@pytest.mark.unit
class TestConsoleEcho:
    """Test cases for ConsoleEcho."""

    def test_write_line_appends_newline(self):
        stream = io.StringIO()
        ConsoleEcho(stream=stream).write_line("10:00:01 1000 4242")

        assert stream.getvalue() == "10:00:01 1000 4242\n"

    def test_disabled_echo_writes_nothing(self):
        stream = io.StringIO()
        ConsoleEcho(stream=stream, enabled=False).write_line("line")

        assert stream.getvalue() == ""


@pytest.mark.unit
class TestPidstatSampler:
    """Test cases for PidstatSampler."""

    def test_build_command_cpu(self, temp_dir):
        sampler = PidstatSampler(make_task(temp_dir, CPU_METRIC, duration=60))
        assert sampler.build_command() == ["pidstat", "-p", "4242", "-u", "1", "60"]

    def test_build_command_memory(self, temp_dir):
        sampler = PidstatSampler(make_task(temp_dir, MEMORY_METRIC, duration=5))
        assert sampler.build_command() == ["pidstat", "-p", "4242", "-r", "1", "5"]

    def test_unknown_metric_rejected(self, temp_dir):
        with pytest.raises(ValueError):
            PidstatSampler(make_task(temp_dir, "disk"))

    @patch("pidmonitor.collectors.pidstat_sampler.subprocess.Popen")
    def test_start_uses_c_locale(self, mock_popen, temp_dir, pidstat_cpu_output):
        mock_popen.return_value = make_popen(pidstat_cpu_output)
        sampler = PidstatSampler(make_task(temp_dir))

        sampler.start()

        kwargs = mock_popen.call_args.kwargs
        assert kwargs["env"]["LC_ALL"] == "C"
        assert kwargs["stdout"] == subprocess.PIPE
        assert kwargs["text"] is True

    @patch("pidmonitor.collectors.pidstat_sampler.subprocess.Popen")
    def test_start_failure_raises_runtime_error(self, mock_popen, temp_dir):
        mock_popen.side_effect = OSError("no such file")
        sampler = PidstatSampler(make_task(temp_dir))

        with pytest.raises(RuntimeError):
            sampler.start()

    @patch("pidmonitor.collectors.pidstat_sampler.subprocess.Popen")
    def test_run_writes_capture_and_echoes(self, mock_popen, temp_dir, pidstat_cpu_output):
        mock_popen.return_value = make_popen(pidstat_cpu_output)
        stream = io.StringIO()
        task = make_task(temp_dir)
        sampler = PidstatSampler(task, ConsoleEcho(stream=stream))

        lines_written = sampler.run()

        captured = task.output_file.read_text()
        assert captured == pidstat_cpu_output
        assert stream.getvalue() == pidstat_cpu_output
        assert lines_written == len(pidstat_cpu_output.splitlines())
        assert sampler.pidstat_proc is None

    @patch("pidmonitor.collectors.pidstat_sampler.subprocess.Popen")
    def test_run_appends_to_existing_capture(self, mock_popen, temp_dir, pidstat_cpu_output):
        mock_popen.return_value = make_popen(pidstat_cpu_output)
        task = make_task(temp_dir)
        task.output_file.write_text("earlier\n")

        PidstatSampler(task).run()

        assert task.output_file.read_text() == "earlier\n" + pidstat_cpu_output

    @patch("pidmonitor.collectors.pidstat_sampler.subprocess.Popen")
    def test_process_exit_ends_sampling_early(self, mock_popen, temp_dir):
        """pidstat stops with a non-zero code when the process disappears."""
        mock_popen.return_value = make_popen("Linux 6.1.0 (host)\n", returncode=1)
        task = make_task(temp_dir)

        assert PidstatSampler(task).run() == 1
        assert parse_capture_lines(task.output_file.read_text().splitlines(), CPU_METRIC) == []

    def test_stop_terminates_running_process(self, temp_dir):
        sampler = PidstatSampler(make_task(temp_dir), shutdown_timeout=0.5)
        proc = make_popen("")
        proc.poll.return_value = None
        sampler.pidstat_proc = proc

        sampler.stop()

        proc.terminate.assert_called_once()
        proc.wait.assert_called_with(timeout=0.5)
        assert sampler.pidstat_proc is None

    def test_stop_kills_after_timeout(self, temp_dir):
        sampler = PidstatSampler(make_task(temp_dir), shutdown_timeout=0.5)
        proc = make_popen("")
        proc.poll.return_value = None
        proc.wait.side_effect = [subprocess.TimeoutExpired("pidstat", 0.5), 0]
        sampler.pidstat_proc = proc

        sampler.stop()

        proc.kill.assert_called_once()

    @patch("pidmonitor.collectors.pidstat_sampler.subprocess.Popen")
    def test_stopped_sampler_never_starts_pidstat(self, mock_popen, temp_dir):
        task = make_task(temp_dir, duration=3600)
        sampler = PidstatSampler(task)
        sampler.stop()

        assert sampler.run() == 0
        mock_popen.assert_not_called()

    def test_stop_without_process_is_noop(self, temp_dir):
        sampler = PidstatSampler(make_task(temp_dir))
        sampler.stop()
        assert sampler.pidstat_proc is None


@pytest.mark.unit
class TestPsutilSampler:
    """Test cases for PsutilSampler against the live test process."""

    def test_memory_samples_of_own_process(self, temp_dir, own_pid):
        task = make_task(temp_dir, MEMORY_METRIC, pid=own_pid, duration=1)
        sampler = PsutilSampler(task)

        sampler.run()

        records = parse_capture_lines(
            task.output_file.read_text().splitlines(), MEMORY_METRIC, own_pid
        )
        assert len(records) == 1
        assert records[0].resident_memory_kb > 0

    def test_cpu_samples_of_own_process(self, temp_dir, own_pid):
        task = make_task(temp_dir, CPU_METRIC, pid=own_pid, duration=1)

        PsutilSampler(task).run()

        records = parse_capture_lines(task.output_file.read_text().splitlines(), CPU_METRIC, own_pid)
        assert len(records) == 1
        assert records[0].cpu_percent >= 0.0

    def test_missing_process_produces_no_output(self, temp_dir):
        import psutil

        task = make_task(temp_dir, CPU_METRIC, pid=4242)
        with patch(
            "pidmonitor.collectors.psutil_sampler.psutil.Process",
            side_effect=psutil.NoSuchProcess(4242),
        ):
            assert PsutilSampler(task).run() == 0

        assert task.output_file.read_text() == ""

    def test_stop_interrupts_memory_wait(self, temp_dir, own_pid):
        task = make_task(temp_dir, MEMORY_METRIC, pid=own_pid, duration=30)
        sampler = PsutilSampler(task)
        sampler.stop()

        # Banner, blank line and header only.
        assert sampler.run() == 3


@pytest.mark.unit
class TestSamplerFactory:
    """Test cases for sampler backend resolution."""

    @patch("pidmonitor.collectors.factory.check_pidstat_installed", return_value=True)
    def test_auto_prefers_pidstat(self, _mock):
        assert resolve_sampler_name("auto") == "pidstat"

    @patch("pidmonitor.collectors.factory.check_pidstat_installed", return_value=False)
    def test_auto_falls_back_to_psutil(self, _mock):
        assert resolve_sampler_name("auto") == "psutil"

    @patch("pidmonitor.collectors.factory.check_pidstat_installed", return_value=False)
    def test_explicit_pidstat_missing_is_environment_error(self, _mock):
        with pytest.raises(MonitorEnvironmentError):
            resolve_sampler_name("pidstat")

    def test_unknown_sampler(self):
        with pytest.raises(ValueError):
            resolve_sampler_name("perf")

    @patch("pidmonitor.collectors.factory.check_pidstat_installed", return_value=True)
    def test_create_sampler_passes_kwargs(self, _mock, temp_dir):
        factory = SamplerFactory("pidstat", shutdown_timeout=1.5)
        sampler = factory.create_sampler(make_task(temp_dir))

        assert isinstance(sampler, PidstatSampler)
        assert sampler.shutdown_timeout == 1.5

    def test_create_psutil_sampler(self, temp_dir):
        console = ConsoleEcho(enabled=False)
        sampler = SamplerFactory("psutil", console=console).create_sampler(make_task(temp_dir))

        assert isinstance(sampler, PsutilSampler)
        assert sampler.console is console
