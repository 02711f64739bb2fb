"""
Unit tests for configuration validation and loading.

Tests the validation of the monitor and environment sections, the TOML
loader and the cached configuration manager.
"""

import tomllib
from pathlib import Path

import pytest

from pidmonitor.config import (
    clear_config_cache,
    get_config,
    load_toml_file,
    set_config_path,
)
from pidmonitor.config import manager as config_manager
from pidmonitor.config.validators import (
    validate_environment_config,
    validate_monitor_config,
)
from pidmonitor.validation import ValidationError


@pytest.mark.unit
class TestMonitorConfigValidation:
    """Test cases for monitor configuration validation."""

    def test_validate_monitor_config_success(self, sample_config_data, temp_dir):
        config = validate_monitor_config(sample_config_data["monitor"])

        assert config.sampler == "psutil"
        assert config.interval_seconds == 1
        assert config.log_root_dir == temp_dir / "logs"
        assert config.echo_samples is False
        assert config.shutdown_timeout == 2.0

    def test_validate_monitor_config_defaults(self):
        config = validate_monitor_config({})

        assert config.sampler == "auto"
        assert config.log_root_dir == Path(".")
        assert config.log_dir_prefix == "monitoring_logs_"
        assert config.raw_log_name == "raw_output.log"
        assert config.summary_report_name == "summary_report.txt"
        assert config.generate_plots is False

    def test_invalid_sampler(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config({"sampler": "perf"})

        assert "monitor.sampler" in str(exc_info.value)

    @pytest.mark.parametrize("interval", [0, -1, 0.5, "fast", 2, 60])
    def test_invalid_interval(self, interval):
        with pytest.raises(ValidationError) as exc_info:
            validate_monitor_config({"interval_seconds": interval})

        assert "interval_seconds" in str(exc_info.value)

    def test_result_file_names_must_differ(self):
        with pytest.raises(ValidationError):
            validate_monitor_config(
                {"raw_log_name": "out.txt", "summary_report_name": "out.txt"}
            )

    def test_non_boolean_flag(self):
        with pytest.raises(ValidationError):
            validate_monitor_config({"echo_samples": "yes"})


@pytest.mark.unit
class TestEnvironmentConfigValidation:
    """Test cases for environment configuration validation."""

    def test_validate_environment_config_success(self, sample_config_data, temp_dir):
        config = validate_environment_config(sample_config_data["environment"])

        assert config.root_dir == (temp_dir / "node").resolve()
        assert config.data_dir == config.root_dir / "data"
        assert config.triedb_size_bytes == 1024 ** 2
        assert config.triedb_path == config.data_dir / "node" / "triedb" / "test.db"
        assert config.bft_binaries == ["monad-node", "examples/txgen"]

    def test_empty_root_dir_is_cwd(self):
        config = validate_environment_config({"root_dir": ""})
        assert config.root_dir == Path.cwd()

    def test_device_mode_uses_device_path(self):
        config = validate_environment_config(
            {"storage_mode": "device", "triedb_device": "/dev/nvme1n1"}
        )
        assert config.triedb_path == Path("/dev/nvme1n1")

    def test_invalid_storage_mode(self):
        with pytest.raises(ValidationError):
            validate_environment_config({"storage_mode": "tape"})

    def test_invalid_size(self):
        with pytest.raises(ValidationError):
            validate_environment_config({"triedb_size": "huge"})

    def test_invalid_binary_list(self):
        with pytest.raises(ValidationError):
            validate_environment_config({"cxx_binaries": "cmd/monad"})


@pytest.mark.unit
class TestConfigLoading:
    """Test cases for the loader and the cached manager."""

    def test_load_toml_file_missing(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_toml_file(temp_dir / "missing.toml")

    def test_load_toml_file_malformed(self, temp_dir):
        bad = temp_dir / "bad.toml"
        bad.write_text("[monitor\nsampler = ")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml_file(bad)

    def test_get_config_from_file(self, config_files):
        set_config_path(config_files["config"])

        config = get_config()

        assert config.monitor.sampler == "psutil"
        assert config.environment.storage_mode == "file"

    def test_get_config_is_cached(self, config_files):
        set_config_path(config_files["config"])

        assert get_config() is get_config()
        first = get_config()
        clear_config_cache()
        assert get_config() is not first

    def test_explicit_missing_path_is_error(self, temp_dir):
        set_config_path(temp_dir / "nowhere.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_invalid_values_raise_validation_error(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text('[monitor]\nsampler = "perf"\n')
        set_config_path(config_file)

        with pytest.raises(ValidationError):
            get_config()

    def test_missing_default_file_uses_builtin_defaults(self, temp_dir, monkeypatch):
        missing_default = temp_dir / "conf" / "config.toml"
        monkeypatch.setattr(config_manager, "_DEFAULT_CONFIG_FILE_PATH", missing_default)
        monkeypatch.setattr(config_manager, "_CONFIG_FILE_PATH", missing_default)
        clear_config_cache()

        config = get_config()

        assert config.monitor.sampler == "auto"
        assert config.environment.data_dir_name == "data"

    def test_shipped_config_file_is_valid(self):
        """conf/config.toml in the repository loads without errors."""
        shipped = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
        set_config_path(shipped)

        config = get_config()

        assert config.monitor.interval_seconds == 1
        assert config.monitor.generate_plots is False
