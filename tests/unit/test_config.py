"""Tests for run configuration.

Tests for RunConfig, configure(), get_config() and load_config().
"""
from __future__ import annotations

import os
import tempfile

import pytest

from microbench.config import RunConfig, configure, get_config, load_config
from microbench.exceptions import ConfigurationError

pytestmark = pytest.mark.usefixtures("reset_default_config")


class TestRunConfig:
    """Tests for the RunConfig dataclass."""

    def test_defaults(self) -> None:
        """Default target duration is one second."""
        config = RunConfig()

        assert config.target_duration_s == 1.0
        assert config.max_repetitions == 10_000_000
        assert config.sync_cuda is False
        assert config.target_duration_ns == 1e9

    @pytest.mark.parametrize("duration", [0.0, -1.0, float("nan")])
    def test_invalid_duration(self, duration: float) -> None:
        """Target duration must be positive."""
        with pytest.raises(ConfigurationError) as exc_info:
            RunConfig(target_duration_s=duration)

        assert exc_info.value.config_key == "target_duration_s"

    def test_invalid_max_repetitions(self) -> None:
        """Repetition ceiling must be at least one."""
        with pytest.raises(ConfigurationError):
            RunConfig(max_repetitions=0)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("target_duration_s", "0.5"),
            ("target_duration_s", True),
            ("max_repetitions", 1000.0),
            ("max_repetitions", True),
            ("sync_cuda", "yes"),
        ],
    )
    def test_wrong_type(self, field: str, value) -> None:
        """Values of the wrong type are configuration errors."""
        with pytest.raises(ConfigurationError) as exc_info:
            RunConfig(**{field: value})

        assert exc_info.value.config_key == field
        assert exc_info.value.context["got"] == value

    def test_frozen(self) -> None:
        """RunConfig is immutable."""
        config = RunConfig()

        with pytest.raises(AttributeError):
            config.target_duration_s = 2.0  # type: ignore[misc]

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment variables override defaults."""
        monkeypatch.setenv("MICROBENCH_TARGET_DURATION_S", "0.5")
        monkeypatch.setenv("MICROBENCH_MAX_REPETITIONS", "1000")
        monkeypatch.setenv("MICROBENCH_SYNC_CUDA", "true")

        config = RunConfig.from_env()

        assert config.target_duration_s == 0.5
        assert config.max_repetitions == 1000
        assert config.sync_cuda is True

    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unset variables fall back to defaults."""
        for var in (
            "MICROBENCH_TARGET_DURATION_S",
            "MICROBENCH_MAX_REPETITIONS",
            "MICROBENCH_SYNC_CUDA",
        ):
            monkeypatch.delenv(var, raising=False)

        assert RunConfig.from_env() == RunConfig()

    def test_to_dict(self) -> None:
        """Config converts to a plain dict."""
        assert RunConfig(target_duration_s=0.2).to_dict() == {
            "target_duration_s": 0.2,
            "max_repetitions": 10_000_000,
            "sync_cuda": False,
        }


class TestConfigureAPI:
    """Tests for configure() / get_config()."""

    def test_configure_duration(self) -> None:
        """Configure target duration."""
        configure(target_duration_s=0.25)

        assert get_config().target_duration_s == 0.25

    def test_configure_returns_new_default(self) -> None:
        """configure() returns the config it installed."""
        result = configure(target_duration_s=0.1)

        assert isinstance(result, RunConfig)
        assert result == get_config()

    def test_configure_keeps_other_fields(self) -> None:
        """Unspecified fields are unchanged."""
        configure(max_repetitions=42)
        configure(sync_cuda=True)

        config = get_config()
        assert config.max_repetitions == 42
        assert config.sync_cuda is True

    def test_configure_reset(self) -> None:
        """Reset configuration to defaults."""
        configure(target_duration_s=5.0)

        configure(reset=True)

        assert get_config() == RunConfig()

    def test_configure_invalid_keeps_previous(self) -> None:
        """A rejected update leaves the default untouched."""
        configure(target_duration_s=0.3)

        with pytest.raises(ConfigurationError):
            configure(target_duration_s=-1.0)

        assert get_config().target_duration_s == 0.3


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_config_yaml(self) -> None:
        """Load configuration from YAML file."""
        yaml_content = """
target_duration_s: 0.5
max_repetitions: 2000
sync_cuda: false
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            config_path = f.name

        try:
            config = load_config(config_path)

            assert config.target_duration_s == 0.5
            assert config.max_repetitions == 2000
            assert get_config() == config
        finally:
            os.unlink(config_path)

    def test_load_config_missing_file(self) -> None:
        """Missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/microbench.yaml")

    def test_load_config_not_mapping(self, tmp_path) -> None:
        """Non-mapping YAML is rejected."""
        path = tmp_path / "bad.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError, match="Invalid config"):
            load_config(str(path))

    def test_load_config_float_ceiling(self, tmp_path) -> None:
        """A float repetition ceiling from YAML is rejected at load time."""
        path = tmp_path / "float.yaml"
        path.write_text("max_repetitions: 1.0e+3\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(path))

        assert exc_info.value.config_key == "max_repetitions"
        assert get_config() == RunConfig()

    def test_load_config_string_duration(self, tmp_path) -> None:
        """A quoted duration is a ConfigurationError, not a TypeError."""
        path = tmp_path / "quoted.yaml"
        path.write_text("target_duration_s: \"0.5\"\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(path))

        assert exc_info.value.config_key == "target_duration_s"

    def test_load_config_unknown_key(self, tmp_path) -> None:
        """Unknown keys are rejected."""
        path = tmp_path / "typo.yaml"
        path.write_text("target_duration: 1.0\n")

        with pytest.raises(ConfigurationError, match="Unknown keys"):
            load_config(str(path))
