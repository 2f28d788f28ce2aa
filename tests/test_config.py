"""
Tests for configuration loading and validation.
"""

import pytest
import yaml

from gcovtrace.config import GcovTraceConfig, load_config, generate_default_config
from gcovtrace.core.errors import ConfigError


class TestConfigDefaults:
    """Test default values."""

    def test_defaults(self):
        """Defaults verify checksums and emit function coverage."""
        cfg = GcovTraceConfig()

        assert cfg.version == 1
        assert cfg.report.test_name == ''
        assert cfg.report.function_coverage is True
        assert cfg.checks.verify_checksums is True
        assert cfg.checks.strict_conservation is False
        assert cfg.logging.level == 'WARNING'
        assert cfg.validate() == []

    def test_generated_default_is_valid(self):
        """The init template parses back to the defaults."""
        data = yaml.safe_load(generate_default_config())

        cfg = GcovTraceConfig.from_dict(data)

        assert cfg == GcovTraceConfig()

    def test_yaml_roundtrip(self):
        """to_yaml output loads back to an equal config."""
        cfg = GcovTraceConfig()
        cfg.report.test_name = 'nightly'

        assert GcovTraceConfig.from_dict(yaml.safe_load(cfg.to_yaml())) == cfg


class TestConfigLoading:
    """Test loading from files."""

    def test_load_file(self, tmp_path):
        """Sections missing from the file keep their defaults."""
        path = tmp_path / "gcovtrace.yml"
        path.write_text("checks:\n  strict_conservation: true\n")

        cfg = GcovTraceConfig.load(path)

        assert cfg.checks.strict_conservation is True
        assert cfg.checks.verify_checksums is True
        assert cfg.report.function_coverage is True

    def test_env_substitution(self, tmp_path, monkeypatch):
        """${VAR} is replaced from the environment."""
        monkeypatch.setenv("GCOVTRACE_TEST_NAME", "ci-job")
        path = tmp_path / "gcovtrace.yml"
        path.write_text("report:\n  test_name: ${GCOVTRACE_TEST_NAME}\n")

        assert GcovTraceConfig.load(path).report.test_name == "ci-job"

    def test_unset_env_kept(self, tmp_path, monkeypatch):
        """Unset variables stay as written."""
        monkeypatch.delenv("GCOVTRACE_UNSET", raising=False)
        path = tmp_path / "gcovtrace.yml"
        path.write_text("report:\n  test_name: ${GCOVTRACE_UNSET}\n")

        assert GcovTraceConfig.load(path).report.test_name == "${GCOVTRACE_UNSET}"

    def test_missing_file(self, tmp_path):
        """Loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            GcovTraceConfig.load(tmp_path / "nope.yml")

    def test_unknown_key(self, tmp_path):
        """Unknown keys in a section raise ConfigError."""
        path = tmp_path / "gcovtrace.yml"
        path.write_text("report:\n  colour: blue\n")

        with pytest.raises(ConfigError):
            GcovTraceConfig.load(path)

    def test_not_a_mapping(self, tmp_path):
        """A top-level list raises ConfigError."""
        path = tmp_path / "gcovtrace.yml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            GcovTraceConfig.load(path)

    def test_search_path(self, tmp_path, monkeypatch):
        """load_config finds gcovtrace.yml in the working directory."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        (tmp_path / "gcovtrace.yml").write_text("report:\n  test_name: local\n")

        assert load_config().report.test_name == "local"

    def test_explicit_path_missing(self, tmp_path):
        """An explicit path that does not exist is an error."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yml")

    def test_no_config_found(self, tmp_path, monkeypatch):
        """Without any config file the defaults are used."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))

        assert load_config() == GcovTraceConfig()


class TestConfigValidation:
    """Test validate()."""

    def test_bad_version(self):
        cfg = GcovTraceConfig(version=2)

        assert any("version" in e for e in cfg.validate())

    def test_bad_level(self):
        cfg = GcovTraceConfig.from_dict({'logging': {'level': 'LOUD'}})

        assert any("logging.level" in e for e in cfg.validate())

    def test_multiline_test_name(self):
        """A test name with a newline would break the TN line."""
        cfg = GcovTraceConfig.from_dict({'report': {'test_name': 'a\nb'}})

        assert cfg.validate() == ["report.test_name must be a single line"]

    def test_non_boolean_flag(self):
        cfg = GcovTraceConfig.from_dict({'checks': {'verify_checksums': 'yes'}})

        errors = cfg.validate()

        assert len(errors) == 1
        assert "checks.verify_checksums" in errors[0]
