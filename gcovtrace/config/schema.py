"""
Configuration schema for gcovtrace.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Validation with error messages

Example config (gcovtrace.yml):
    version: 1

    report:
      test_name: ${CI_JOB_NAME}
      function_coverage: true

    checks:
      verify_checksums: true
      strict_conservation: false

    logging:
      level: WARNING
"""

import os
import re
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Any

import yaml

from ..core.errors import ConfigError


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Unset variables are left as written.
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace(match):
            env_value = os.environ.get(match.group(1))
            if env_value is None:
                return match.group(0)
            return env_value

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


@dataclass
class ReportConfig:
    """Tracefile output settings."""
    test_name: str = ''
    function_coverage: bool = True


@dataclass
class ChecksConfig:
    """Consistency checks between notes and data files."""
    verify_checksums: bool = True
    strict_conservation: bool = False


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = 'WARNING'


@dataclass
class GcovTraceConfig:
    """Root configuration."""

    version: int = 1
    report: ReportConfig = field(default_factory=ReportConfig)
    checks: ChecksConfig = field(default_factory=ChecksConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path) -> 'GcovTraceConfig':
        """Load from YAML file with env var substitution."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigError(f"top level must be a mapping, got {type(data).__name__}",
                              source=str(path))

        data = _substitute_env_vars(data)
        try:
            return cls.from_dict(data)
        except TypeError as e:
            raise ConfigError(str(e), source=str(path)) from e

    @classmethod
    def from_dict(cls, data: dict) -> 'GcovTraceConfig':
        """Create from dictionary."""
        return cls(
            version=data.get('version', 1),
            report=ReportConfig(**(data.get('report') or {})),
            checks=ChecksConfig(**(data.get('checks') or {})),
            logging=LoggingConfig(**(data.get('logging') or {})),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = []

        if self.version != 1:
            errors.append(f"Unsupported config version: {self.version}")

        if '\n' in str(self.report.test_name):
            errors.append("report.test_name must be a single line")

        if str(self.logging.level).upper() not in LOG_LEVELS:
            errors.append(
                f"Invalid logging.level: {self.logging.level} "
                f"(expected one of {', '.join(LOG_LEVELS)})"
            )

        for section, name in (('report', 'function_coverage'),
                              ('checks', 'verify_checksums'),
                              ('checks', 'strict_conservation')):
            value = getattr(getattr(self, section), name)
            if not isinstance(value, bool):
                errors.append(f"{section}.{name} must be true or false, got {value!r}")

        return errors


def load_config(path: Optional[Path] = None) -> GcovTraceConfig:
    """Load config from an explicit file, the search path, or defaults."""
    if path:
        return GcovTraceConfig.load(path)

    search_paths = [
        Path('./gcovtrace.yml'),
        Path('./gcovtrace.yaml'),
        Path.home() / '.gcovtrace' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return GcovTraceConfig.load(p)

    return GcovTraceConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return """# gcovtrace configuration
version: 1

report:
  test_name: ""
  function_coverage: true

checks:
  verify_checksums: true
  strict_conservation: false

logging:
  level: WARNING
"""
