"""Configuration management for gcovtrace."""

from .schema import (
    GcovTraceConfig,
    ReportConfig,
    ChecksConfig,
    LoggingConfig,
    LOG_LEVELS,
    load_config,
    generate_default_config,
)

__all__ = [
    'GcovTraceConfig',
    'ReportConfig',
    'ChecksConfig',
    'LoggingConfig',
    'LOG_LEVELS',
    'load_config',
    'generate_default_config',
]
