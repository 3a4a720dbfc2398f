"""Traceability validator configuration loading."""

from tracegate.config.settings import (
    CONFIG_FILENAMES,
    TraceConfig,
    TraceConfigError,
    default_config_file,
    load_trace_config,
)

__all__ = [
    "CONFIG_FILENAMES",
    "TraceConfig",
    "TraceConfigError",
    "default_config_file",
    "load_trace_config",
]
