"""Core types: results, exit codes and configuration."""

from .config import ConfigError, HookSettings, ReleaseSettings, load_settings
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "HookSettings",
    "ReleaseSettings",
    "load_settings",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
