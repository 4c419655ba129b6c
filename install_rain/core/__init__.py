"""Core types: results, errors and configuration."""

from .config import ActionConfig, load_config
from .errors import ConfigurationError, ErrorCode, error_exit_code
from .result import Err, Ok, Result

__all__ = [
    # config
    "ActionConfig",
    "load_config",
    # errors
    "ConfigurationError",
    "ErrorCode",
    "error_exit_code",
    # result
    "Err",
    "Ok",
    "Result",
]
