"""Core types: results, exit codes and release configuration."""

from .config import AssetConfig, ConfigError, ReleaseConfig, load_config, load_repo_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "AssetConfig",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "load_repo_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
