"""statmod configuration loading system.

This package provides a small YAML configuration layer with:
- Package-wide default values for every tunable parameter
- Inline includes of other YAML files with `!include`
- Override semantics with dot-notation
- Validation of the block and key names, types and values

Main Entry Point
----------------
load_config : Load a statmod configuration file
"""

from .api import DEFAULTS
from .errors import (
    ConfigCycleError,
    ConfigError,
    ConfigPathError,
    ConfigTypeError,
    ConfigValidationError,
)
from .loader import load_config, validate_config

__all__ = [
    "DEFAULTS",
    "load_config",
    "validate_config",
    "ConfigError",
    "ConfigCycleError",
    "ConfigPathError",
    "ConfigTypeError",
    "ConfigValidationError",
]
