"""Module in charge of loading statmod configuration files.

Configuration files are YAML documents made of the blocks defined in
:mod:`statmod.config.api`. Any value which is not specified falls back
to its default. A block can be pulled from another file:

    pca: !include pca.yaml

Single values can be overridden with dot-notation strings, e.g.
`"moments.cond_threshold=1e8"`, which are parsed as YAML.
"""

import numbers
import os
from typing import Any, Dict, List, Optional

import yaml

from statmod.utils.logger import logger

from .api import DEFAULTS, POSITIVE_KEYS, VALID_INSTABILITY_MODES, VALID_VERBOSITIES
from .errors import ConfigCycleError, ConfigError, ConfigPathError, ConfigValidationError
from .operations import deep_merge, parse_value, set_nested_value

__all__ = ["ConfigLoader", "load_config", "validate_config"]


class ConfigLoader(yaml.SafeLoader):
    """Configuration loader class.

    This class extends the safe YAML loader in order to include YAML
    configuration files into another YAML configuration file.
    """

    def __init__(self, stream, include_stack=None):
        """Initialize the loader.

        Parameters
        ----------
        stream : _io.TextIOWrapper
            Output of python's `open` function on a yaml file
        include_stack : List[str], optional
            Absolute paths of the files which are being loaded and which
            include this one, outermost first
        """
        # Fetch the parent directory where the configuration file lives
        self._root = os.path.split(stream.name)[0]

        # Keep track of the chain of includes which led to this file
        self._include_stack = (include_stack or []) + [os.path.realpath(stream.name)]

        # Initialize the base loader
        super().__init__(stream)

    def include(self, node):
        """Load and include a YAML file that is requested in the base config.

        Parameters
        ----------
        node : yaml.Node
            Node holding the name of the YAML file to load

        Raises
        ------
        ConfigPathError
            If the included file does not exist
        ConfigCycleError
            If the included file is already being loaded
        """
        # Look for the file in the same directory as the main config file
        filename = os.path.join(self._root, self.construct_scalar(node))
        if not os.path.isfile(filename):
            raise ConfigPathError(f"Included configuration file not found: {filename}")

        if os.path.realpath(filename) in self._include_stack:
            raise ConfigCycleError(self._include_stack + [os.path.realpath(filename)])

        # Load the file within the base configuration
        with open(filename, "r", encoding="utf-8") as f:
            loader = ConfigLoader(f, self._include_stack)
            try:
                return loader.get_single_data()
            finally:
                loader.dispose()


# Add the include constructor
ConfigLoader.add_constructor("!include", ConfigLoader.include)


def load_config(
    cfg_path: Optional[str] = None, overrides: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Load a configuration file, apply overrides and validate the result.

    Parameters
    ----------
    cfg_path : str, optional
        Path to a YAML configuration file. If not specified, the defaults
        are used.
    overrides : List[str], optional
        List of overrides in the form "key.path=value"

    Returns
    -------
    Dict[str, Any]
        Complete configuration dictionary

    Raises
    ------
    ConfigPathError
        If the configuration file (or an included file) does not exist
    ConfigCycleError
        If the configuration files include each other in a loop
    ConfigValidationError
        If the configuration contains unknown keys or invalid values
    """
    cfg = DEFAULTS
    if cfg_path is not None:
        if not os.path.isfile(cfg_path):
            raise ConfigPathError(f"Configuration file not found: {cfg_path}")

        with open(cfg_path, "r", encoding="utf-8") as f:
            try:
                content = yaml.load(f, Loader=ConfigLoader)
            except yaml.YAMLError as err:
                raise ConfigError(f"Could not parse {cfg_path}: {err}") from err

        if content is not None:
            if not isinstance(content, dict):
                raise ConfigValidationError(
                    f"The configuration in {cfg_path} must be a dictionary."
                )
            cfg = deep_merge(cfg, content)

    # Work on a copy so that the defaults are never modified
    cfg = deep_merge(cfg, {})
    for override in overrides or []:
        if "=" not in override:
            raise ConfigValidationError(
                f"Invalid override format: '{override}'. "
                f"Expected format: 'key.path=value'"
            )

        key_path, value_str = override.split("=", 1)
        set_nested_value(cfg, key_path.strip(), parse_value(value_str.strip()))

    _coerce_numbers(cfg)
    validate_config(cfg)

    # Set the verbosity of the logger
    logger.setLevel(cfg["base"]["verbosity"].upper())

    return cfg


def validate_config(cfg: Dict[str, Any]) -> None:
    """Check that a configuration only contains known keys with valid values.

    Parameters
    ----------
    cfg : Dict[str, Any]
        Configuration dictionary

    Raises
    ------
    ConfigValidationError
        If the configuration contains unknown keys or invalid values
    """
    for block, values in cfg.items():
        if block not in DEFAULTS:
            raise ConfigValidationError(
                f"Unknown configuration block: '{block}'. "
                f"Must be one of {sorted(DEFAULTS)}."
            )
        if not isinstance(values, dict):
            raise ConfigValidationError(f"The '{block}' block must be a dictionary.")

        for key, value in values.items():
            if key not in DEFAULTS[block]:
                raise ConfigValidationError(
                    f"Unknown key in the '{block}' block: '{key}'. "
                    f"Must be one of {sorted(DEFAULTS[block])}."
                )

            # Booleans are not interchangeable with numbers
            default = DEFAULTS[block][key]
            if isinstance(default, bool) or isinstance(value, bool):
                valid = isinstance(value, bool) and isinstance(default, bool)
            elif isinstance(default, numbers.Number):
                valid = isinstance(value, numbers.Number)
            else:
                valid = isinstance(value, type(default))
            if not valid:
                raise ConfigValidationError(
                    f"Invalid type for '{block}.{key}': {type(value).__name__}."
                )

    cfg = deep_merge(DEFAULTS, cfg)
    for block, keys in POSITIVE_KEYS.items():
        for key in keys:
            if not cfg[block][key] > 0:
                raise ConfigValidationError(f"'{block}.{key}' must be positive.")

    if cfg["base"]["verbosity"].lower() not in VALID_VERBOSITIES:
        raise ConfigValidationError(
            f"Invalid verbosity: '{cfg['base']['verbosity']}'. "
            f"Must be one of {sorted(VALID_VERBOSITIES)}."
        )
    if cfg["moments"]["instability"] not in VALID_INSTABILITY_MODES:
        raise ConfigValidationError(
            f"Invalid instability mode: '{cfg['moments']['instability']}'. "
            f"Must be one of {sorted(VALID_INSTABILITY_MODES)}."
        )
    if not isinstance(cfg["regression"]["n_folds"], int) or cfg["regression"]["n_folds"] < 2:
        raise ConfigValidationError("'regression.n_folds' must be an integer >= 2.")
    seed = cfg["regression"]["seed"]
    if isinstance(seed, bool) or not isinstance(seed, int) or seed < 0:
        raise ConfigValidationError("'regression.seed' must be a non-negative integer.")


def _coerce_numbers(cfg: Dict[str, Any]) -> None:
    """Convert strings such as "1e12", which YAML 1.1 does not read as
    floats, for keys whose default value is a float."""
    for block, values in cfg.items():
        if not isinstance(values, dict) or block not in DEFAULTS:
            continue
        for key, value in values.items():
            default = DEFAULTS[block].get(key)
            if isinstance(default, float) and isinstance(value, str):
                try:
                    values[key] = float(value)
                except ValueError:
                    # Left as is, rejected by the validation
                    continue
