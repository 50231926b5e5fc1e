import os
import re
import yaml
from typing import Any, Dict, IO

from utils.errors import ConfigError

# ${VAR} or ${VAR:-default}, anywhere inside a scalar
ENV_VAR_MATCHER = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


class ConfigLoader(yaml.SafeLoader):
    """A SafeLoader that expands environment variables in string scalars."""


def _substitute(match: "re.Match[str]") -> str:
    env_var, default = match.group(1), match.group(2)
    replacement = os.getenv(env_var)
    if replacement is not None:
        return replacement
    if default is not None:
        return default
    raise ConfigError(f"Environment variable '{env_var}' not found for substitution in config.")


def _env_var_constructor(loader: ConfigLoader, node: yaml.ScalarNode) -> str:
    """
    Replaces ${VAR_NAME} with the value of the VAR_NAME environment variable.
    ${VAR_NAME:-fallback} uses the fallback when the variable is unset.
    """
    value = loader.construct_scalar(node)
    return ENV_VAR_MATCHER.sub(_substitute, value)


ConfigLoader.add_constructor("!env", _env_var_constructor)
ConfigLoader.add_implicit_resolver("!env", re.compile(r".*\$\{\w+(?::-[^}]*)?\}.*"), None)


def load_config(config_file: IO[str]) -> Dict[str, Any]:
    """
    Loads a YAML configuration file.

    Args:
        config_file: A file-like object representing the YAML configuration.

    Returns:
        A dictionary containing the configuration.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    try:
        config = yaml.load(config_file, Loader=ConfigLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}") from e

    if not config:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration must be a mapping, got {type(config).__name__}.")
    return config
