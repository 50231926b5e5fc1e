from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from config.loader import load_config
from config.models import Config
from utils.errors import ConfigError
from utils.logger import logger

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"
USER_CONFIG_DIR = Path.home() / ".aicommits"
USER_CONFIG_PATH = USER_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_FILENAME = ".aicommits.yaml"
PROJECT_MARKERS = (".git", "pyproject.toml")


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Returns a new dict with ``override`` layered over ``base``.

    Nested mappings merge key by key; any other value, lists included, replaces
    the one underneath. Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        below = merged.get(key)
        if isinstance(value, Mapping) and isinstance(below, Mapping):
            merged[key] = deep_merge(below, value)
        else:
            merged[key] = value
    return merged


def find_project_root(start_dir: Path = Path(".")) -> Optional[Path]:
    """Walks up from ``start_dir`` to the first directory holding a ``.git`` entry or pyproject.toml."""
    current = start_dir.resolve()
    for directory in (current, *current.parents):
        if any((directory / marker).exists() for marker in PROJECT_MARKERS):
            return directory
    return None


def find_project_config(start_dir: Path = Path(".")) -> Optional[Path]:
    root = find_project_root(start_dir)
    if root is None:
        return None
    candidate = root / PROJECT_CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def config_layers(custom_config_path: Optional[str] = None) -> List[Path]:
    """
    Lists the config files to merge, lowest precedence first.

    Raises:
        ConfigError: If ``custom_config_path`` does not point to a file.
    """
    if custom_config_path:
        custom = Path(custom_config_path)
        if not custom.is_file():
            raise ConfigError(f"Custom config file not found at: {custom_config_path}")
        logger.info(f"Using custom configuration from: {custom}")
        return [custom]

    layers: List[Path] = []
    if DEFAULT_CONFIG_PATH.is_file():
        layers.append(DEFAULT_CONFIG_PATH)
    else:
        logger.warning(f"Packaged defaults missing at {DEFAULT_CONFIG_PATH}, falling back to model defaults.")
    if USER_CONFIG_PATH.is_file():
        layers.append(USER_CONFIG_PATH)
    project_config = find_project_config()
    if project_config is not None:
        layers.append(project_config)
    return layers


def _read_layer(path: Path) -> Dict[str, Any]:
    logger.info(f"Loading configuration from: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return load_config(f)
    except OSError as e:
        logger.warning(f"Skipping unreadable config {path}: {e}")
        return {}


def load_and_merge_configs(custom_config_path: Optional[str] = None) -> Config:
    """
    Builds the effective configuration.

    Layers are the packaged defaults, the user file and the project file, each
    overriding the previous one. A custom path replaces all three.

    Raises:
        ConfigError: If a file is malformed or the merged values fail validation.
    """
    data: Dict[str, Any] = {}
    for path in config_layers(custom_config_path):
        data = deep_merge(data, _read_layer(path))

    try:
        config = Config(**data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e
    logger.debug(f"Effective config: {config.model_dump_json(indent=2, exclude={'model': {'api_key'}})}")
    return config
