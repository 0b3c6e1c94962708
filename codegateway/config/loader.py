import collections.abc
import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from codegateway.config.defaults import CONFIG_FILE_NAMES, DEFAULT_CONFIG
from codegateway.config.engine import ResolvedConfig
from codegateway.errors import ConfigError
from codegateway.utils.logging import get_logger

logger = get_logger(__name__)

PACKAGE_JSON_KEY = "codegateway"


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges two dictionaries.
    'override' values take precedence over 'base' values.
    Lists are overridden, not merged.
    """
    result = base.copy()
    for key, value in override.items():
        if (
            isinstance(value, collections.abc.Mapping)
            and key in result
            and isinstance(result[key], collections.abc.Mapping)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def find_config_file(start_dir: str = ".") -> Optional[Path]:
    """
    Walks up from `start_dir` looking for a config file, or a package.json
    carrying a "codegateway" key.
    """
    current = Path(start_dir).resolve()
    for directory in [current, *current.parents]:
        for file_name in CONFIG_FILE_NAMES:
            candidate = directory / file_name
            if candidate.is_file():
                return candidate

        package_json = directory / "package.json"
        if package_json.is_file():
            try:
                content = json.loads(package_json.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.debug("package_json_unreadable", path=str(package_json), error=str(e))
                continue
            if isinstance(content, dict) and PACKAGE_JSON_KEY in content:
                return package_json
    return None


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Reads a YAML or JSON config file (YAML is a superset of JSON)."""
    config_path = Path(config_path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Error reading config file at {config_path}: {e}") from e

    if config_path.name == "package.json":
        content = (content or {}).get(PACKAGE_JSON_KEY)

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping.")
    return content


def resolve_config(user_config: Dict[str, Any]) -> ResolvedConfig:
    """Validates a raw (possibly camelCase) mapping into a ResolvedConfig."""
    try:
        return ResolvedConfig.model_validate(user_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(project_path: str = ".", config_path: Optional[str] = None) -> ResolvedConfig:
    """
    Loads and merges configurations from defaults, the global file and the
    project file (explicit `config_path` or the nearest discovered one).
    """
    # 1. Start with the default config
    config = dict(DEFAULT_CONFIG)

    # 2. Load and merge global config
    global_config_path = Path.home() / ".codegateway" / "config.yaml"
    if global_config_path.is_file():
        try:
            config = deep_merge(config, ResolvedConfig.normalize_keys(load_config_file(global_config_path)))
        except ConfigError as e:
            logger.warning("global_config_ignored", path=str(global_config_path), error=str(e))

    # 3. Load and merge project-specific config
    project_config_path = Path(config_path) if config_path else find_config_file(project_path)
    if project_config_path is not None:
        logger.info("config_loaded", path=str(project_config_path))
        config = deep_merge(config, ResolvedConfig.normalize_keys(load_config_file(project_config_path)))

    # 4. Validate final config
    return resolve_config(config)


def create_default_config_file(directory: str = ".") -> Path:
    """Writes a starter config next to the project and returns its path."""
    config_path = Path(directory) / CONFIG_FILE_NAMES[0]
    starter = {
        "min_severity": "info",
        "exclude": ["**/node_modules/**", "**/dist/**", "**/build/**"],
        "block_on_critical": True,
        "block_on_warning": False,
    }
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(starter, f, indent=2, sort_keys=False)
    return config_path

