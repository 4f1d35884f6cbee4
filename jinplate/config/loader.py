# jinplate/config/loader.py
"""
Handles loading and merging of configuration from TOML files.
"""
import toml
from pathlib import Path
from typing import Dict, Any, Optional
import structlog

from jinplate.exceptions import ConfigError

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".jinplate.toml", "jinplate.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "jinplate"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_RENDERCONFIG_ATTR_MAP: Dict[str, str] = {
    "in": "input",
    "files": "input_files",
    "input_dir": "input_dir",
    "exclude": "exclude_globs",
    "include": "include_globs",
    "out": "output_files",
    "output_dir": "output_dir",
    "output_map": "output_map",
    "templates": "templates",
    "datasources": "datasources",
    "datasource_headers": "datasource_headers",
    "contexts": "contexts",
    "left_delim": "left_delim",
    "right_delim": "right_delim",
}

LIST_ATTRS = {
    "input_files", "exclude_globs", "include_globs", "output_files",
    "templates", "datasources", "datasource_headers", "contexts",
}


def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file():
        return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"could not read config file {file_path}: {e}") from e
    return data.get("tool", {}).get("jinplate", {}) if file_path.name == "pyproject.toml" else data


def load_and_merge_configs(base_dir: Optional[Path] = None) -> Dict[str, Any]:
    # user-level config first, then the first project-level file found in base_dir.
    base_dir = base_dir or Path.cwd()
    merged: Dict[str, Any] = {}
    if USER_CONFIG_FILE.is_file():
        log.info("loading_user_global_config", path=str(USER_CONFIG_FILE))
        merged.update(_load_toml_file_data(USER_CONFIG_FILE))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = base_dir / filename
        if not candidate.is_file():
            continue
        project_settings = _load_toml_file_data(candidate)
        if not project_settings:
            continue
        log.info("loading_project_local_config", path=str(candidate))
        profiles = merged.get("profiles", {})
        project_profiles = project_settings.pop("profiles", {})
        if isinstance(profiles, dict) and isinstance(project_profiles, dict):
            profiles.update(project_profiles)
            merged["profiles"] = profiles
        merged.update(project_settings)
        break

    if not merged:
        log.debug("no_configuration_files_loaded")
    return merged


def _to_attrs(section: Dict[str, Any], source: str) -> Dict[str, Any]:
    attrs: Dict[str, Any] = {}
    for key, value in section.items():
        attr = CONFIG_KEY_TO_RENDERCONFIG_ATTR_MAP.get(key)
        if attr is None:
            continue
        if attr in LIST_ATTRS:
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"'{key}' in {source} must be a string or a list of strings")
            value = list(value)
        elif not isinstance(value, str):
            raise ConfigError(f"'{key}' in {source} must be a string")
        attrs[attr] = value
    return attrs


def resolve_config_options(raw_config: Dict[str, Any], profile_name: Optional[str] = None) -> Dict[str, Any]:
    """Flattens merged file settings and an optional profile into RenderConfig keyword arguments."""
    options = _to_attrs({k: v for k, v in raw_config.items() if k != "profiles"}, "config file")
    if profile_name:
        profile = raw_config.get("profiles", {}).get(profile_name)
        if profile is None:
            raise ConfigError(f"config profile '{profile_name}' not found")
        log.info("applying_profile_settings", profile=profile_name)
        options.update(_to_attrs(profile, f"profile '{profile_name}'"))
    return options
