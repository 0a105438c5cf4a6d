# manus/config/loader.py
"""
Handles loading and merging of configurations from TOML files.
"""
import toml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import fields as dataclass_fields, MISSING
import structlog

from manus.exceptions import ConfigError

from .settings import ManusConfig, OutputFormat

log = structlog.get_logger(__name__)

PROJECT_CONFIG_FILENAMES = [".manus.toml", "manus.toml", "pyproject.toml"]
USER_CONFIG_DIR = Path.home() / ".config" / "manus"
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.toml"

CONFIG_KEY_TO_MANUSCONFIG_ATTR_MAP: Dict[str, str] = {
    "data": "data_path",
    "engine": "engine",
    "keep_intermediates": "keep_intermediates",
    "synctex": "synctex",
    "strict": "strict",
    "extension": "extension",
    "output_format": "output_format",
}

def _load_toml_file_data(file_path: Path) -> Dict[str, Any]:
    if not file_path.is_file(): return {}
    log.debug("loading_toml_config_file", path=str(file_path))
    try:
        data = toml.load(file_path)
    except (OSError, toml.TomlDecodeError) as e:
        log.error("config_file_load_error", path=str(file_path), error=str(e))
        raise ConfigError(f"Could not read config file {file_path}: {e}") from e
    return data.get("tool", {}).get("manus", {}) if file_path.name == "pyproject.toml" else data

def load_and_merge_configs(cwd: Optional[Path] = None, user_config_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Merge the user config with the first project config found in `cwd`.

    Project settings win over user settings; profile tables are merged by name.
    """
    cwd = cwd or Path.cwd()
    user_config_file = user_config_file or USER_CONFIG_FILE
    merged_toml_data: Dict[str, Any] = {}
    if user_config_file.is_file():
        log.info("loading_user_global_config", path=str(user_config_file))
        merged_toml_data.update(_load_toml_file_data(user_config_file))

    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = cwd / filename
        if candidate.is_file():
            project_settings = _load_toml_file_data(candidate)
            if not project_settings:
                continue
            log.info("loading_project_local_config", path=str(candidate))
            user_profiles = merged_toml_data.get("profiles", {})
            project_profiles = project_settings.pop("profiles", {})
            if isinstance(user_profiles, dict) and isinstance(project_profiles, dict):
                user_profiles.update(project_profiles)
                merged_toml_data["profiles"] = user_profiles
            elif isinstance(project_profiles, dict):
                merged_toml_data["profiles"] = project_profiles
            merged_toml_data.update(project_settings)
            log.debug("project_config_applied", source_file=str(candidate))
            break
    if not merged_toml_data: log.debug("no_configuration_files_loaded")
    return merged_toml_data

def default_options() -> Dict[str, Any]:
    # dataclass defaults for every init field of ManusConfig.
    options: Dict[str, Any] = {}
    for fd in dataclass_fields(ManusConfig):
        if fd.init:
            options[fd.name] = fd.default_factory() if fd.default_factory is not MISSING else fd.default
    return options

def apply_config_values(options: Dict[str, Any], raw_config: Dict[str, Any],
                        profile_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Layer top-level config values, then the selected profile, onto `options`.

    Raises ConfigError if a requested profile does not exist.
    """
    for toml_k, attr in CONFIG_KEY_TO_MANUSCONFIG_ATTR_MAP.items():
        if toml_k in raw_config:
            options[attr] = raw_config[toml_k]

    if profile_name:
        profile_values = raw_config.get("profiles", {}).get(profile_name)
        if not isinstance(profile_values, dict):
            log.warning("profile_not_found_in_config_files", profile_name=profile_name)
            raise ConfigError(f"Profile not found in config files: {profile_name}")
        log.info("applying_profile_settings", profile=profile_name)
        for toml_k, attr in CONFIG_KEY_TO_MANUSCONFIG_ATTR_MAP.items():
            if toml_k in profile_values:
                options[attr] = profile_values[toml_k]

    if isinstance(options.get("output_format"), str):
        options["output_format"] = OutputFormat.from_string(options["output_format"])
    for bool_attr in ("keep_intermediates", "synctex", "strict"):
        if not isinstance(options.get(bool_attr), bool):
            raise ConfigError(f"Config value '{bool_attr}' must be true or false")
    return options
