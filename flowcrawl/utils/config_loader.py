import copy
import yaml  # from PyYAML
from pathlib import Path
from typing import Dict, Any, Optional

DEFAULT_CONFIG_FILENAMES = ["flowcrawl.yaml", "flowcrawl.yml", "config.yaml", "config.yml"]

DEFAULT_APP_CONFIG: Dict[str, Any] = {
    "general": {
        "verbose": False,
    },
    "crawler": {
        "suppress_decisions": False,  # True renders a flat call graph without if/loop/match nodes
        "extra_ignored_dirs": [],  # Directory names skipped in addition to the built-in list
    },
    "watcher": {
        "enabled": False,
        "debounce_seconds": 0.5,
    },
}


def merge_configs(
    base_config: Dict[str, Any], user_config: Dict[str, Any]
) -> Dict[str, Any]:
    merged = base_config.copy()
    for key, value in user_config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_app_config(config_file_path: Optional[Path] = None, verbose: bool = False) -> Dict[str, Any]:
    current_config = copy.deepcopy(DEFAULT_APP_CONFIG)

    file_to_load: Optional[Path] = None

    if config_file_path and Path(config_file_path).is_file():
        file_to_load = Path(config_file_path)
    else:
        if config_file_path:
            print(f"ConfigLoader Warning: Config file {config_file_path} not found. Looking in the working directory.")
        for filename in DEFAULT_CONFIG_FILENAMES:
            default_path = Path.cwd() / filename
            if default_path.is_file():
                file_to_load = default_path
                break

    if file_to_load:
        try:
            with open(file_to_load, "r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f)
            if isinstance(user_config, dict):
                current_config = merge_configs(current_config, user_config)
            elif user_config is not None:
                print(f"ConfigLoader Warning: {file_to_load} does not contain a mapping. Using defaults.")
            if verbose or current_config["general"].get("verbose"):
                print(f"ConfigLoader: Loaded configuration from {file_to_load}")
        except yaml.YAMLError as e_yaml:
            print(
                f"ConfigLoader Warning: Error parsing YAML config file {file_to_load}: {e_yaml}. Using defaults."
            )
        except OSError as e_os:
            print(
                f"ConfigLoader Warning: Error reading config file {file_to_load}: {e_os}. Using defaults."
            )
    elif verbose:
        print(
            "ConfigLoader Info: No user config file provided or found in default locations. Using built-in defaults."
        )

    return current_config


def get_default_config_yaml_example() -> str:
    return yaml.dump(DEFAULT_APP_CONFIG, sort_keys=False, indent=2)
