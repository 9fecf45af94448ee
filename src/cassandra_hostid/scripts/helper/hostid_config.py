"""
Licence: MIT
"""
import yaml
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional
import logging
from cassandra_hostid.scripts.helper import exceptions
from cassandra_hostid.scripts.helper.nodetool import DEFAULT_NODETOOL_PATH

logger = logging.getLogger("hostid")

BOOLEAN_KEYS = ("populate", "fetch", "strict_exit_code")

@dataclass
class HostIdConfig(yaml.YAMLObject):
    """Dataclass for cassandra-hostid settings that can be parsed in YAML."""

    kubeconfig: Optional[str] = None
    nodetool: str = DEFAULT_NODETOOL_PATH
    namespace: str = "default"
    pod: str = ""
    prefix: str = "cassandra"
    populate: bool = True
    fetch: bool = True
    strict_exit_code: bool = False
    yaml_tag = "!HostIdConfig"
    yaml_loader = yaml.SafeLoader


def load_config(path: Path) -> HostIdConfig:
    """
    Loads settings from a YAML file, either a '!HostIdConfig' document or a plain mapping.

    Args:
        path (Path): The file path to the YAML configuration file.

    Returns:
        HostIdConfig: The settings from the file, defaults for keys it leaves out.

    Raises:
        ConfigError: If the file cannot be read or parsed, holds unknown keys or non-boolean flags.
    """
    try:
        with open(path, "r", encoding="utf8") as file:
            data = yaml.safe_load(file)
    except OSError as exception:
        raise exceptions.ConfigError(f"Could not read config file {path}: {exception}")
    except yaml.YAMLError as exception:
        raise exceptions.ConfigError(f"Parsing of config file {path} failed with error: {exception}")

    if data is None:
        return HostIdConfig()
    if isinstance(data, HostIdConfig):
        data = vars(data)
    elif not isinstance(data, dict):
        logger.debug(f"Type of loaded yaml should be HostIdConfig or dict but is type {type(data)}")
        raise exceptions.ConfigError(f"Could not parse config file {path} as HostIdConfig.")

    known = {f.name for f in fields(HostIdConfig)}
    unknown = set(data) - known
    if unknown:
        raise exceptions.ConfigError(f"Unknown keys in config file {path}: {', '.join(sorted(unknown))}")
    for name in BOOLEAN_KEYS:
        if name in data and not isinstance(data[name], bool):
            raise exceptions.ConfigError(f"{name} in config file {path} must be true or false, not {data[name]!r}")
    return HostIdConfig(**data)


def merge_config(config: HostIdConfig, **overrides) -> HostIdConfig:
    """Returns a copy of config with every override that is not None applied."""
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def validate_config(config: HostIdConfig) -> HostIdConfig:
    if not config.pod:
        raise exceptions.ConfigError("you must specify a pod name")
    return config
