"""
Module for assembling the uploader configuration.

Configuration is built once, in three layers: built-in defaults, values
read from a key=value env file, then explicit overrides. The resulting
:class:`UploaderConfig` is frozen and passed to every component.
"""
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class UploaderConfig:
    """Settings for one uploader instance."""
    cwd: str = field(default_factory=os.getcwd)
    env_file: str = ".s3env"
    base: str = "dist"
    output: str = "upload-report.json"
    glob: str = "dist/**/*"
    glob_ignore: Tuple[str, ...] = ()
    include_hidden: bool = False
    bucket: str = "static"
    overwrite: bool = False
    workers: int = 2
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    access_key: str = ""
    secret_key: str = ""
    policy_expires: int = 7200

    def describe(self) -> Dict[str, Any]:
        """Return the settings as a dict with the secret key masked."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if data["secret_key"]:
            data["secret_key"] = "****"
        return data


_FIELD_TYPES = {f.name: f.type for f in fields(UploaderConfig)}


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw value (usually a string from the env file) to the field's type."""
    kind = _FIELD_TYPES[name]

    if kind is bool:
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ConfigError(f"Invalid boolean for {name}: {value!r}")

    if kind is int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer for {name}: {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid integer for {name}: {value!r}") from None

    if name == "glob_ignore":
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(p.strip() for p in value.split(",") if p.strip())
        return tuple(value)

    if name == "endpoint_url":
        return value or None

    if value is None:
        return ""
    return str(value)


def read_env_file(path: Path) -> Dict[str, Any]:
    """Read config values from a key=value env file.

    Keys are upper-case field names (``ACCESS_KEY``, ``BUCKET``, ...).
    Unknown keys are ignored so the file can be shared with other tools.

    Args:
        path: Path to the env file

    Returns:
        Dictionary of coerced values keyed by field name
    """
    if not path.is_file():
        logger.warning(f"Env file not found: {path}")
        return {}

    values = {}
    for raw_key, raw_value in dotenv_values(path).items():
        name = raw_key.strip().lower()
        if name in ("cwd", "env_file"):
            continue
        if name not in _FIELD_TYPES:
            logger.debug(f"Ignoring unknown key {raw_key} in {path}")
            continue
        values[name] = _coerce(name, raw_value)

    logger.debug(f"Loaded {len(values)} settings from {path}")
    return values


def _validate(config: UploaderConfig) -> UploaderConfig:
    if not config.bucket:
        raise ConfigError("bucket cannot be empty")
    if config.workers < 1:
        raise ConfigError(f"workers must be at least 1, got {config.workers}")
    if config.policy_expires <= 0:
        raise ConfigError(f"policy_expires must be positive, got {config.policy_expires}")
    if not config.glob:
        raise ConfigError("glob cannot be empty")
    return config


def load_config(overrides: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> UploaderConfig:
    """Assemble the configuration from defaults, the env file and overrides.

    Explicit overrides always take precedence over env file values,
    credentials included.

    Args:
        overrides: Mapping of field name to value
        **kwargs: Additional overrides, merged on top of ``overrides``

    Returns:
        Frozen UploaderConfig

    Raises:
        ConfigError: If an override is unknown or a value is invalid
    """
    explicit = dict(overrides or {})
    explicit.update(kwargs)

    unknown = sorted(set(explicit) - set(_FIELD_TYPES))
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    explicit = {name: _coerce(name, value) for name, value in explicit.items()}

    config = UploaderConfig()
    config = replace(config, **{k: v for k, v in explicit.items() if k in ("cwd", "env_file")})
    config = replace(config, cwd=str(Path(config.cwd).resolve()))

    if config.env_file:
        env_values = read_env_file(Path(config.cwd) / config.env_file)
        config = replace(config, **env_values)

    layered = {k: v for k, v in explicit.items() if k not in ("cwd", "env_file")}
    config = replace(config, **layered)

    return _validate(config)
