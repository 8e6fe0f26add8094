from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, BinaryIO, Literal, TextIO

import yaml

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # <3.11

from .command_config import CommandConfig, ExecConfig, RequiredParameter
from .exceptions import ConfigLoadError, ConfigValidationError

logger = logging.getLogger(__name__)

ConfigFormat = Literal["yaml", "toml", "json"]

_SUFFIX_FORMATS: dict[str, ConfigFormat] = {
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".json": "json",
}


def detect_format(path: str | os.PathLike[str]) -> ConfigFormat:
    """Pick a parser from the file suffix. Unknown suffixes are read as YAML."""
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), "yaml")


# =====================================================================
#   Deserialization
# =====================================================================
def parse_source(source: bytes | str, fmt: ConfigFormat = "yaml") -> dict[str, Any]:
    """
    Deserialize raw config text into a plain dict.

    Raises:
        ValueError: (or a parser-specific subclass) on malformed input
    """
    if fmt == "toml":
        text = source.decode("utf-8") if isinstance(source, bytes) else source
        return tomli.loads(text)
    if fmt == "json":
        data = json.loads(source)
    elif fmt == "yaml":
        try:
            data = yaml.safe_load(source)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}") from e
    else:
        raise ValueError(f"Unsupported config format: {fmt!r}")

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Top-level config must be a mapping, got {type(data).__name__}")
    return dict(data)


def _parse_required(raw: Any, where: str) -> list[RequiredParameter]:
    """
    Parse the `required` list. Each entry is a mapping of parameter name to
    regex, normally with a single key. A bare mapping is accepted too.
    """
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        raw = [raw]
    if not isinstance(raw, list):
        raise ConfigValidationError(f"{where}: 'required' must be a list of mappings")

    rules = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            raise ConfigValidationError(
                f"{where}: each 'required' entry must be a {{parameter: regex}} mapping"
            )
        for name, pattern in entry.items():
            rules.append(RequiredParameter(name=str(name), pattern=pattern))
    return rules


def build_config(data: Mapping[str, Any]) -> ExecConfig:
    """Turn a deserialized dict into a validated ExecConfig."""
    command_data = data.get("commands", [])
    if not isinstance(command_data, list):
        raise ConfigValidationError("'commands' must be a list")

    commands = []
    for position, cmd_dict in enumerate(command_data):
        where = f"commands[{position}]"
        if not isinstance(cmd_dict, Mapping):
            raise ConfigValidationError(f"{where} must be a mapping")
        unknown = set(cmd_dict) - {"command", "required", "timeout"}
        if unknown:
            raise ConfigValidationError(f"{where}: unknown keys {sorted(unknown)}")
        timeout = cmd_dict.get("timeout")
        commands.append(
            CommandConfig(
                command=cmd_dict.get("command") or "",
                required=_parse_required(cmd_dict.get("required"), where),
                timeout=0 if timeout is None else timeout,
            )
        )

    if not commands:
        raise ConfigValidationError("At least one command is required")

    default_timeout = data.get("default_timeout")
    return ExecConfig(
        commands=commands,
        name=str(data.get("name") or ""),
        version=str(data.get("version") or ""),
        default_timeout=0 if default_timeout is None else default_timeout,
    )


# =====================================================================
#   Main loader
# =====================================================================
def load_config(
    path: str | os.PathLike[str] | BinaryIO | TextIO,
    fmt: ConfigFormat | None = None,
) -> ExecConfig:
    """
    Load and validate a config file (YAML, TOML or JSON) into an ExecConfig.

    Args:
        path: Filesystem path or an open file object
        fmt: Force a format. Defaults to the path suffix, or YAML for file objects.

    Raises:
        ConfigLoadError: The source could not be read or deserialized
        ConfigValidationError: The document has the wrong shape
    """
    if hasattr(path, "read"):
        label = getattr(path, "name", "<stream>")
        fmt = fmt or "yaml"
        try:
            source = path.read()  # type: ignore[union-attr]
        except OSError as e:
            raise ConfigLoadError(str(label), str(e)) from e
    else:
        label = os.fspath(path)
        fmt = fmt or detect_format(label)
        try:
            source = Path(label).read_bytes()
        except OSError as e:
            logger.error(f"Cannot read config '{label}': {e}")
            raise ConfigLoadError(label, str(e)) from e

    try:
        data = parse_source(source, fmt)
    except (ValueError, UnicodeDecodeError) as e:
        logger.error(f"Cannot parse config '{label}' as {fmt}: {e}")
        raise ConfigLoadError(str(label), str(e)) from e

    try:
        config = build_config(data)
    except TypeError as e:
        raise ConfigValidationError(f"Invalid config in '{label}': {e}") from None

    logger.debug(
        f"Loaded config '{label}' (name={config.name!r}, version={config.version!r}, "
        f"{len(config.commands)} commands)"
    )
    return config
