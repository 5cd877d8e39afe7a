"""Helpers for loading importcost configuration from TOML/JSON sources.

This module provides a single entry point `load_config` that accepts
various configuration sources:

* None -> default ImportCostConfig
* dict -> ImportCostConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings

Editor settings usually nest the options under an ``importCost`` table;
when such a table is present it is used as the configuration root.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError

from importcost.config import ImportCostConfig
from importcost.parsers.base import ConfigurationError

logger = logging.getLogger("importcost.runtime.config_loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]

_SECTION_KEYS = ("importCost", "importcost")


def _parse_text(text: str, fmt: str) -> Dict[str, Any]:
    try:
        data = json.loads(text) if fmt == "json" else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Invalid {fmt.upper()} configuration: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("Top-level configuration must be a mapping/dict")
    return data


def _guess_format(text: str) -> str:
    return "json" if text.lstrip().startswith(("{", "[")) else "toml"


def _section(data: Dict[str, Any]) -> Dict[str, Any]:
    for key in _SECTION_KEYS:
        section = data.get(key)
        if isinstance(section, dict):
            return section
    return data


def load_config(source: ConfigSource) -> ImportCostConfig:
    """Load ImportCostConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns ImportCostConfig.default()
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        ImportCostConfig instance.

    Raises:
        ConfigurationError: If the source cannot be parsed or validated.
    """
    if source is None:
        logger.debug("No config source provided; using default ImportCostConfig")
        return ImportCostConfig.default()

    if isinstance(source, dict):
        data = source
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if path.is_file():
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".toml", ".tml"}:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                fmt = _guess_format(text)
            logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        else:
            text = str(source)
            fmt = _guess_format(text)
            logger.info("Loading configuration from inline %s string", fmt)
        data = _parse_text(text, fmt)
    else:
        raise TypeError(f"Unsupported config source type: {type(source)!r}")

    try:
        return ImportCostConfig.from_dict(_section(data))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


__all__ = ["load_config"]
