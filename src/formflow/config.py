"""Compiler settings and their YAML loader.

Settings are read from a YAML mapping, either at an explicit path or at the
path named by the FORMFLOW_CONFIG environment variable:

    submit_text: Continue
    textarea_rows: 4
    select_placeholder: Choose an option...
    default_max_file_size_mb: 10
    max_file_size_ceiling_mb: 100
    export_version: "1.0"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

import yaml

from formflow.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FORMFLOW_CONFIG"


@dataclass(frozen=True)
class CompilerSettings:
    """
    Knobs for schema compilation, authoring lint and export.

    Properties:
        submit_text: Label of the submit button in every presentation schema
        textarea_rows: Row count for multiline widgets
        select_placeholder: Label of the blank first dropdown option
        default_max_file_size_mb: File limit when a file field sets none
        max_file_size_ceiling_mb: Authoring lint flags limits above this
        export_version: Version stamped on flow exports
    """

    submit_text: str = "Continue"
    textarea_rows: int = 4
    select_placeholder: str = "Choose an option..."
    default_max_file_size_mb: float = 10
    max_file_size_ceiling_mb: float = 100
    export_version: str = "1.0"


DEFAULT_SETTINGS = CompilerSettings()


def load_settings(path: Optional[Union[str, Path]] = None) -> CompilerSettings:
    """
    Load settings from YAML.

    Args:
        path: Settings file; falls back to $FORMFLOW_CONFIG, then defaults

    Raises:
        ConfigError: if the file cannot be read or is not a mapping
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return DEFAULT_SETTINGS

    try:
        with open(path) as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read settings from {path}: {e}") from e

    if data is None:
        return DEFAULT_SETTINGS
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    known = {f.name for f in fields(CompilerSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown settings in %s: %s", path, ", ".join(map(str, unknown)))

    return replace(DEFAULT_SETTINGS, **{k: v for k, v in data.items() if k in known})
