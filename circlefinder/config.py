"""
Configuration management for circlefinder
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

DEFAULT_CONFIG = {
    "edge": {
        "threshold": None
    },
    "accumulator": {
        "radius_step": 0.5,
        "max_chunk_elements": 1000000,
        "object_polarity": "bright"
    },
    "peaks": {
        "median_filter_size": 5
    },
    "detection": {
        "sensitivity": 0.85,
        "small_radius_warning": 5
    }
}


def merge_config(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a copy of base with the sections in overrides applied on top."""
    merged = copy.deepcopy(base)
    if not overrides:
        return merged

    for section, values in overrides.items():
        if section not in merged:
            raise ValueError(f"Unknown config section: {section}")
        if not isinstance(values, dict):
            raise ValueError(f"Config section '{section}' must be a mapping")
        for key, value in values.items():
            if key not in merged[section]:
                raise ValueError(f"Unknown config key: {section}.{key}")
            merged[section][key] = value

    return merged


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        path: YAML file with any subset of the DEFAULT_CONFIG sections

    Returns:
        Defaults merged with the file contents
    """
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(path, 'r') as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    return merge_config(DEFAULT_CONFIG, overrides)
