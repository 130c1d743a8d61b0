# convergraph/utils.py
"""
Utility functions for configuration loading and creation.
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional

import yaml

from .config import ConvergraphConfig
from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)

# Sections accepted in grouped config files; keys inside are config field names.
CONFIG_SECTIONS = ("analysis", "input", "processing", "output")

# CLI destination -> config field
ARGUMENT_FIELDS = {
    "conservation_threshold": "conservation_threshold",
    "minimum_cooccurrence_support": "minimum_cooccurrence_support",
    "minimum_cooccurrence_frequency": "minimum_cooccurrence_frequency",
    "sequence_column": "sequence_column",
    "gap_policy": "gap_policy",
    "output_format": "output_format",
    "max_workers": "max_workers",
    "chunk_size": "chunk_size",
}


def load_config_file(config_path: str) -> ConvergraphConfig:
    """Load configuration from a YAML or JSON file"""
    path = Path(config_path)
    if not path.is_file():
        raise InvalidParameterError("config", str(path), "file does not exist")

    with path.open('r') as f:
        try:
            if path.suffix.lower() == '.json':
                config_dict = json.load(f)
            else:
                config_dict = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise InvalidParameterError("config", str(path), f"unparseable file: {e}") from e

    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise InvalidParameterError("config", str(path), "expected a mapping at top level")

    logger.info(f"Loaded configuration from: {path}")
    return apply_config_dict(ConvergraphConfig(), config_dict)


def apply_config_dict(config: ConvergraphConfig, config_dict: Dict) -> ConvergraphConfig:
    """Overlay flat or sectioned settings onto a config, warning about unknown keys."""
    known = set(ConvergraphConfig.field_names())
    for key, value in config_dict.items():
        if key in CONFIG_SECTIONS and isinstance(value, dict):
            apply_config_dict(config, value)
        elif key in known:
            setattr(config, key, value)
        else:
            logger.warning(f"Unknown configuration parameter: {key}")
    return config


def create_config_from_args(args: argparse.Namespace,
                            base: Optional[ConvergraphConfig] = None) -> ConvergraphConfig:
    """Create configuration from command line arguments"""
    config = base or ConvergraphConfig()

    # Update config with provided arguments
    for dest, field_name in ARGUMENT_FIELDS.items():
        value = getattr(args, dest, None)
        if value is not None:
            setattr(config, field_name, value)

    if getattr(args, 'query_has_header', False):
        config.query_has_header = True
    if isinstance(config.sequence_column, str) and config.sequence_column.isdigit():
        config.sequence_column = int(config.sequence_column)

    return config.validate()
