"""Configuration loading."""

import os

import yaml

DEFAULTS = {
    "date_format": "yyyy-mm-dd",
    "sheet_name": None,
    "output_dir": None,
    "bookmark_id_attribute": "id",
    "log_level": "INFO",
}


def load_config(config_path=None):
    """Load configuration from a YAML file, merged over :data:`DEFAULTS`.

    A missing path or file gives the defaults.
    """
    config = dict(DEFAULTS)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Config file {config_path} must hold a mapping")
        config.update(user_config)
    return config
