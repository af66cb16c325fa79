import copy
import os

import yaml


DEFAULT_CONFIG = {
    "project": {"name": "sentence-translator"},
    "api": {
        "base_url": "https://api.deepseek.com/v1",
        "model": "deepseek-chat",
        "request_timeout": 120,
    },
    "translation": {
        "batch_size": 10,
        "temperature": 0.3,
        "success_delay": 0.3,
        "failure_delay": 0.5,
        "dialect": "json",
    },
    "storage": {
        "path": "data/store.json",
        "glossary_key": "properNounIndex",
        "api_key_key": "deepseek_api_key",
    },
    "logging": {"file": ""},
}


def load_config(config_path="config.yaml"):
    """
    Load configuration from a YAML file, filling unset keys from DEFAULT_CONFIG.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return merge_defaults(config)


def merge_defaults(config=None):
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in (config or {}).items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def get_section(config, name):
    """Return one config section, defaults included, even for a partial or missing config."""
    return merge_defaults(config).get(name, {})
