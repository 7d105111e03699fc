"""
Static per-platform settings loaded from config/platforms.yml
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

CONFIG_PATH = Path(__file__).parent.parent / "config" / "platforms.yml"


@lru_cache()
def get_platform_settings() -> Dict[str, Dict[str, Any]]:
    """
    Load platform settings from config/platforms.yml with environment variable substitution.
    """
    text = CONFIG_PATH.read_text()
    text = os.path.expandvars(text)
    return yaml.safe_load(text)


def get_platform_setting(platform: str) -> Dict[str, Any]:
    """Settings block for one platform"""
    settings = get_platform_settings()
    if platform not in settings:
        raise ValueError(f"Unsupported platform: {platform}")
    return settings[platform]
