from __future__ import annotations

from foldersize.config.schema import AppConfig
from foldersize.services.duplicates import DEFAULT_EXCLUDED_NAMES


def default_config() -> AppConfig:
    return AppConfig(excluded_dir_names=list(DEFAULT_EXCLUDED_NAMES))
