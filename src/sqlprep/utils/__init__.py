"""Utility functions for sqlprep."""

from sqlprep.utils.config import ConfigSettings, find_config_file, load_config
from sqlprep.utils.file_utils import read_pattern_file

__all__ = [
    "ConfigSettings",
    "find_config_file",
    "load_config",
    "read_pattern_file",
]
