"""Configuration management for sqlprep.

Loads configuration from sqlprep.toml in the current working directory.
"""

import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

console = Console(stderr=True)

CONFIG_FILE_NAME = "sqlprep.toml"


class ConfigSettings(BaseModel):
    """Configuration settings for sqlprep.

    All fields are optional. None values indicate the setting was not
    specified in the config file.
    """

    quote_char: Optional[str] = Field(
        None,
        min_length=1,
        max_length=1,
        description="Character wrapped around quoted text values",
    )
    utf8mb4: Optional[bool] = Field(
        None, description="Keep 4-byte UTF-8 characters in text values"
    )
    plugins: Optional[bool] = Field(
        None, description="Load types and modifiers from installed entry points"
    )


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find sqlprep.toml in the current working directory.

    Args:
        start_path: Starting directory to search for config file.
                   Defaults to current working directory.

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()

    config_path = start_path / CONFIG_FILE_NAME

    if config_path.exists() and config_path.is_file():
        return config_path

    return None


def load_config(config_path: Optional[Path] = None) -> ConfigSettings:
    """Load configuration from sqlprep.toml.

    Priority order:
    1. Explicit config_path parameter
    2. sqlprep.toml in current working directory
    3. Empty ConfigSettings (all None)

    Args:
        config_path: Optional explicit path to config file.
                    If not provided, searches current working directory.

    Returns:
        ConfigSettings with values from TOML file or None for unset fields.
        Always returns a valid ConfigSettings object, even on errors.

    Error Handling:
        - Missing file: Returns empty ConfigSettings (silent)
        - Malformed TOML: Warns user and returns empty ConfigSettings
        - Invalid values: Warns user and returns empty ConfigSettings
        - Unknown keys: Ignored (forward compatibility)
    """
    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        return ConfigSettings()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        section = toml_data.get("sqlprep", {})

        try:
            return ConfigSettings(**section)
        except ValidationError as e:
            console.print(
                f"[yellow]Warning:[/yellow] Invalid configuration in {config_path}: {e}",
            )
            console.print("[yellow]Using default settings[/yellow]")
            return ConfigSettings()

    except tomllib.TOMLDecodeError as e:
        console.print(
            f"[yellow]Warning:[/yellow] Failed to parse {config_path}: {e}",
        )
        console.print("[yellow]Using default settings[/yellow]")
        return ConfigSettings()

    except OSError as e:
        console.print(
            f"[yellow]Warning:[/yellow] Could not read {config_path}: {e}",
        )
        console.print("[yellow]Using default settings[/yellow]")
        return ConfigSettings()
