"""Argument loading for the command line.

Positional arguments for a pattern can be given inline on the command
line (with basic type inference) or loaded from a JSON, YAML or TOML
file.
"""

import json
import tomllib
from pathlib import Path
from typing import Any, List, Optional


def load_arguments_file(path: Path) -> List[Any]:
    """Load a positional argument list from a JSON, YAML, or TOML file.

    JSON and YAML files must contain a top-level list. TOML cannot hold a
    bare list, so TOML files must define an ``args`` array.

    Args:
        path: Path to the arguments file.

    Returns:
        The list of arguments.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file format is not supported or cannot be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Arguments file not found: {path}")

    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json_file(path)
    elif suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    elif suffix == ".toml":
        return _load_toml_file(path)
    else:
        raise ValueError(
            f"Unsupported arguments file format: {suffix}. "
            "Use .json, .yaml, .yml, or .toml"
        )


def _load_json_file(path: Path) -> List[Any]:
    """Load arguments from a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise ValueError(
            f"Arguments file {path} must contain a JSON array, "
            f"got {type(data).__name__}"
        )
    return data


def _load_yaml_file(path: Path) -> List[Any]:
    """Load arguments from a YAML file.

    Requires PyYAML to be installed.
    """
    try:
        import yaml
    except ImportError:
        raise ValueError(
            f"Cannot load YAML file {path}: PyYAML is not installed. "
            "Install it with: pip install sql-prep[yaml]"
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return []

    if not isinstance(data, list):
        raise ValueError(
            f"Arguments file {path} must contain a YAML sequence, "
            f"got {type(data).__name__}"
        )
    return data


def _load_toml_file(path: Path) -> List[Any]:
    """Load arguments from the ``args`` array of a TOML file."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e

    args = data.get("args")
    if not isinstance(args, list):
        raise ValueError(f"Arguments file {path} must define an `args` array")
    return args


def parse_cli_arguments(
    raw_args: Optional[List[str]], infer: bool = True
) -> List[Any]:
    """Convert command line strings into pattern arguments.

    Supports basic type inference:
    - NULL: null, none (case-insensitive)
    - Booleans: true, false (case-insensitive)
    - Integers: 123
    - Floats: 12.34
    - Strings: everything else

    Args:
        raw_args: Argument strings in command line order.
        infer: If False, every argument is kept as a string.

    Returns:
        The list of converted arguments.
    """
    if not raw_args:
        return []
    if not infer:
        return list(raw_args)
    return [_infer_type(value) for value in raw_args]


def _infer_type(value: str) -> Any:
    """Infer the type of a string value.

    Args:
        value: The string value to parse.

    Returns:
        The value converted to the inferred type.
    """
    lowered = value.lower()

    if lowered in ("null", "none"):
        return None

    if lowered == "true":
        return True
    if lowered == "false":
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value
