"""File utility functions for sqlprep."""

from pathlib import Path


def read_pattern_file(file_path: Path) -> str:
    """
    Read a pattern file and return its contents as a string.

    A single trailing newline is dropped so that a pattern saved by an
    editor renders the same as one typed on the command line.

    Args:
        file_path: Path to the pattern file to read

    Returns:
        The contents of the file as a string

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the path is not a file
        PermissionError: If the file cannot be read
        UnicodeDecodeError: If the file encoding is not UTF-8
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Pattern file not found: {file_path}")

    if not file_path.is_file():
        raise ValueError(f"Path is not a file: {file_path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise PermissionError(f"Cannot read file {file_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise UnicodeDecodeError(
            e.encoding,
            e.object,
            e.start,
            e.end,
            f"File {file_path} is not valid UTF-8: {e.reason}",
        ) from e

    if content.endswith("\n"):
        content = content[:-1]
        if content.endswith("\r"):
            content = content[:-1]
    return content
