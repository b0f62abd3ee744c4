import os
import re
from typing import List


def normalize_windows_path(path_str: str) -> str:
    """Collapse doubled backslashes produced by escaped Windows paths."""
    if not path_str:
        return path_str
    return re.sub(r'\\\\', r'\\', path_str)


def validate_file_path(file_path: str, allowed_dirs: List[str]) -> bool:
    """
    Validate that a file path is within one of the allowed directories.
    Protects against path traversal attacks.

    Args:
        file_path: The file path to validate
        allowed_dirs: List of allowed directory paths

    Returns:
        True if the path is valid and within allowed directories, False otherwise
    """
    if not file_path or not allowed_dirs:
        return False

    if '\x00' in file_path:
        return False

    # Reject explicit parent-directory segments
    parts = re.split(r'[\\/]+', file_path)
    if '..' in parts:
        return False

    try:
        abs_file_path = os.path.realpath(file_path)
    except (ValueError, OSError):
        return False

    for allowed_dir in allowed_dirs:
        try:
            abs_allowed_dir = os.path.realpath(allowed_dir)
            # commonpath verifies the file is inside the allowed directory
            common = os.path.commonpath([abs_file_path, abs_allowed_dir])
            if common == abs_allowed_dir and abs_file_path != abs_allowed_dir:
                return True
        except (ValueError, OSError):
            continue

    return False


def get_json_string(data, key: str) -> str:
    """
    Return data[key] unchanged, or '' when the body is not an object or
    the value is missing/not a string.
    """
    if not isinstance(data, dict):
        return ""
    value = data.get(key)
    if not isinstance(value, str):
        return ""
    return value


def get_json_text(data, key: str) -> str:
    """
    Return data[key] as text. None and '' count as missing and give '';
    other non-string values are stringified so they can never match a
    recognized keyword.
    """
    if not isinstance(data, dict):
        return ""
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
