"""
Dot-notation path lookup for JSON values
"""
import json
from typing import Any


def get_path_value(obj: Any, path: str) -> Any:
    """
    Walk a parsed JSON value along a dot-separated path

    Dict keys are matched by name, list items by integer index
    ("items.0.name"). A missing step yields None instead of raising.

    Args:
        obj: Parsed JSON value
        path: Dot-separated path

    Returns:
        Value at path, or None
    """
    current = obj
    for part in path.split('.'):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list):
            try:
                index = int(part)
            except ValueError:
                return None
            if -len(current) <= index < len(current):
                current = current[index]
            else:
                return None
        else:
            return None
    return current


def parse_json_value(value: Any, what: str = "JSON input") -> Any:
    """
    Parse a JSON string; other values are returned unchanged

    Raises:
        ValueError: If value is a string that is not valid JSON
    """
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid {what}: {e.msg} (line {e.lineno}, column {e.colno})") from None
