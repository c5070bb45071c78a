"""Path safety checks for model-requested file writes."""

import re

_SEGMENT_SPLIT = re.compile(r"[\\/]")


def assert_safe_path(path):
    """Validate a workspace-relative path and return it with forward slashes.

    Checks run in order: empty, parent-directory segment, absolute.
    Raises ValueError on the first failing check.
    """
    if not path:
        raise ValueError("update_file action requires a path.")

    if ".." in _SEGMENT_SPLIT.split(path):
        raise ValueError(f"Path {path} is not allowed.")

    if path.startswith(("/", "\\")):
        raise ValueError(f"Path {path} must be relative.")

    return path.replace("\\", "/")
