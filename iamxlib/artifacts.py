"""
iamxlib.artifacts — Depth-limited JSON artifact writer.

Every artifact is a standalone JSON document. IAM responses are nested
structures of arbitrary depth, so each artifact category serializes with a
fixed nesting cap; containers beyond the cap are replaced by a short
placeholder string.

Zero dependency on utils.py — uses only stdlib.
"""

import datetime
import json
import logging
import os
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)

# Nesting caps per artifact category
OBJECT_DEPTH = 10
POLICY_DEPTH = 10
BOUNDARY_DEPTH = 3
SNAPSHOT_DEPTH = 5
TAGS_DEPTH = 5

USERS_SNAPSHOT_FILENAME = "users.json"


# ---------------------------------------------------------------------------
# Filenames
# ---------------------------------------------------------------------------


def user_filename(user_name: str) -> str:
    return f"user-{user_name}.json"


def permissions_boundary_filename(user_name: str) -> str:
    return f"user-permissions-boundary-{user_name}.json"


def attached_policies_filename(user_name: str) -> str:
    return f"user-attached-policies-{user_name}.json"


def inline_policy_filename(user_name: str, policy_name: str) -> str:
    return f"user-inline-policy-{user_name}-{policy_name}.json"


def tags_filename(user_name: str) -> str:
    return f"user-tags-{user_name}.json"


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _placeholder(value: Any) -> str:
    if isinstance(value, dict):
        return f"<dict: {len(value)} keys>"
    return f"<list: {len(value)} items>"


def _limit(value: Any, remaining: int) -> Any:
    if isinstance(value, dict):
        if remaining <= 0:
            return _placeholder(value)
        return {str(key): _limit(item, remaining - 1) for key, item in value.items()}

    if isinstance(value, (list, tuple, set, frozenset)):
        if remaining <= 0:
            return _placeholder(value)
        return [_limit(item, remaining - 1) for item in value]

    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()

    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    return str(value)


def limit_depth(value: Any, max_depth: int) -> Any:
    """
    Return a JSON-compatible copy of value with nesting capped at max_depth.

    A depth of 1 keeps the top-level container and its scalar members; any
    container found below the cap becomes ``"<dict: N keys>"`` or
    ``"<list: N items>"``. Datetimes become ISO-8601 strings and other
    non-JSON scalars are converted with str().

    Args:
        value: Value to convert (typically a boto3 response fragment)
        max_depth: Maximum number of container levels to keep (>= 1)

    Returns:
        JSON-compatible value

    Raises:
        ValueError: if max_depth is less than 1
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")
    return _limit(value, max_depth)


def to_json(value: Any, max_depth: int) -> str:
    """
    Serialize value to an indented JSON document at bounded depth.

    Key order follows the source mapping, so identical input always yields
    identical text.
    """
    return json.dumps(limit_depth(value, max_depth), indent=2, ensure_ascii=False) + "\n"


def write_artifact(path: Union[str, Path], value: Any, max_depth: int) -> Path:
    """
    Write value to path as a depth-limited JSON document.

    The document is written to a temporary sibling and moved into place, so a
    failed write never leaves a partial artifact. Existing files are
    overwritten.

    Args:
        path: Destination file
        value: Value to serialize
        max_depth: Nesting cap for this artifact category

    Returns:
        Path: The written file
    """
    path = Path(path)
    content = to_json(value, max_depth)

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError:
        if tmp_path.exists():
            tmp_path.unlink()
        raise

    logger.debug("Wrote %s (depth %d)", path, max_depth)
    return path
