"""
Named browser profiles.

Each profile is one directory under the profile root holding the cookies and
local storage of one login identity. A profile is created on first launch and
only destroyed by ``reset_profile``.
"""
import re
import shutil
from pathlib import Path
from typing import Union

from error_handling import InputValidationError

DEFAULT_PROFILE = "default"

_PROFILE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def validate_profile_name(name: str) -> str:
    if not name or not _PROFILE_NAME.match(name) or name in (".", ".."):
        raise InputValidationError(
            f"Invalid profile name: {name!r} (use letters, digits, '.', '-' or '_')"
        )
    return name


def profile_path(root: Union[str, Path], name: str = DEFAULT_PROFILE) -> Path:
    """Resolve the directory of a named profile (not created here)."""
    return Path(root).expanduser().resolve() / validate_profile_name(name)


def list_profiles(root: Union[str, Path]) -> list[str]:
    root = Path(root).expanduser()
    if not root.is_dir():
        return []
    return sorted(p.name for p in root.iterdir() if p.is_dir())


def reset_profile(root: Union[str, Path], name: str) -> bool:
    """
    Delete a profile directory, logging that identity out.

    Returns:
        True if a profile was deleted, False if it did not exist
    """
    path = profile_path(root, name)
    if not path.is_dir():
        return False
    shutil.rmtree(path)
    return True
