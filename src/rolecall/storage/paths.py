"""
Path utilities for Rolecall.

Provides consistent path resolution for configuration files.
"""

import os
from pathlib import Path

PROJECT_DIR_NAME = ".rolecall"


def get_rolecall_home() -> Path:
    """
    Get the Rolecall home directory.

    Resolution order:
    1. ROLECALL_HOME environment variable
    2. Default: ~/.rolecall

    Returns:
        Path to the Rolecall home directory.
    """
    env_home = os.environ.get("ROLECALL_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path.home() / PROJECT_DIR_NAME


def get_global_config_path() -> Path:
    """
    Get the path to the global configuration file.

    Returns:
        Path to ~/.rolecall/config.yaml
    """
    return get_rolecall_home() / "config.yaml"


def get_profiles_dir() -> Path:
    """Get the profiles directory (~/.rolecall/profiles/)."""
    return get_rolecall_home() / "profiles"


def get_profile_path(profile_name: str) -> Path:
    """
    Get the path to a specific profile configuration file.

    Args:
        profile_name: Name of the profile.

    Returns:
        Path to ~/.rolecall/profiles/<name>.yaml
    """
    return get_profiles_dir() / f"{profile_name}.yaml"


def find_project_config(start_path: Path | None = None) -> Path | None:
    """
    Find the project configuration file by traversing up the directory tree.

    Looks for .rolecall/project.yaml starting from the given path
    (or current directory) and moving up to the root.

    Args:
        start_path: Starting directory to search from. Defaults to cwd.

    Returns:
        Path to the project config if found, None otherwise.
    """
    current = Path.cwd() if start_path is None else Path(start_path).resolve()

    while True:
        project_config = current / PROJECT_DIR_NAME / "project.yaml"
        if project_config.exists():
            return project_config
        if current == current.parent:
            return None
        current = current.parent
