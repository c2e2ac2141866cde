"""Storage utilities for Rolecall."""

from rolecall.storage.paths import (
    find_project_config,
    get_global_config_path,
    get_profile_path,
    get_profiles_dir,
    get_rolecall_home,
)

__all__ = [
    "find_project_config",
    "get_global_config_path",
    "get_profile_path",
    "get_profiles_dir",
    "get_rolecall_home",
]
