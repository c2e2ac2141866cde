"""
Rolecall - conversational directory administration.

Routes natural-language requests to a fixed catalog of remote
user, role and application operations, with bearer-credential
handling and labeled simulated fallbacks when a live call fails.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rolecall")
except PackageNotFoundError:
    __version__ = "0.3.0"

__all__ = [
    "__version__",
]
