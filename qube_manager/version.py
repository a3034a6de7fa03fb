"""Build identification.

Release builds export QUBE_MANAGER_COMMIT and QUBE_MANAGER_BUILD_DATE; a
development checkout reports "unknown" for both.
"""

import os

from qube_manager import __version__

GIT_COMMIT = os.environ.get("QUBE_MANAGER_COMMIT", "unknown")
BUILD_DATE = os.environ.get("QUBE_MANAGER_BUILD_DATE", "unknown")


def version_string() -> str:
    """Return e.g. ``qube-manager 0.1.0 (commit: abc123, built: 2026-01-01)``."""
    return f"qube-manager {__version__} (commit: {GIT_COMMIT}, built: {BUILD_DATE})"
