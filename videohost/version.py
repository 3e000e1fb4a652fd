"""Resolve the running application version.

Installed builds read the version from distribution metadata; source
checkouts fall back to ``APP_VERSION`` from the environment and finally to
``0.0.0-dev``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as pkg_version
import os

PACKAGE_NAME = "videohost-fastapi-backend"

try:
    __version__: str = pkg_version(PACKAGE_NAME)
except PackageNotFoundError:  # running from a source checkout
    __version__ = os.getenv("APP_VERSION", "0.0.0-dev")

__all__ = ["__version__", "PACKAGE_NAME"]
