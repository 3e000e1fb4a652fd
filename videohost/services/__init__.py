"""Service layer package initializer.

Re-exports the service modules so callers can write
``from videohost.services import engagement, video_service``.
"""

from importlib import import_module
from types import ModuleType
from typing import TYPE_CHECKING

__all__ = [
    "engagement",
    "user_directory",
    "video_catalog",
    "video_service",
]

if TYPE_CHECKING:
    from . import engagement as engagement  # noqa: F401
    from . import user_directory as user_directory  # noqa: F401
    from . import video_catalog as video_catalog  # noqa: F401
    from . import video_service as video_service  # noqa: F401
else:
    # Import lazily to keep the import graph light.
    def __getattr__(name: str) -> ModuleType:  # noqa: D401
        if name in __all__:
            module = import_module(f"videohost.services.{name}")
            globals()[name] = module
            return module
        raise AttributeError(name)
