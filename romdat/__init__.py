"""romdat - Convert a Mupen64Plus ROM catalogue into compact embedded records."""

__version__ = "0.1.0"

from .core.entries import Entry, DirectConfig, ReferenceConfig, SaveKind
from .core.errors import CatalogueError
from .core.pipeline import BuildResult, build_catalogue

__all__ = [
    "Entry",
    "DirectConfig",
    "ReferenceConfig",
    "SaveKind",
    "CatalogueError",
    "BuildResult",
    "build_catalogue",
    "__version__",
]
