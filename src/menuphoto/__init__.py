"""Menu Photo Studio - upload menu photos and restyle them with an external image model."""

__version__ = "0.1.0"

from menuphoto.core.config import MenuPhotoConfig

__all__ = [
    "MenuPhotoConfig",
    "__version__",
]
