"""responsiveimages: resolve named responsive image sets into render-ready models.

Only configuration resolution and model assembly live here. Resampling pixels and
rendering markup are left to the image resource and the template layer.
"""

from .capabilities import AttributeImageResource, ImageResource
from .config import GlobalDefaults, ResponsiveSetsConfig
from .errors import (
    InvalidConfigError,
    OptionalDependencyMissingError,
    ResponsiveImagesError,
    SetNotFoundError,
    UnsupportedMethodError,
)
from .factory import ResponsiveImageFactory
from .resolver import ResolvedSet, SetConfigResolver
from .responsive_image import ResponsiveImage, ResponsiveImageAssembler
from .sources import Source, SourceBuilder, SourceSet, SourceSetBuilder
from .types import FORMAT_IMG, FORMAT_PICTURE, SourceDefinition

__version__ = "0.1.0"

__all__ = [
    "ResponsiveImageFactory",
    "ResponsiveSetsConfig",
    "GlobalDefaults",
    "SetConfigResolver",
    "ResolvedSet",
    "ResponsiveImage",
    "ResponsiveImageAssembler",
    "Source",
    "SourceSet",
    "SourceBuilder",
    "SourceSetBuilder",
    "SourceDefinition",
    "ImageResource",
    "AttributeImageResource",
    "FORMAT_IMG",
    "FORMAT_PICTURE",
    "ResponsiveImagesError",
    "SetNotFoundError",
    "InvalidConfigError",
    "UnsupportedMethodError",
    "OptionalDependencyMissingError",
    "__version__",
]
