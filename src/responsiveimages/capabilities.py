from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from .errors import UnsupportedMethodError


class ImageResource(ABC):
    """Capability surface of a base image: named transform methods that return resampled images.

    Pixel work is never done here; subclasses delegate to whatever image engine owns the asset.
    """

    @abstractmethod
    def has_capability(self, method: str) -> bool: ...

    @abstractmethod
    def resample(self, method: str, args: Sequence[Any]) -> Any:
        """Run `method` with `args`. Only called after `has_capability(method)` passed."""

    def invoke(self, method: str, args: Sequence[Any]) -> Any:
        self.require_capability(method)
        return self.resample(method, list(args))

    def require_capability(self, method: str) -> None:
        if not self.has_capability(method):
            raise UnsupportedMethodError(method, type(self).__name__)


class AttributeImageResource(ImageResource):
    """Adapts any object whose public methods are image transforms, e.g. `image.Fill(800, 600)`."""

    def __init__(self, image: Any):
        self._image = image

    @property
    def image(self) -> Any:
        return self._image

    def has_capability(self, method: str) -> bool:
        name = str(method or "")
        if not name or name.startswith("_"):
            return False
        return callable(getattr(self._image, name, None))

    def resample(self, method: str, args: Sequence[Any]) -> Any:
        return getattr(self._image, method)(*args)

    def require_capability(self, method: str) -> None:
        if not self.has_capability(method):
            raise UnsupportedMethodError(method, type(self._image).__name__)


def as_image_resource(image: Any) -> ImageResource:
    if isinstance(image, ImageResource):
        return image
    return AttributeImageResource(image)
