from __future__ import annotations

from typing import Optional


class ResponsiveImagesError(Exception):
    """Base exception for the responsiveimages package."""


class SetNotFoundError(ResponsiveImagesError):
    """Raised when a responsive set name is not present in the sets config."""

    def __init__(self, set_name: str, message: Optional[str] = None):
        self.set_name = str(set_name)
        super().__init__(message or f'Unable to find set matching "{set_name}"')


class InvalidConfigError(ResponsiveImagesError):
    """Raised when a set's configuration is missing required keys or is malformed."""

    def __init__(self, message: str, *, set_name: Optional[str] = None):
        self.set_name = set_name
        super().__init__(message)


class UnsupportedMethodError(ResponsiveImagesError):
    """Raised when a transform method is not available on the base image resource."""

    def __init__(self, method: str, image_type: Optional[str] = None):
        self.method = str(method)
        self.image_type = image_type
        owner = image_type or "Image resource"
        super().__init__(f"{owner} has no method {method}")


class OptionalDependencyMissingError(ResponsiveImagesError):
    """Raised when an optional config loader dependency is missing."""
