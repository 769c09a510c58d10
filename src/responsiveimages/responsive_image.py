from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .capabilities import ImageResource, as_image_resource
from .config import GlobalDefaults
from .errors import InvalidConfigError
from .resolver import ResolvedSet
from .sources import ResampleCache, Source, SourceSet
from .types import (
    FORMAT_IMG,
    FORMATS,
    SOURCE_MULTIPLE,
    SOURCE_NONE,
    SOURCE_SINGLE,
    DefaultImageOverride,
)

CSS_BASE_CLASS = "ResponsiveImage"


def _first_present(*values: Any) -> Any:
    for v in values:
        if v is not None:
            return v
    return None


def resolve_default_image_method(
    override: Optional[str],
    set_config: Optional[Mapping[str, Any]],
    default_method: str,
) -> str:
    """Call-time method, then the set's `default_image_method` / `method`, then the global default."""
    cfg = set_config or {}
    return _first_present(override, cfg.get("default_image_method"), cfg.get("method"), default_method)


def resolve_default_image_dimensions(
    override: Optional[Sequence[Any]],
    set_config: Optional[Mapping[str, Any]],
    default_dimensions: Sequence[Any],
) -> Tuple[Any, ...]:
    cfg = set_config or {}
    value = _first_present(
        override,
        cfg.get("default_image_dimensions"),
        cfg.get("default_image_arguments"),
        cfg.get("default_arguments"),
        default_dimensions,
    )
    return tuple(value)


def resolve_css_classes(set_config: Optional[Mapping[str, Any]], default_css_classes: Optional[str]) -> Optional[str]:
    # No call-time tier: classes are only changed after assembly via `with_css_classes`.
    cfg = set_config or {}
    return _first_present(cfg.get("css_classes"), default_css_classes)


@dataclass(frozen=True)
class ResponsiveImage:
    """Render-ready model of one adaptive image: an `<img>` or a `<picture>` with sources."""

    image: ImageResource
    format: str
    default_image_dimensions: Tuple[Any, ...]
    default_image_method: str
    source: Union[Source, SourceSet, None] = None
    css_classes: Optional[str] = None
    default_css_classes: Optional[str] = None
    template: Optional[str] = None
    cache: Optional[ResampleCache] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.format not in FORMATS:
            raise InvalidConfigError(f'Invalid format "{self.format}"')
        if isinstance(self.source, SourceSet) and len(self.source) > 1 and self.format == FORMAT_IMG:
            raise InvalidConfigError('The "img" format cannot carry multiple sources; use "picture".')

    @property
    def source_kind(self) -> str:
        if isinstance(self.source, SourceSet):
            return SOURCE_MULTIPLE
        if isinstance(self.source, Source):
            return SOURCE_SINGLE
        return SOURCE_NONE

    def is_source_iterable(self) -> bool:
        return isinstance(self.source, SourceSet)

    def get_default_image(self) -> Any:
        if self.cache is not None:
            return self.cache.invoke(self.image, self.default_image_method, self.default_image_dimensions)
        return self.image.invoke(self.default_image_method, self.default_image_dimensions)

    def with_css_classes(self, css_classes: Optional[str]) -> "ResponsiveImage":
        return replace(self, css_classes=css_classes)

    def css_class_string(self) -> str:
        classes = self.css_classes if self.css_classes is not None else self.default_css_classes
        return " ".join(f"{CSS_BASE_CLASS} {classes or ''}".split())


class ResponsiveImageAssembler:
    """Resolves the default-image precedence chains and assembles the final `ResponsiveImage`."""

    def __init__(self, defaults: Optional[GlobalDefaults] = None):
        self._defaults = defaults or GlobalDefaults.load()

    def assemble(
        self,
        image: Any,
        resolved: ResolvedSet,
        source: Union[Source, SourceSet, None],
        override_args: Optional[Sequence[Any]] = None,
        *,
        cache: Optional[ResampleCache] = None,
    ) -> ResponsiveImage:
        override = DefaultImageOverride.parse(override_args)
        config = resolved.config
        resource = as_image_resource(image)

        method = resolve_default_image_method(override.method, config, self._defaults.default_method)
        resource.require_capability(method)

        return ResponsiveImage(
            image=resource,
            format=resolved.format,
            source=source,
            default_image_dimensions=resolve_default_image_dimensions(
                override.dimensions, config, self._defaults.default_image_dimensions
            ),
            default_image_method=method,
            css_classes=resolve_css_classes(config, self._defaults.default_css_classes),
            default_css_classes=self._defaults.default_css_classes,
            template=config.get("template"),
            cache=cache,
        )
