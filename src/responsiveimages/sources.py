from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .capabilities import ImageResource, as_image_resource
from .config import GlobalDefaults
from .types import ArgumentList, SourceDefinition

logger = logging.getLogger(__name__)


def _freeze(value: Any) -> Hashable:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, Mapping):
        return tuple(sorted((str(k), _freeze(v)) for k, v in value.items()))
    hash(value)
    return value


class ResampleCache:
    """Memoizes `image.invoke(method, args)` within one resolution.

    Identical argument sets across sources (or the default image) are resampled once.
    Unhashable arguments bypass the cache.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[int, str, Hashable], Any] = {}
        self.hits = 0

    def invoke(self, image: ImageResource, method: str, args: Sequence[Any]) -> Any:
        try:
            key = (id(image), method, _freeze(args))
        except TypeError:
            return image.invoke(method, args)
        if key in self._entries:
            self.hits += 1
            logger.debug("Resample cache hit for %s%r", method, tuple(args))
            return self._entries[key]
        out = image.invoke(method, args)
        self._entries[key] = out
        return out

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class Source:
    """One `<source>` (or the `srcset` of an `<img>`): resampled variants plus sizes/media hints."""

    image: ImageResource
    method: str
    argument_sets: Tuple[ArgumentList, ...]
    sizes: Tuple[str, ...] = ()
    media: Tuple[str, ...] = ()
    cache: Optional[ResampleCache] = field(default=None, compare=False, repr=False)

    @property
    def resampled_variants(self) -> List[Any]:
        out: List[Any] = []
        for args in self.argument_sets:
            if self.cache is not None:
                out.append(self.cache.invoke(self.image, self.method, args))
            else:
                out.append(self.image.invoke(self.method, args))
        return out

    @property
    def sizes_descriptor(self) -> str:
        return ", ".join(self.sizes)

    @property
    def media_descriptor(self) -> str:
        return ", ".join(self.media)


@dataclass(frozen=True)
class SourceSet:
    """Ordered sources; order is media-query precedence in the rendered markup (first match wins)."""

    sources: Tuple[Source, ...] = ()

    def __iter__(self) -> Iterator[Source]:
        return iter(self.sources)

    def __len__(self) -> int:
        return len(self.sources)

    def __getitem__(self, index: int) -> Source:
        return self.sources[index]


class SourceBuilder:
    def __init__(self, defaults: Optional[GlobalDefaults] = None, *, cache: Optional[ResampleCache] = None):
        self._defaults = defaults or GlobalDefaults.load()
        self._cache = cache

    def build(
        self,
        definition: Union[SourceDefinition, Mapping[str, Any]],
        image: Any,
        *,
        set_name: Optional[str] = None,
    ) -> Source:
        if not isinstance(definition, SourceDefinition):
            # Raises InvalidConfigError when `argument_sets` is missing or empty.
            definition = SourceDefinition.from_mapping(definition, set_name=set_name)

        resource = as_image_resource(image)
        method = definition.method or self._defaults.default_method
        resource.require_capability(method)

        return Source(
            image=resource,
            method=method,
            argument_sets=definition.argument_sets,
            sizes=definition.sizes,
            media=definition.media,
            cache=self._cache,
        )


class SourceSetBuilder:
    def __init__(self, source_builder: SourceBuilder):
        self._source_builder = source_builder

    def build(
        self,
        definitions: Sequence[Union[SourceDefinition, Mapping[str, Any]]],
        image: Any,
        *,
        set_name: Optional[str] = None,
    ) -> SourceSet:
        resource = as_image_resource(image)
        return SourceSet(tuple(self._source_builder.build(d, resource, set_name=set_name) for d in definitions))
