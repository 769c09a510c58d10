from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from .capabilities import as_image_resource
from .config import GlobalDefaults, ResponsiveSetsConfig, load_config_document
from .resolver import ResolvedSet, SetConfigResolver
from .responsive_image import ResponsiveImage, ResponsiveImageAssembler
from .sources import ResampleCache, Source, SourceBuilder, SourceSet, SourceSetBuilder
from .types import SOURCE_SINGLE

logger = logging.getLogger(__name__)


@dataclass
class ResponsiveImageFactory:
    """Turns a named responsive set into a `ResponsiveImage` for a given base image.

    Intentionally thin: resolve, build sources, assemble. Every call builds a fresh object
    graph; the config objects are only read.
    """

    sets: ResponsiveSetsConfig = field(default_factory=ResponsiveSetsConfig)
    defaults: Optional[GlobalDefaults] = None

    def __post_init__(self) -> None:
        if self.defaults is None:
            self.defaults = GlobalDefaults.load()
        self._resolver = SetConfigResolver(self.sets, self.defaults)
        self._assembler = ResponsiveImageAssembler(self.defaults)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, defaults: Optional[GlobalDefaults] = None) -> "ResponsiveImageFactory":
        sets, resolved_defaults = load_config_document(data, base=defaults)
        return cls(sets=sets, defaults=resolved_defaults)

    def has_set(self, set_name: str) -> bool:
        return set_name in self.sets

    def list_sets(self) -> List[str]:
        return self.sets.names()

    def resolve(self, set_name: str) -> ResolvedSet:
        return self._resolver.resolve(set_name)

    def create(self, image: Any, set_name: str, *override_args: Any) -> ResponsiveImage:
        """Build the responsive image for `set_name`.

        `override_args` mirror a template call such as `Image.HeroSet("Fill", 800, 600)`
        or `Image.HeroSet(400, 300)` and only affect the default image.
        """
        resolved = self.resolve(set_name)
        resource = as_image_resource(image)
        cache = ResampleCache()
        builder = SourceBuilder(self.defaults, cache=cache)

        source: Union[Source, SourceSet]
        if resolved.kind == SOURCE_SINGLE:
            source = builder.build(resolved.definition, resource, set_name=resolved.set_name)
        else:
            source = SourceSetBuilder(builder).build(resolved.definitions, resource, set_name=resolved.set_name)

        out = self._assembler.assemble(resource, resolved, source, override_args, cache=cache)
        logger.debug(
            "Created responsive image for set %r (format=%s, sources=%s)",
            resolved.set_name,
            out.format,
            len(source) if isinstance(source, SourceSet) else 1,
        )
        return out
