from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .config import GlobalDefaults, ResponsiveSetsConfig
from .errors import InvalidConfigError
from .types import (
    FORMAT_IMG,
    FORMAT_PICTURE,
    RESERVED_DEFINITION_KEYS,
    SOURCE_MULTIPLE,
    SOURCE_SINGLE,
    SourceDefinition,
    normalize_format,
)

logger = logging.getLogger(__name__)

SHAPE_DEFINITION = "definition"
SHAPE_ART_DIRECTION = "art_direction"
SHAPE_ARGUMENTS = "arguments"
SHAPES = (SHAPE_DEFINITION, SHAPE_ART_DIRECTION, SHAPE_ARGUMENTS)

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def has_associative_keys(definitions: Any) -> bool:
    """True when a collection holds a single associative definition rather than a list of them.

    Lists and tuples are always sequential. A mapping is sequential only when its keys are
    exactly `0..n-1` in order; an empty collection counts as sequential.
    """
    if isinstance(definitions, Mapping):
        if not definitions:
            return False
        return list(definitions.keys()) != list(range(len(definitions)))
    return False


def is_flat_definition(definition: Any) -> bool:
    return isinstance(definition, Mapping) and any(k in definition for k in RESERVED_DEFINITION_KEYS)


def _is_numeric_key(key: Any) -> bool:
    if isinstance(key, bool):
        return False
    if isinstance(key, (int, float)):
        return True
    return isinstance(key, str) and bool(_NUMERIC_RE.match(key))


@dataclass(frozen=True)
class ResolvedSet:
    """Output of set resolution: the render format plus canonical source definitions.

    `kind` says whether `definitions` feeds a single `Source` or an ordered `SourceSet`.
    """

    set_name: str
    format: str
    kind: str
    definitions: Tuple[SourceDefinition, ...]
    config: Mapping[str, Any]
    shape: str = SHAPE_DEFINITION

    @property
    def definition(self) -> SourceDefinition:
        if self.kind != SOURCE_SINGLE:
            raise ValueError(f'Set "{self.set_name}" resolves to {len(self.definitions)} source definitions.')
        return self.definitions[0]

    @property
    def is_art_direction(self) -> bool:
        return self.kind == SOURCE_MULTIPLE


class SetConfigResolver:
    """Looks up a named set, classifies its config shape and expands it into canonical definitions."""

    def __init__(self, sets: ResponsiveSetsConfig, defaults: Optional[GlobalDefaults] = None):
        self._sets = sets
        self._defaults = defaults or GlobalDefaults.load()

    @property
    def sets(self) -> ResponsiveSetsConfig:
        return self._sets

    @property
    def defaults(self) -> GlobalDefaults:
        return self._defaults

    def resolve(self, set_name: str) -> ResolvedSet:
        config = self._sets.get(set_name)
        name = self._sets.display_name(set_name)
        shape = self._classify(name, config)

        if shape == SHAPE_ARGUMENTS:
            definitions = self._expand_arguments(name, config["arguments"], config.get("method"))
            return self._multiple(name, config, definitions, shape)

        if shape == SHAPE_ART_DIRECTION:
            definitions = self._expand_art_direction(name, config["art_direction"])
            return self._multiple(name, config, definitions, shape)

        definition = config["definition"]
        if not is_flat_definition(definition):
            # No reserved keys at the top level: a list of sub-definitions (art direction).
            entries = list(definition.values()) if isinstance(definition, Mapping) else list(definition)
            definitions = self._expand_art_direction(name, entries)
            return self._multiple(name, config, definitions, SHAPE_ART_DIRECTION)

        raw_format = config.get("format")
        fmt = normalize_format(raw_format if raw_format is not None else self._defaults.default_format, set_name=name)
        logger.debug("Set %r resolved as a flat definition (format=%s)", name, fmt)
        return ResolvedSet(
            set_name=name,
            format=fmt,
            kind=SOURCE_SINGLE,
            definitions=(SourceDefinition.from_mapping(definition, set_name=name),),
            config=config,
            shape=shape,
        )

    def _classify(self, name: str, config: Mapping[str, Any]) -> str:
        present = [key for key in SHAPES if config.get(key) is not None]
        if not present:
            raise InvalidConfigError(
                f'Responsive set "{name}" has no "definition", "art_direction" or "arguments" defined in its config',
                set_name=name,
            )
        if len(present) > 1:
            raise InvalidConfigError(
                f'Responsive set "{name}" must define only one of "definition", "art_direction" or "arguments" '
                f"(found: {', '.join(present)})",
                set_name=name,
            )
        return present[0]

    def _multiple(
        self,
        name: str,
        config: Mapping[str, Any],
        definitions: List[SourceDefinition],
        shape: str,
    ) -> ResolvedSet:
        configured = config.get("format")
        if configured is not None and str(configured).strip().lower() == FORMAT_IMG:
            logger.warning('Set %r configures format "img" but has multiple sources; using "picture"', name)
        logger.debug("Set %r resolved as %s with %d sources", name, shape, len(definitions))
        return ResolvedSet(
            set_name=name,
            format=FORMAT_PICTURE,
            kind=SOURCE_MULTIPLE,
            definitions=tuple(definitions),
            config=config,
            shape=shape,
        )

    def _expand_art_direction(self, name: str, entries: Sequence[Any]) -> List[SourceDefinition]:
        if not isinstance(entries, (list, tuple)) or not entries:
            raise InvalidConfigError(f'Responsive set "{name}" has an empty art direction list', set_name=name)

        out: List[SourceDefinition] = []
        for entry in entries:
            if isinstance(entry, Mapping):
                out.append(SourceDefinition.from_mapping(entry, set_name=name))
                continue

            if not isinstance(entry, str):
                raise InvalidConfigError(
                    f'Invalid definition values provided for set "{name}", only string or object allowed',
                    set_name=name,
                )

            # Raises SetNotFoundError for unknown references.
            referenced = self._sets.get(entry)
            ref_name = self._sets.display_name(entry)
            ref_definition = referenced.get("definition")
            if not is_flat_definition(ref_definition):
                raise InvalidConfigError(
                    f'Responsive set "{ref_name}" (referenced by "{name}") has no flat "definition" defined in its config',
                    set_name=ref_name,
                )
            out.append(SourceDefinition.from_mapping(ref_definition, set_name=ref_name))
        return out

    def _expand_arguments(self, name: str, arguments: Mapping[Any, Any], method: Optional[str]) -> List[SourceDefinition]:
        if not isinstance(arguments, Mapping) or not arguments:
            raise InvalidConfigError(f'Responsive set "{name}" has no "arguments" defined', set_name=name)

        out: List[SourceDefinition] = []
        for query, args in arguments.items():
            if _is_numeric_key(query) or not query or (isinstance(query, str) and not query.strip()):
                raise InvalidConfigError(
                    f"Responsive set {name} has an empty media query ({query!r}). Please check your config format",
                    set_name=name,
                )
            if not isinstance(args, (list, tuple)) or not args:
                raise InvalidConfigError(
                    f"Responsive set {name} doesn't have any arguments provided for the query: {query}",
                    set_name=name,
                )
            out.append(SourceDefinition(method=method, media=(str(query),), argument_sets=(tuple(args),)))
        return out


def resolve_set(
    sets_config: ResponsiveSetsConfig,
    set_name: str,
    defaults: Optional[GlobalDefaults] = None,
) -> ResolvedSet:
    return SetConfigResolver(sets_config, defaults).resolve(set_name)

