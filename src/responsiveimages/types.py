from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

from .errors import InvalidConfigError

FORMAT_IMG = "img"
FORMAT_PICTURE = "picture"
FORMATS = (FORMAT_IMG, FORMAT_PICTURE)

SOURCE_SINGLE = "single"
SOURCE_MULTIPLE = "multiple"
SOURCE_NONE = "none"

# Keys whose presence marks a `definition` object as a single flat definition.
RESERVED_DEFINITION_KEYS = ("method", "argument_sets", "dimension_sets", "media", "sizes")

ArgumentList = Tuple[Any, ...]


def normalize_format(value: Any, *, set_name: Optional[str] = None) -> str:
    fmt = str(value).strip().lower() if isinstance(value, str) else None
    if fmt not in FORMATS:
        raise InvalidConfigError(f'Invalid format "{value}" specified for set "{set_name}"', set_name=set_name)
    return fmt


def _as_string_list(value: Any, *, key: str, set_name: Optional[str]) -> Tuple[str, ...]:
    if value is None:
        return ()
    # A bare scalar is allowed when there is only one entry.
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise InvalidConfigError(
            f'The "{key}" configuration for set "{set_name}" must be a string or a list of strings',
            set_name=set_name,
        )
    out = []
    for item in value:
        if not isinstance(item, str):
            raise InvalidConfigError(
                f'The "{key}" configuration for set "{set_name}" contains a non-string value: {item!r}',
                set_name=set_name,
            )
        out.append(item)
    return tuple(out)


@dataclass(frozen=True)
class SourceDefinition:
    """Canonical `{method, argument_sets, sizes, media}` shape every config variant expands into.

    `method` stays `None` when the config leaves it out; the global default method is
    applied when the definition is turned into a `Source`.
    """

    argument_sets: Tuple[ArgumentList, ...]
    method: Optional[str] = None
    sizes: Tuple[str, ...] = ()
    media: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.argument_sets:
            raise InvalidConfigError("A source definition needs at least one argument set.")
        for args in self.argument_sets:
            if not args:
                raise InvalidConfigError("A source definition cannot contain an empty argument set.")
        if self.method is not None and not str(self.method).strip():
            raise InvalidConfigError("A source definition method cannot be blank.")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], *, set_name: Optional[str] = None) -> "SourceDefinition":
        if not isinstance(raw, Mapping):
            raise InvalidConfigError(
                f'The "definition" configuration for set "{set_name}" must be an object', set_name=set_name
            )

        argument_sets = raw.get("argument_sets")
        if argument_sets is None:
            argument_sets = raw.get("dimension_sets")
        if not isinstance(argument_sets, (list, tuple)) or not argument_sets:
            raise InvalidConfigError(
                f'The "definition" configuration for set "{set_name}" does not have any "argument_sets" defined',
                set_name=set_name,
            )

        normalized = []
        for i, args in enumerate(argument_sets):
            if not isinstance(args, (list, tuple)) or not args:
                raise InvalidConfigError(
                    f'Argument set [{i}] for set "{set_name}" must be a non-empty list, got {args!r}',
                    set_name=set_name,
                )
            normalized.append(tuple(args))

        method = raw.get("method")
        if method is not None and (not isinstance(method, str) or not method.strip()):
            raise InvalidConfigError(
                f'The "method" configuration for set "{set_name}" must be a non-empty string', set_name=set_name
            )

        return cls(
            argument_sets=tuple(normalized),
            method=method,
            sizes=_as_string_list(raw.get("sizes"), key="sizes", set_name=set_name),
            media=_as_string_list(raw.get("media"), key="media", set_name=set_name),
        )


@dataclass(frozen=True)
class DefaultImageOverride:
    """Call-time arguments for the default image, e.g. `("Fill", 800, 600)` or `(400, 300)`."""

    method: Optional[str] = None
    dimensions: Optional[ArgumentList] = None

    @classmethod
    def parse(cls, args: Optional[Sequence[Any]]) -> "DefaultImageOverride":
        args = tuple(args or ())
        if not args:
            return cls()
        if isinstance(args[0], str):
            rest = args[1:]
            return cls(method=args[0], dimensions=rest if rest else None)
        return cls(dimensions=args)
