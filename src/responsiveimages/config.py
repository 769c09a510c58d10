from __future__ import annotations

import copy
import json
import os
import pkgutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import InvalidConfigError, OptionalDependencyMissingError, SetNotFoundError
from .types import FORMAT_PICTURE, normalize_format

ENV_PREFIX = "RESPONSIVE_IMAGES_"

# Global keys that may sit next to `sets` in a config document.
_GLOBAL_KEYS = (
    "default_image_dimensions",
    "default_image_arguments",
    "default_arguments",
    "default_format",
    "default_method",
    "default_css_classes",
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    v = os.environ.get(key)
    if v is None:
        return default
    s = str(v).strip()
    return s if s else default


def _parse_dimensions(value: str) -> Tuple[Union[int, float], ...]:
    out: List[Union[int, float]] = []
    for part in str(value).split(","):
        p = part.strip()
        if not p:
            continue
        try:
            out.append(int(p))
        except ValueError:
            try:
                out.append(float(p))
            except ValueError as e:
                raise InvalidConfigError(f"Invalid default image dimension: {p!r}") from e
    return tuple(out)


@dataclass(frozen=True)
class GlobalDefaults:
    """Process-wide fallbacks, passed explicitly into resolution."""

    DEFAULT_ASSET_PATH = "assets/responsive_image_defaults.json"

    default_image_dimensions: Tuple[Any, ...] = (800, 600)
    default_format: str = FORMAT_PICTURE
    default_method: str = "ScaleWidth"
    default_css_classes: str = ""

    def __post_init__(self) -> None:
        normalize_format(self.default_format, set_name="<global defaults>")
        if not isinstance(self.default_method, str) or not self.default_method.strip():
            raise InvalidConfigError("Global default_method must be a non-empty string.")
        if not self.default_image_dimensions:
            raise InvalidConfigError("Global default_image_dimensions must not be empty.")

    @classmethod
    def load(cls, *, asset_path: Optional[str] = None) -> "GlobalDefaults":
        path = asset_path or cls.DEFAULT_ASSET_PATH
        raw = pkgutil.get_data("responsiveimages", path)
        if raw is None:
            raise RuntimeError(f"Defaults asset not found: responsiveimages/{path}")
        return cls.from_mapping(json.loads(raw.decode("utf-8")))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base: Optional["GlobalDefaults"] = None) -> "GlobalDefaults":
        if not isinstance(data, Mapping):
            raise InvalidConfigError("Global defaults must be an object.")
        out = base or cls()
        changes: Dict[str, Any] = {}

        dims = data.get("default_image_dimensions")
        if dims is None:
            dims = data.get("default_image_arguments")
        if dims is None:
            dims = data.get("default_arguments")
        if dims is not None:
            if not isinstance(dims, (list, tuple)) or not all(_is_number(d) for d in dims):
                raise InvalidConfigError(f"Global default image dimensions must be a list of numbers, got {dims!r}")
            changes["default_image_dimensions"] = tuple(dims)

        if data.get("default_format") is not None:
            changes["default_format"] = normalize_format(data["default_format"], set_name="<global defaults>")
        if data.get("default_method") is not None:
            changes["default_method"] = str(data["default_method"])
        if data.get("default_css_classes") is not None:
            changes["default_css_classes"] = str(data["default_css_classes"])

        return replace(out, **changes) if changes else out

    @classmethod
    def from_env(cls, base: Optional["GlobalDefaults"] = None) -> "GlobalDefaults":
        out = base or cls.load()
        changes: Dict[str, Any] = {}
        method = _env(f"{ENV_PREFIX}DEFAULT_METHOD")
        if method:
            changes["default_method"] = method
        fmt = _env(f"{ENV_PREFIX}DEFAULT_FORMAT")
        if fmt:
            changes["default_format"] = normalize_format(fmt, set_name="<environment>")
        css = os.environ.get(f"{ENV_PREFIX}DEFAULT_CSS_CLASSES")
        if css is not None:
            changes["default_css_classes"] = css.strip()
        dims = _env(f"{ENV_PREFIX}DEFAULT_IMAGE_DIMENSIONS")
        if dims:
            changes["default_image_dimensions"] = _parse_dimensions(dims)
        return replace(out, **changes) if changes else out


class ResponsiveSetsConfig:
    """Read-only, case-insensitive store of named responsive image sets.

    The raw mapping is copied on construction, so resolution never observes (or causes)
    later mutation of the caller's data and concurrent readers need no locking.
    """

    def __init__(self, sets: Optional[Mapping[str, Any]] = None):
        sets = sets if sets is not None else {}
        validate_sets_config(sets)
        raw = copy.deepcopy(dict(sets))
        index: Dict[str, Tuple[str, Dict[str, Any]]] = {}
        for name, cfg in raw.items():
            key = name.lower()
            if key in index:
                raise InvalidConfigError(
                    f'Responsive set names must be unique ignoring case: "{index[key][0]}" and "{name}"',
                    set_name=name,
                )
            index[key] = (name, cfg)
        self._sets = index

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ResponsiveSetsConfig":
        """Accept either `{"sets": {...}}` or a bare mapping of set name to set config."""
        if not isinstance(data, Mapping):
            raise InvalidConfigError("Responsive image config must be an object.")
        if "sets" in data and isinstance(data.get("sets"), Mapping):
            return cls(data["sets"])
        return cls(data)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "ResponsiveSetsConfig":
        p = Path(path).expanduser()
        return cls.from_mapping(json.loads(p.read_text(encoding="utf-8")))

    @classmethod
    def from_yaml_file(cls, path: Union[str, Path]) -> "ResponsiveSetsConfig":
        return cls.from_mapping(load_yaml_document(path))

    def names(self) -> List[str]:
        return sorted(self._sets.keys())

    def find(self, set_name: str) -> Optional[Dict[str, Any]]:
        hit = self._sets.get(str(set_name or "").lower())
        return hit[1] if hit is not None else None

    def get(self, set_name: str) -> Dict[str, Any]:
        cfg = self.find(set_name)
        if cfg is None:
            raise SetNotFoundError(set_name)
        return cfg

    def display_name(self, set_name: str) -> str:
        hit = self._sets.get(str(set_name or "").lower())
        return hit[0] if hit is not None else str(set_name)

    def __contains__(self, set_name: object) -> bool:
        return isinstance(set_name, str) and set_name.lower() in self._sets

    def __len__(self) -> int:
        return len(self._sets)


def load_yaml_document(path: Union[str, Path]) -> Any:
    try:
        import yaml  # type: ignore
    except Exception:  # pragma: no cover
        import sys

        raise OptionalDependencyMissingError(
            f"Optional dependency missing: PyYAML. Install via: pip install 'responsiveimages[yaml]' "
            f"(python={sys.executable})"
        )
    p = Path(path).expanduser()
    with p.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def load_config_document(data: Mapping[str, Any], *, base: Optional[GlobalDefaults] = None) -> Tuple[ResponsiveSetsConfig, GlobalDefaults]:
    """Split a full config document into the sets store and the global defaults next to it."""
    if not isinstance(data, Mapping):
        raise InvalidConfigError("Responsive image config must be an object.")
    defaults = base or GlobalDefaults.load()
    if "sets" not in data:
        return ResponsiveSetsConfig(data), defaults
    globals_raw = {k: data[k] for k in _GLOBAL_KEYS if k in data}
    if globals_raw:
        defaults = GlobalDefaults.from_mapping(globals_raw, base=defaults)
    return ResponsiveSetsConfig.from_mapping(data), defaults


_PathPart = Union[str, int]


def _fmt_path(parts: Sequence[_PathPart]) -> str:
    out: List[str] = []
    for p in parts:
        if isinstance(p, int):
            out.append(f"[{p}]")
        else:
            if not out:
                out.append(str(p))
            else:
                out.append(f"[{p!r}]")
    return "".join(out) if out else "<root>"


def validate_sets_config(sets: Any) -> None:
    """Validate the structure of a `sets` mapping (soft schema).

    Only field types are checked here; shape rules (exactly one of `definition`,
    `art_direction` or `arguments`) are enforced when a set is resolved, so a broken
    set does not prevent the others from rendering. Unknown keys are allowed.
    """
    if not isinstance(sets, Mapping):
        raise InvalidConfigError("Invalid responsive sets config: `sets` must be an object keyed by set name.")

    def _err(path: Sequence[_PathPart], msg: str, set_name: Optional[str] = None) -> None:
        raise InvalidConfigError(f"Invalid responsive sets config at {_fmt_path(path)}: {msg}", set_name=set_name)

    for name, cfg in sets.items():
        if not isinstance(name, str) or not name.strip():
            _err(["sets"], f"set name must be a non-empty string (got {name!r})")
        path: List[_PathPart] = ["sets", name]
        if not isinstance(cfg, Mapping):
            _err(path, "expected object", name)

        for key in ("method", "format", "css_classes", "template", "default_image_method"):
            value = cfg.get(key)
            if value is not None and not isinstance(value, str):
                _err([*path, key], "expected string", name)

        for key in ("default_image_dimensions", "default_image_arguments", "default_arguments"):
            value = cfg.get(key)
            if value is None:
                continue
            if not isinstance(value, (list, tuple)):
                _err([*path, key], "expected list of numbers", name)
            for i, item in enumerate(value):
                if not _is_number(item):
                    _err([*path, key, i], "expected number", name)

        definition = cfg.get("definition")
        if definition is not None and not isinstance(definition, (Mapping, list, tuple)):
            _err([*path, "definition"], "expected object or list", name)

        art_direction = cfg.get("art_direction")
        if art_direction is not None and not isinstance(art_direction, (list, tuple)):
            _err([*path, "art_direction"], "expected list", name)

        arguments = cfg.get("arguments")
        if arguments is not None and not isinstance(arguments, Mapping):
            _err([*path, "arguments"], "expected object keyed by media query", name)
