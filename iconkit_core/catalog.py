from __future__ import annotations

from dataclasses import dataclass, field
from importlib import resources
import json
import logging
import re
from types import MappingProxyType
from typing import Any, Mapping

LOGGER = logging.getLogger(__name__)

ICON_NAME_PATTERN = re.compile(r"^[A-Z][A-Za-z0-9]*$")
RESERVED_META_NAME = "Icon"
DESIGN_GRID = 24

_CATALOG_RESOURCE = "data/icons.json"


@dataclass(frozen=True)
class IconPrimitive:
    kind: str
    attributes: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IconGlyph:
    """Ordered primitive list on the 24x24 design grid; order is paint order."""

    name: str
    primitives: tuple[IconPrimitive, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.primitives


EMPTY_GLYPH = IconGlyph(name="")


def resolve(icon_id: str | None) -> IconGlyph:
    """Return the glyph for `icon_id`, or `EMPTY_GLYPH` when nothing matches."""

    if not icon_id:
        return EMPTY_GLYPH
    return _CATALOG.get(icon_id, EMPTY_GLYPH)


def has_icon(name: str) -> bool:
    return name in _CATALOG


def list_icon_names() -> tuple[str, ...]:
    return _SORTED_NAMES


def search_icon_names(query: str) -> tuple[str, ...]:
    needle = query.strip().lower()
    if not needle:
        return _SORTED_NAMES
    return tuple(name for name in _SORTED_NAMES if needle in name.lower())


def glyph_root_attributes() -> Mapping[str, str]:
    """Default root attributes of a standalone glyph document (the `Icon` entry)."""

    return _ROOT_ATTRIBUTES


def _load_raw_catalog() -> dict[str, Any]:
    text = resources.files("iconkit_core").joinpath(_CATALOG_RESOURCE).read_text(encoding="utf-8")
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("icon catalog must be a JSON object")
    return raw


def _coerce_glyph(name: str, nodes: Any) -> IconGlyph:
    if not isinstance(nodes, list):
        raise ValueError(f"icon `{name}` must be a list of [tag, attributes] nodes")
    primitives: list[IconPrimitive] = []
    for node in nodes:
        if not isinstance(node, list) or len(node) != 2:
            raise ValueError(f"icon `{name}` has a malformed node: {node!r}")
        tag, attrs = node
        if not isinstance(tag, str) or not isinstance(attrs, dict):
            raise ValueError(f"icon `{name}` has a malformed node: {node!r}")
        primitives.append(
            IconPrimitive(
                kind=tag,
                attributes=MappingProxyType({str(k): str(v) for k, v in attrs.items()}),
            )
        )
    return IconGlyph(name=name, primitives=tuple(primitives))


def _build_catalog(raw: Mapping[str, Any]) -> tuple[dict[str, IconGlyph], dict[str, str]]:
    glyphs: dict[str, IconGlyph] = {}
    root_attributes: dict[str, str] = {}
    for name, value in raw.items():
        if name == RESERVED_META_NAME:
            root_attributes = {str(k): str(v) for k, v in dict(value).items()}
            continue
        if not ICON_NAME_PATTERN.match(name):
            continue
        glyphs[name] = _coerce_glyph(name, value)
    return glyphs, root_attributes


_glyphs, _root = _build_catalog(_load_raw_catalog())
_CATALOG: Mapping[str, IconGlyph] = MappingProxyType(_glyphs)
_ROOT_ATTRIBUTES: Mapping[str, str] = MappingProxyType(_root)
_SORTED_NAMES: tuple[str, ...] = tuple(sorted(_CATALOG, key=lambda n: (n.lower(), n)))
del _glyphs, _root
LOGGER.debug("icon catalog loaded: %d icons", len(_SORTED_NAMES))
