from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping
import xml.etree.ElementTree as ET

from .catalog import DESIGN_GRID, IconGlyph, glyph_root_attributes, resolve
from .layout import CompositeLayout, LayerGeometry, compute_layout
from .style import StyleConfig

SVG_NS = "http://www.w3.org/2000/svg"

# Framework bookkeeping carried by catalog nodes; never part of the markup.
_INTERNAL_ATTRIBUTES = frozenset({"children", "ref", "key"})


@dataclass
class VectorNode:
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list["VectorNode"] = field(default_factory=list)

    def append(self, child: "VectorNode") -> "VectorNode":
        self.children.append(child)
        return child

    def iter(self, tag: str | None = None) -> Iterator["VectorNode"]:
        if tag is None or self.tag == tag:
            yield self
        for child in self.children:
            yield from child.iter(tag)

    def to_element(self) -> ET.Element:
        elem = ET.Element(self.tag, dict(self.attributes))
        for child in self.children:
            elem.append(child.to_element())
        return elem

    def to_markup(self) -> str:
        return ET.tostring(self.to_element(), encoding="unicode")


def format_number(value: float | int) -> str:
    """Shortest round-trip text for a number; integral values drop the `.0`."""

    if isinstance(value, bool):
        raise TypeError("boolean is not a number attribute")
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(float(value))


def compose_vector(config: StyleConfig, layout: CompositeLayout | None = None) -> VectorNode:
    """Build the composite SVG tree for `config` in paint order."""

    if layout is None:
        layout = compute_layout(config)
    size = layout.canvas_size
    root = VectorNode(
        "svg",
        {
            "xmlns": SVG_NS,
            "width": format_number(size),
            "height": format_number(size),
            "viewBox": f"0 0 {size} {size}",
        },
    )
    root.append(_background_node(config, layout))

    primary = config.primary
    group = _glyph_group(
        resolve(primary.icon_id),
        layout.primary,
        stroke_color=primary.stroke_color,
        stroke_width=primary.stroke_width,
    )
    if group is not None:
        root.append(group)

    overlay = config.overlay
    if layout.overlay is not None and overlay is not None:
        if overlay.background_color and overlay.background_alpha > 0:
            shape = _shape_node(
                overlay.shape,
                layout.overlay.box,
                radius=layout.overlay.corner_radius_px,
                fill=overlay.background_color,
            )
            shape.attributes["opacity"] = format_number(overlay.background_alpha)
            root.append(shape)
        group = _glyph_group(
            resolve(overlay.icon_id),
            layout.overlay.icon,
            stroke_color=overlay.stroke_color,
            stroke_width=overlay.stroke_width,
        )
        if group is not None:
            root.append(group)
    return root


def render_vector(config: StyleConfig) -> str:
    return compose_vector(config).to_markup()


def glyph_document(glyph: IconGlyph, stroke_color: str, stroke_width: float) -> VectorNode | None:
    if glyph.is_empty:
        return None
    root = VectorNode("svg", {"xmlns": SVG_NS})
    for key, value in glyph_root_attributes().items():
        if key != "xmlns":
            root.attributes[key] = value
    root.attributes.update(_stroke_attributes(stroke_color, stroke_width))
    for primitive_node in _primitive_nodes(glyph):
        root.append(primitive_node)
    return root


def glyph_markup(glyph: IconGlyph, stroke_color: str, stroke_width: float) -> str | None:
    """Standalone 24x24 SVG for one glyph, or None when there is nothing to draw."""

    doc = glyph_document(glyph, stroke_color, stroke_width)
    return doc.to_markup() if doc is not None else None


def _background_node(config: StyleConfig, layout: CompositeLayout) -> VectorNode:
    size = layout.canvas_size
    background = config.background
    if background.shape == "circle":
        half = size / 2
        return VectorNode(
            "circle",
            {
                "cx": format_number(half),
                "cy": format_number(half),
                "r": format_number(half),
                "fill": background.color,
            },
        )
    node = VectorNode(
        "rect",
        {
            "x": "0",
            "y": "0",
            "width": format_number(size),
            "height": format_number(size),
            "fill": background.color,
        },
    )
    if layout.background_corner_radius is not None:
        node.attributes["rx"] = format_number(layout.background_corner_radius)
        node.attributes["ry"] = format_number(layout.background_corner_radius)
    return node


def _shape_node(shape: str, box: LayerGeometry, *, radius: int | None, fill: str) -> VectorNode:
    if shape == "circle":
        cx, cy = box.box_center
        return VectorNode(
            "circle",
            {
                "cx": format_number(cx),
                "cy": format_number(cy),
                "r": format_number(box.size_px / 2),
                "fill": fill,
            },
        )
    node = VectorNode(
        "rect",
        {
            "x": format_number(box.top_left_x),
            "y": format_number(box.top_left_y),
            "width": format_number(box.size_px),
            "height": format_number(box.size_px),
        },
    )
    if shape == "rounded" and radius is not None:
        node.attributes["rx"] = format_number(radius)
        node.attributes["ry"] = format_number(radius)
    node.attributes["fill"] = fill
    return node


def _glyph_group(
    glyph: IconGlyph,
    geometry: LayerGeometry,
    *,
    stroke_color: str,
    stroke_width: float,
) -> VectorNode | None:
    if glyph.is_empty:
        return None
    scale = geometry.size_px / DESIGN_GRID
    group = VectorNode(
        "g",
        {
            "transform": (
                f"translate({format_number(geometry.top_left_x)}, {format_number(geometry.top_left_y)}) "
                f"scale({format_number(scale)})"
            ),
        },
    )
    group.attributes.update(_stroke_attributes(stroke_color, stroke_width))
    for node in _primitive_nodes(glyph):
        group.append(node)
    return group


def _stroke_attributes(stroke_color: str, stroke_width: float) -> Mapping[str, str]:
    return {
        "stroke": stroke_color,
        "fill": "none",
        "stroke-width": format_number(stroke_width),
        "stroke-linecap": "round",
        "stroke-linejoin": "round",
    }


def _primitive_nodes(glyph: IconGlyph) -> Iterator[VectorNode]:
    for primitive in glyph.primitives:
        attrs = {k: v for k, v in primitive.attributes.items() if k not in _INTERNAL_ATTRIBUTES}
        yield VectorNode(primitive.kind, attrs)
