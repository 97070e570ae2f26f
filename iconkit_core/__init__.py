"""Composite icon renderer: catalog lookup, layout, vector and raster output."""

from .catalog import (
    EMPTY_GLYPH,
    IconGlyph,
    IconPrimitive,
    has_icon,
    list_icon_names,
    resolve,
    search_icon_names,
)
from .layout import CompositeLayout, LayerGeometry, OverlayGeometry, compute_layout
from .raster import (
    GlyphDecodeError,
    RasterCompositor,
    decode_glyph_markup,
    encode_png,
    render_png,
    render_png_async,
    render_raster,
    render_raster_async,
)
from .style import BackgroundStyle, OverlayStyle, PrimaryStyle, StyleConfig, round_half_up
from .vector import VectorNode, compose_vector, glyph_markup, render_vector

__all__ = [
    "BackgroundStyle",
    "CompositeLayout",
    "EMPTY_GLYPH",
    "GlyphDecodeError",
    "IconGlyph",
    "IconPrimitive",
    "LayerGeometry",
    "OverlayGeometry",
    "OverlayStyle",
    "PrimaryStyle",
    "RasterCompositor",
    "StyleConfig",
    "VectorNode",
    "compose_vector",
    "compute_layout",
    "decode_glyph_markup",
    "encode_png",
    "glyph_markup",
    "has_icon",
    "list_icon_names",
    "render_png",
    "render_png_async",
    "render_raster",
    "render_raster_async",
    "render_vector",
    "resolve",
    "round_half_up",
    "search_icon_names",
]
