from __future__ import annotations

import asyncio
from dataclasses import dataclass
import io
import logging
import math
from typing import Iterable
import xml.etree.ElementTree as ET

import numpy as np
from PIL import Image
import torch

from .catalog import DESIGN_GRID, resolve
from .colors import Color, parse_color
from .layout import CompositeLayout, LayerGeometry, compute_layout
from .path_data import PathDataError, Point, Subpath, parse_numbers, parse_path
from .style import StyleConfig
from .vector import glyph_markup

LOGGER = logging.getLogger(__name__)


class GlyphDecodeError(RuntimeError):
    pass


@dataclass(frozen=True)
class _Paint:
    stroke: Color | None
    fill: Color | None
    stroke_width: float
    current_color: Color | None


@dataclass
class RasterCompositor:
    """Torch-backed premultiplied RGBA frame for one composite render."""

    _frame: torch.Tensor | None = None
    _grid_x: torch.Tensor | None = None
    _grid_y: torch.Tensor | None = None

    def begin_frame(self, size: int) -> None:
        if size <= 0:
            raise ValueError("frame size must be > 0")
        self._frame = torch.zeros((size, size, 4), dtype=torch.float32)
        self._grid_x, self._grid_y = _pixel_grid(size, size)

    def fill_shape(
        self,
        shape: str,
        *,
        x: float,
        y: float,
        size: float,
        color: Color,
        radius: float | None = None,
        opacity: float = 1.0,
    ) -> None:
        if self._frame is None or self._grid_x is None or self._grid_y is None:
            raise RuntimeError("begin_frame must be called before fill_shape")
        if size <= 0:
            return
        if shape == "circle":
            half = size / 2
            coverage = _disc_coverage(self._grid_x, self._grid_y, x + half, y + half, half)
        else:
            corner = radius if shape == "rounded" and radius is not None else 0.0
            coverage = _rounded_rect_coverage(self._grid_x, self._grid_y, x, y, size, size, corner)
        _over(self._frame, coverage, color, opacity)

    def draw_layer(self, layer: torch.Tensor, geometry: LayerGeometry) -> None:
        if self._frame is None:
            raise RuntimeError("begin_frame must be called before draw_layer")
        h, w, _ = layer.shape
        x = geometry.top_left_x
        y = geometry.top_left_y
        x0 = max(0, x)
        y0 = max(0, y)
        x1 = min(self._frame.shape[1], x + w)
        y1 = min(self._frame.shape[0], y + h)
        if x1 <= x0 or y1 <= y0:
            return
        patch = layer[y0 - y : y1 - y, x0 - x : x1 - x]
        view = self._frame[y0:y1, x0:x1]
        src_alpha = patch[:, :, 3:4]
        self._frame[y0:y1, x0:x1] = patch + view * (1.0 - src_alpha)

    def end_frame(self) -> torch.Tensor:
        if self._frame is None:
            raise RuntimeError("begin_frame must be called before end_frame")
        frame = self._frame
        alpha = frame[:, :, 3:4]
        rgb = torch.where(alpha > 0, frame[:, :, :3] / alpha.clamp(min=1e-12), torch.zeros_like(frame[:, :, :3]))
        out = torch.cat([rgb, alpha], dim=2).clamp(0.0, 1.0)
        self._frame = None
        self._grid_x = None
        self._grid_y = None
        return torch.round(out * 255.0).to(torch.uint8)


async def render_raster_async(config: StyleConfig, size: int) -> torch.Tensor:
    """Render `config` at `size` x `size` pixels as straight RGBA uint8.

    Geometry is recomputed at the target size rather than resampled, so corner
    radii, footprints and overlay placement stay proportional.
    """

    scaled = config.at_size(size)
    layout = compute_layout(scaled)

    primary = scaled.primary
    decodes = [
        _decode_layer(
            glyph_markup(resolve(primary.icon_id), primary.stroke_color, primary.stroke_width),
            layout.primary.size_px,
            label="primary",
        )
    ]
    overlay = scaled.overlay
    if layout.overlay is not None and overlay is not None:
        decodes.append(
            _decode_layer(
                glyph_markup(resolve(overlay.icon_id), overlay.stroke_color, overlay.stroke_width),
                layout.overlay.icon.size_px,
                label="overlay",
            )
        )
    layers = await asyncio.gather(*decodes)

    compositor = RasterCompositor()
    compositor.begin_frame(size)
    _paint_composite(compositor, scaled, layout, layers)
    return compositor.end_frame()


def render_raster(config: StyleConfig, size: int) -> torch.Tensor:
    return asyncio.run(render_raster_async(config, size))


def encode_png(frame: torch.Tensor) -> bytes:
    array = np.ascontiguousarray(frame.detach().cpu().numpy().astype(np.uint8))
    image = Image.fromarray(array)
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


async def render_png_async(config: StyleConfig, size: int) -> bytes:
    return encode_png(await render_raster_async(config, size))


def render_png(config: StyleConfig, size: int) -> bytes:
    return encode_png(render_raster(config, size))


def decode_glyph_markup(markup: str, size_px: int) -> torch.Tensor:
    """Rasterize a standalone glyph document into a premultiplied `size_px` square layer."""

    if size_px <= 0:
        raise GlyphDecodeError("glyph raster size must be > 0")
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as exc:
        raise GlyphDecodeError(f"glyph markup is not valid XML: {exc}") from exc

    try:
        view_box = parse_numbers(root.attrib.get("viewBox"))
    except PathDataError as exc:
        raise GlyphDecodeError(f"glyph viewBox is malformed: {exc}") from exc
    if len(view_box) != 4:
        view_box = [0.0, 0.0, float(DESIGN_GRID), float(DESIGN_GRID)]
    vb_x, vb_y, vb_w, vb_h = view_box
    if vb_w <= 0 or vb_h <= 0:
        raise GlyphDecodeError("glyph viewBox must have a positive size")
    sx = size_px / vb_w
    sy = size_px / vb_h

    layer = torch.zeros((size_px, size_px, 4), dtype=torch.float32)
    grid_x, grid_y = _pixel_grid(size_px, size_px)
    try:
        root_paint = _resolve_paint(root.attrib, None)
        for elem, paint in _walk(root, root_paint):
            _draw_element(layer, grid_x, grid_y, elem, paint, vb_x, vb_y, sx, sy)
    except (PathDataError, ValueError) as exc:
        raise GlyphDecodeError(str(exc)) from exc
    return layer


async def _decode_layer(markup: str | None, size_px: int, *, label: str) -> torch.Tensor | None:
    if markup is None or size_px <= 0:
        return None
    try:
        return await asyncio.to_thread(decode_glyph_markup, markup, size_px)
    except GlyphDecodeError as exc:
        LOGGER.warning("%s layer skipped, glyph decode failed: %s", label, exc)
        return None


def _paint_composite(
    compositor: RasterCompositor,
    config: StyleConfig,
    layout: CompositeLayout,
    layers: list[torch.Tensor | None],
) -> None:
    size = layout.canvas_size
    background = config.background
    compositor.fill_shape(
        background.shape,
        x=0,
        y=0,
        size=size,
        color=parse_color(background.color),
        radius=layout.background_corner_radius,
    )
    if layers[0] is not None:
        compositor.draw_layer(layers[0], layout.primary)

    overlay = config.overlay
    if layout.overlay is None or overlay is None:
        return
    if overlay.background_color and overlay.background_alpha > 0:
        box = layout.overlay.box
        compositor.fill_shape(
            overlay.shape,
            x=box.top_left_x,
            y=box.top_left_y,
            size=box.size_px,
            color=parse_color(overlay.background_color),
            radius=layout.overlay.corner_radius_px,
            opacity=overlay.background_alpha,
        )
    if len(layers) > 1 and layers[1] is not None:
        compositor.draw_layer(layers[1], layout.overlay.icon)


def _pixel_grid(width: int, height: int) -> tuple[torch.Tensor, torch.Tensor]:
    xs = torch.arange(width, dtype=torch.float32).add_(0.5).unsqueeze(0).expand(height, width)
    ys = torch.arange(height, dtype=torch.float32).add_(0.5).unsqueeze(1).expand(height, width)
    return xs, ys


def _over(dst: torch.Tensor, coverage: torch.Tensor, color: Color, opacity: float) -> None:
    alpha = coverage * (color[3] / 255.0) * max(0.0, min(1.0, opacity))
    alpha = alpha.unsqueeze(-1)
    rgb = torch.tensor([c / 255.0 for c in color[:3]], dtype=torch.float32).view(1, 1, 3)
    dst[:, :, :3] = rgb * alpha + dst[:, :, :3] * (1.0 - alpha)
    dst[:, :, 3:4] = alpha + dst[:, :, 3:4] * (1.0 - alpha)


def _disc_coverage(gx: torch.Tensor, gy: torch.Tensor, cx: float, cy: float, r: float) -> torch.Tensor:
    dist = torch.sqrt((gx - cx) ** 2 + (gy - cy) ** 2)
    return (r + 0.5 - dist).clamp(0.0, 1.0)


def _rounded_rect_coverage(
    gx: torch.Tensor,
    gy: torch.Tensor,
    x: float,
    y: float,
    w: float,
    h: float,
    radius: float,
) -> torch.Tensor:
    r = max(0.0, min(radius, w / 2, h / 2))
    half_w = w / 2
    half_h = h / 2
    qx = (gx - (x + half_w)).abs() - half_w + r
    qy = (gy - (y + half_h)).abs() - half_h + r
    outside = torch.sqrt(qx.clamp(min=0.0) ** 2 + qy.clamp(min=0.0) ** 2)
    inside = torch.maximum(qx, qy).clamp(max=0.0)
    sd = outside + inside - r
    return (0.5 - sd).clamp(0.0, 1.0)


def _walk(elem: ET.Element, paint: _Paint) -> Iterable[tuple[ET.Element, _Paint]]:
    for child in elem:
        child_paint = _resolve_paint(child.attrib, paint)
        if _strip_namespace(child.tag) == "g":
            yield from _walk(child, child_paint)
        else:
            yield child, child_paint


def _resolve_paint(attrib: dict[str, str], parent: _Paint | None) -> _Paint:
    current = parent.current_color if parent is not None else None
    stroke = parent.stroke if parent is not None else None
    fill = parent.fill if parent is not None else (0, 0, 0, 255)
    stroke_width = parent.stroke_width if parent is not None else 1.0

    if "stroke" in attrib:
        stroke = _paint_value(attrib["stroke"], current)
        if parent is None and stroke is not None:
            # Root stroke is the glyph's own color; currentColor follows it.
            current = stroke
    if "fill" in attrib:
        fill = _paint_value(attrib["fill"], current)
    if "stroke-width" in attrib:
        stroke_width = _parse_float(attrib["stroke-width"], 1.0)
    opacity = _parse_float(attrib.get("opacity"), 1.0)
    if opacity < 1.0:
        stroke = _with_opacity(stroke, opacity)
        fill = _with_opacity(fill, opacity)
    return _Paint(stroke=stroke, fill=fill, stroke_width=stroke_width, current_color=current)


def _paint_value(value: str, current: Color | None) -> Color | None:
    value = value.strip()
    if value == "none":
        return None
    if value == "currentColor":
        return current
    return parse_color(value)


def _with_opacity(color: Color | None, opacity: float) -> Color | None:
    if color is None:
        return None
    r, g, b, a = color
    return (r, g, b, int(round(a * max(0.0, min(1.0, opacity)))))


def _draw_element(
    layer: torch.Tensor,
    gx: torch.Tensor,
    gy: torch.Tensor,
    elem: ET.Element,
    paint: _Paint,
    vb_x: float,
    vb_y: float,
    sx: float,
    sy: float,
) -> None:
    tag = _strip_namespace(elem.tag)
    attrib = elem.attrib
    half_width = paint.stroke_width * (abs(sx) + abs(sy)) * 0.25

    if tag == "circle":
        cx = (_parse_float(attrib.get("cx"), 0.0) - vb_x) * sx
        cy = (_parse_float(attrib.get("cy"), 0.0) - vb_y) * sy
        r = _parse_float(attrib.get("r"), 0.0) * (abs(sx) + abs(sy)) * 0.5
        if r <= 0:
            return
        dist = torch.sqrt((gx - cx) ** 2 + (gy - cy) ** 2)
        if paint.fill is not None:
            _over(layer, (r + 0.5 - dist).clamp(0.0, 1.0), paint.fill, 1.0)
        if paint.stroke is not None and half_width > 0:
            _over(layer, (half_width + 0.5 - (dist - r).abs()).clamp(0.0, 1.0), paint.stroke, 1.0)
        return

    subpaths = _element_subpaths(tag, attrib, max(abs(sx), abs(sy)))
    if not subpaths:
        return
    device = [
        Subpath(points=[((px - vb_x) * sx, (py - vb_y) * sy) for px, py in sp.points], closed=sp.closed)
        for sp in subpaths
    ]
    if paint.fill is not None:
        _over(layer, _fill_coverage(gx, gy, device), paint.fill, 1.0)
    if paint.stroke is not None and half_width > 0:
        _over(layer, _stroke_coverage(gx, gy, device, half_width), paint.stroke, 1.0)


def _element_subpaths(tag: str, attrib: dict[str, str], scale: float) -> list[Subpath]:
    """Element outline as polylines in user units, flattened for `scale` px per unit."""

    if tag == "path":
        return parse_path(attrib.get("d", ""), scale=scale)
    if tag == "line":
        return [
            Subpath(
                points=[
                    (_parse_float(attrib.get("x1"), 0.0), _parse_float(attrib.get("y1"), 0.0)),
                    (_parse_float(attrib.get("x2"), 0.0), _parse_float(attrib.get("y2"), 0.0)),
                ]
            )
        ]
    if tag in ("polyline", "polygon"):
        points = _parse_points(attrib.get("points"))
        if tag == "polygon" and points and points[-1] != points[0]:
            points.append(points[0])
        return [Subpath(points=points, closed=tag == "polygon")]
    if tag == "rect":
        return parse_path(_rect_path(attrib), scale=scale)
    if tag == "ellipse":
        cx = _parse_float(attrib.get("cx"), 0.0)
        cy = _parse_float(attrib.get("cy"), 0.0)
        rx = _parse_float(attrib.get("rx"), 0.0)
        ry = _parse_float(attrib.get("ry"), 0.0)
        if rx <= 0 or ry <= 0:
            return []
        return parse_path(
            f"M{cx - rx} {cy}A{rx} {ry} 0 1 0 {cx + rx} {cy}A{rx} {ry} 0 1 0 {cx - rx} {cy}Z",
            scale=scale,
        )
    return []


def _rect_path(attrib: dict[str, str]) -> str:
    x = _parse_float(attrib.get("x"), 0.0)
    y = _parse_float(attrib.get("y"), 0.0)
    w = _parse_float(attrib.get("width"), 0.0)
    h = _parse_float(attrib.get("height"), 0.0)
    if w <= 0 or h <= 0:
        return ""
    rx_raw = attrib.get("rx")
    ry_raw = attrib.get("ry")
    rx = _parse_float(rx_raw if rx_raw is not None else ry_raw, 0.0)
    ry = _parse_float(ry_raw if ry_raw is not None else rx_raw, 0.0)
    rx = max(0.0, min(rx, w / 2))
    ry = max(0.0, min(ry, h / 2))
    if rx == 0 or ry == 0:
        return f"M{x} {y}H{x + w}V{y + h}H{x}Z"
    return (
        f"M{x + rx} {y}H{x + w - rx}A{rx} {ry} 0 0 1 {x + w} {y + ry}"
        f"V{y + h - ry}A{rx} {ry} 0 0 1 {x + w - rx} {y + h}"
        f"H{x + rx}A{rx} {ry} 0 0 1 {x} {y + h - ry}"
        f"V{y + ry}A{rx} {ry} 0 0 1 {x + rx} {y}Z"
    )


def _stroke_coverage(
    gx: torch.Tensor,
    gy: torch.Tensor,
    subpaths: list[Subpath],
    half_width: float,
) -> torch.Tensor:
    height, width = gx.shape
    coverage = torch.zeros((height, width), dtype=torch.float32)
    reach = half_width + 1.0
    for sp in subpaths:
        points = sp.points
        if len(points) < 2:
            continue
        for (ax, ay), (bx, by) in zip(points, points[1:]):
            x0 = max(0, int(math.floor(min(ax, bx) - reach)))
            y0 = max(0, int(math.floor(min(ay, by) - reach)))
            x1 = min(width, int(math.ceil(max(ax, bx) + reach)) + 1)
            y1 = min(height, int(math.ceil(max(ay, by) + reach)) + 1)
            if x1 <= x0 or y1 <= y0:
                continue
            px = gx[y0:y1, x0:x1] - ax
            py = gy[y0:y1, x0:x1] - ay
            dx = bx - ax
            dy = by - ay
            length_sq = dx * dx + dy * dy
            if length_sq > 0:
                t = ((px * dx + py * dy) / length_sq).clamp(0.0, 1.0)
                px = px - t * dx
                py = py - t * dy
            dist = torch.sqrt(px * px + py * py)
            patch = (half_width + 0.5 - dist).clamp(0.0, 1.0)
            coverage[y0:y1, x0:x1] = torch.maximum(coverage[y0:y1, x0:x1], patch)
    return coverage


def _fill_coverage(gx: torch.Tensor, gy: torch.Tensor, subpaths: list[Subpath]) -> torch.Tensor:
    """Nonzero-winding inside test at pixel centers; open subpaths are closed implicitly."""

    winding = torch.zeros(gx.shape, dtype=torch.int32)
    for sp in subpaths:
        points = sp.points
        if len(points) < 3:
            continue
        for (ax, ay), (bx, by) in zip(points, points[1:] + points[:1]):
            if ay == by:
                continue
            cross = (bx - ax) * (gy - ay) - (gx - ax) * (by - ay)
            upward = (ay <= gy) & (by > gy) & (cross > 0)
            downward = (ay > gy) & (by <= gy) & (cross < 0)
            winding += upward.to(torch.int32) - downward.to(torch.int32)
    return (winding != 0).to(torch.float32)


def _strip_namespace(tag: str) -> str:
    return tag.rpartition("}")[2]


def _parse_float(value: str | None, default: float) -> float:
    text = (value or "").strip().removesuffix("px")
    return float(text) if text else default


def _parse_points(value: str | None) -> list[Point]:
    numbers = parse_numbers(value)
    return list(zip(numbers[0::2], numbers[1::2]))
