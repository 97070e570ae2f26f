from __future__ import annotations

from dataclasses import dataclass

from .style import StyleConfig, round_half_up

MIN_ICON_SIZE_PX = 4
BACKGROUND_CORNER_FRACTION = 0.22


@dataclass(frozen=True)
class LayerGeometry:
    """Placed square; `anchor` is the rounded center it was placed around."""

    top_left_x: int
    top_left_y: int
    size_px: int
    anchor: tuple[int, int]

    @property
    def box_center(self) -> tuple[float, float]:
        half = self.size_px / 2
        return (self.top_left_x + half, self.top_left_y + half)


@dataclass(frozen=True)
class OverlayGeometry:
    box: LayerGeometry
    icon: LayerGeometry
    inner_padding_px: int
    corner_radius_px: int | None = None


@dataclass(frozen=True)
class CompositeLayout:
    canvas_size: int
    primary: LayerGeometry
    overlay: OverlayGeometry | None = None
    background_corner_radius: float | None = None


def compute_layout(config: StyleConfig) -> CompositeLayout:
    """Absolute pixel geometry for every layer of `config`.

    Centers are rounded first and top-left corners are rounded again from the
    exact half size, so both output paths land on the same pixels.
    """

    size = config.canvas_size
    primary = config.primary
    footprint = max(MIN_ICON_SIZE_PX, round_half_up((size - primary.padding * 2) * primary.scale))
    primary_geometry = _place(size, footprint, primary.position_x, primary.position_y)

    background_radius = None
    if config.background.shape == "rounded":
        background_radius = size * BACKGROUND_CORNER_FRACTION

    overlay_geometry = None
    if config.has_overlay:
        overlay_geometry = _overlay_geometry(config)

    return CompositeLayout(
        canvas_size=size,
        primary=primary_geometry,
        overlay=overlay_geometry,
        background_corner_radius=background_radius,
    )


def _overlay_geometry(config: StyleConfig) -> OverlayGeometry:
    overlay = config.overlay
    assert overlay is not None
    size = config.canvas_size
    box_size = round_half_up(size * overlay.scale_fraction)
    box = _place(size, box_size, overlay.position_x, overlay.position_y)
    inner_padding = round_half_up(box_size * overlay.inner_padding_fraction)
    icon = LayerGeometry(
        top_left_x=box.top_left_x + inner_padding,
        top_left_y=box.top_left_y + inner_padding,
        size_px=max(0, box_size - inner_padding * 2),
        anchor=box.anchor,
    )
    radius = None
    if overlay.shape == "rounded":
        radius = round_half_up(box_size * overlay.corner_radius_fraction)
    return OverlayGeometry(box=box, icon=icon, inner_padding_px=inner_padding, corner_radius_px=radius)


def _place(canvas_size: int, size_px: int, position_x: float, position_y: float) -> LayerGeometry:
    center_x = round_half_up(canvas_size * (position_x / 100))
    center_y = round_half_up(canvas_size * (position_y / 100))
    return LayerGeometry(
        top_left_x=round_half_up(center_x - size_px / 2),
        top_left_y=round_half_up(center_y - size_px / 2),
        size_px=size_px,
        anchor=(center_x, center_y),
    )
