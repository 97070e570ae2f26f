from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from typing import Literal

Shape = Literal["square", "rounded", "circle"]
SHAPES: tuple[str, ...] = ("square", "rounded", "circle")

DEFAULT_CANVAS_SIZE = 256


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties going toward +inf."""

    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PrimaryStyle:
    icon_id: str | None = None
    stroke_color: str = "#fafafa"
    stroke_width: float = 1.7
    scale: float = 1.0
    position_x: float = 50.0
    position_y: float = 50.0
    padding: int = 28


@dataclass(frozen=True)
class BackgroundStyle:
    color: str = "#262626"
    shape: Shape = "rounded"


@dataclass(frozen=True)
class OverlayStyle:
    icon_id: str
    stroke_color: str = "#fafafa"
    stroke_width: float = 1.7
    background_color: str | None = "#000000"
    background_alpha: float = 0.2
    shape: Shape = "rounded"
    corner_radius_fraction: float = 0.3
    scale_fraction: float = 0.34
    inner_padding_fraction: float = 0.18
    position_x: float = 75.0
    position_y: float = 25.0


@dataclass(frozen=True)
class StyleConfig:
    """Declarative description of one composite icon render."""

    canvas_size: int = DEFAULT_CANVAS_SIZE
    primary: PrimaryStyle = field(default_factory=PrimaryStyle)
    background: BackgroundStyle = field(default_factory=BackgroundStyle)
    overlay: OverlayStyle | None = None

    @property
    def has_overlay(self) -> bool:
        return self.overlay is not None and bool(self.overlay.icon_id)

    def without_overlay(self) -> "StyleConfig":
        return replace(self, overlay=None)

    def at_size(self, size: int) -> "StyleConfig":
        """Same composition expressed on a `size` x `size` canvas.

        Padding is the only absolute length in the config, so it is rescaled
        proportionally; everything else is already relative to the canvas.
        """

        if size <= 0:
            raise ValueError("size must be > 0")
        if size == self.canvas_size:
            return self
        padding = round_half_up(self.primary.padding / self.canvas_size * size)
        return replace(
            self,
            canvas_size=size,
            primary=replace(self.primary, padding=padding),
        )
