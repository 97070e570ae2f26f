from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
from pathlib import Path
import re
import tomllib
from typing import Any, Mapping

from iconkit_core.style import (
    SHAPES,
    BackgroundStyle,
    OverlayStyle,
    PrimaryStyle,
    StyleConfig,
)

LOGGER = logging.getLogger(__name__)

CANVAS_SIZE = 256
HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class StudioSettings:
    """Editor state for one composition, as the settings panel holds it."""

    primary_icon: str = ""
    secondary_icon: str = ""
    bg_color: str = "#262626"
    shape: str = "rounded"
    padding: int = 28
    base_scale: float = 1.0
    base_pos_x: float = 50.0
    base_pos_y: float = 50.0
    primary_stroke: str = "#fafafa"
    primary_stroke_width: float = 1.7
    secondary_stroke: str = "#fafafa"
    secondary_stroke_width: float = 1.7
    overlay_bg: str = "#000000"
    overlay_bg_alpha: float = 0.2
    overlay_shape: str = "rounded"
    overlay_radius: float = 0.3
    overlay_scale: float = 0.34
    overlay_padding: float = 0.18
    overlay_pos_x: float = 75.0
    overlay_pos_y: float = 25.0
    extra_sizes: tuple[int, ...] = ()


DEFAULT_SETTINGS = StudioSettings()

_COLOR_FIELDS = ("bg_color", "primary_stroke", "secondary_stroke", "overlay_bg")
_SHAPE_FIELDS = ("shape", "overlay_shape")
_ICON_FIELDS = ("primary_icon", "secondary_icon")

# Slider ranges of the editor panel.
_NUMERIC_RANGES: dict[str, tuple[float, float]] = {
    "padding": (12, 44),
    "base_scale": (0.6, 1.2),
    "base_pos_x": (0, 100),
    "base_pos_y": (0, 100),
    "primary_stroke_width": (1, 3.5),
    "secondary_stroke_width": (1, 3.5),
    "overlay_bg_alpha": (0, 1),
    "overlay_radius": (0.05, 0.5),
    "overlay_scale": (0.2, 0.5),
    "overlay_padding": (0.08, 0.3),
    "overlay_pos_x": (0, 100),
    "overlay_pos_y": (0, 100),
}


def coerce_color(value: Any, fallback: str) -> str:
    """Return `value` if it is strict hex color text, else `fallback`."""

    if isinstance(value, str) and HEX_COLOR.match(value.strip()):
        return value.strip()
    return fallback


def validate_settings(overrides: Mapping[str, Any] | None = None) -> StudioSettings:
    """Merge `overrides` over the defaults, clamping numbers and repairing colors."""

    raw: dict[str, Any] = asdict(DEFAULT_SETTINGS)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown setting: {key}")
            raw[key] = value

    for key in _COLOR_FIELDS:
        fallback = getattr(DEFAULT_SETTINGS, key)
        color = coerce_color(raw[key], fallback)
        if color != raw[key]:
            LOGGER.warning("setting `%s` is not a hex color (%r); using %s", key, raw[key], fallback)
        raw[key] = color

    for key in _SHAPE_FIELDS:
        if raw[key] not in SHAPES:
            raise ValueError(f"Setting `{key}` must be one of: {', '.join(SHAPES)}")

    for key in _ICON_FIELDS:
        if raw[key] is None:
            raw[key] = ""
        if not isinstance(raw[key], str):
            raise ValueError(f"Setting `{key}` must be a string")

    for key, (low, high) in _NUMERIC_RANGES.items():
        value = raw[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Setting `{key}` must be a number")
        clamped = max(low, min(high, float(value)))
        if clamped != float(value):
            LOGGER.warning("setting `%s`=%s clamped to %s", key, value, clamped)
        raw[key] = clamped
    raw["padding"] = int(round(raw["padding"]))

    extra = raw["extra_sizes"]
    if isinstance(extra, (str, bytes)) or not isinstance(extra, (list, tuple)):
        raise ValueError("Setting `extra_sizes` must be a list of integers")
    if any(isinstance(v, bool) or not isinstance(v, int) for v in extra):
        raise ValueError("Setting `extra_sizes` must be a list of integers")
    raw["extra_sizes"] = tuple(extra)

    return StudioSettings(**raw)


def load_settings(path: str | Path) -> StudioSettings:
    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"settings file not found: {settings_path}")
    with settings_path.open("rb") as f:
        raw = tomllib.load(f)
    return validate_settings(raw)


def build_style_config(settings: StudioSettings, canvas_size: int = CANVAS_SIZE) -> StyleConfig:
    overlay = None
    if settings.secondary_icon:
        overlay = OverlayStyle(
            icon_id=settings.secondary_icon,
            stroke_color=settings.secondary_stroke,
            stroke_width=settings.secondary_stroke_width,
            background_color=settings.overlay_bg,
            background_alpha=settings.overlay_bg_alpha,
            shape=settings.overlay_shape,  # type: ignore[arg-type]
            corner_radius_fraction=settings.overlay_radius,
            scale_fraction=settings.overlay_scale,
            inner_padding_fraction=settings.overlay_padding,
            position_x=settings.overlay_pos_x,
            position_y=settings.overlay_pos_y,
        )
    return StyleConfig(
        canvas_size=canvas_size,
        primary=PrimaryStyle(
            icon_id=settings.primary_icon or None,
            stroke_color=settings.primary_stroke,
            stroke_width=settings.primary_stroke_width,
            scale=settings.base_scale,
            position_x=settings.base_pos_x,
            position_y=settings.base_pos_y,
            padding=settings.padding,
        ),
        background=BackgroundStyle(color=settings.bg_color, shape=settings.shape),  # type: ignore[arg-type]
        overlay=overlay,
    )
