"""Configuration, selection and export around the iconkit renderer."""

from .export import (
    DEFAULT_SIZES,
    EXTRA_SIZES,
    ExportBundle,
    export_bundle,
    export_png_set_async,
    export_svg,
    png_filename,
    resolve_export_sizes,
)
from .selection import IconSelection
from .settings import (
    CANVAS_SIZE,
    DEFAULT_SETTINGS,
    StudioSettings,
    build_style_config,
    coerce_color,
    load_settings,
    validate_settings,
)

__all__ = [
    "CANVAS_SIZE",
    "DEFAULT_SETTINGS",
    "DEFAULT_SIZES",
    "EXTRA_SIZES",
    "ExportBundle",
    "IconSelection",
    "StudioSettings",
    "build_style_config",
    "coerce_color",
    "export_bundle",
    "export_png_set_async",
    "export_svg",
    "load_settings",
    "png_filename",
    "resolve_export_sizes",
    "validate_settings",
]
