from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Iterable, Sequence

from iconkit_core.raster import render_png_async
from iconkit_core.style import StyleConfig
from iconkit_core.vector import render_vector

LOGGER = logging.getLogger(__name__)

DEFAULT_SIZES: tuple[int, ...] = (16, 32, 48, 128)
EXTRA_SIZES: tuple[int, ...] = (256, 512, 1024)
SVG_FILENAME = "icon.svg"


@dataclass(frozen=True)
class ExportBundle:
    png_paths: tuple[Path, ...]
    svg_path: Path | None
    failed: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, object]:
        return {
            "png": [str(path) for path in self.png_paths],
            "svg": str(self.svg_path) if self.svg_path is not None else None,
            "failed": list(self.failed),
        }


def png_filename(size: int) -> str:
    return f"icon-{size}.png"


def resolve_export_sizes(extra_sizes: Iterable[int] = ()) -> tuple[int, ...]:
    """Fixed sizes followed by the chosen extra sizes, in `EXTRA_SIZES` order."""

    chosen = set(extra_sizes)
    unknown = sorted(chosen - set(EXTRA_SIZES))
    if unknown:
        raise ValueError(f"unsupported extra sizes: {unknown}; choose from {list(EXTRA_SIZES)}")
    return DEFAULT_SIZES + tuple(size for size in EXTRA_SIZES if size in chosen)


async def export_png_set_async(
    config: StyleConfig,
    out_dir: str | Path,
    sizes: Sequence[int],
) -> tuple[list[Path], list[str]]:
    """Render and write one PNG per size, strictly one size at a time."""

    root = Path(out_dir)
    written: list[Path] = []
    failed: list[str] = []
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.error("cannot create output directory %s: %s", root, exc)
        failed.extend(png_filename(size) for size in sizes)
        return written, failed
    for size in sizes:
        png = await render_png_async(config, size)
        path = root / png_filename(size)
        try:
            path.write_bytes(png)
        except OSError as exc:
            LOGGER.error("failed to write %s: %s", path, exc)
            failed.append(path.name)
            continue
        LOGGER.info("wrote %s (%d bytes)", path, len(png))
        written.append(path)
    return written, failed


def export_svg(config: StyleConfig, out_dir: str | Path) -> Path:
    root = Path(out_dir)
    root.mkdir(parents=True, exist_ok=True)
    path = root / SVG_FILENAME
    path.write_text(render_vector(config), encoding="utf-8")
    LOGGER.info("wrote %s", path)
    return path


def export_bundle(
    config: StyleConfig,
    *,
    out_dir: str | Path,
    extra_sizes: Iterable[int] = (),
    include_png: bool = True,
    include_svg: bool = True,
) -> ExportBundle:
    sizes = resolve_export_sizes(extra_sizes)
    png_paths: list[Path] = []
    failed: list[str] = []
    if include_png:
        png_paths, failed = asyncio.run(export_png_set_async(config, out_dir, sizes))

    svg_path = None
    if include_svg:
        try:
            svg_path = export_svg(config, out_dir)
        except OSError as exc:
            LOGGER.error("failed to write %s: %s", SVG_FILENAME, exc)
            failed.append(SVG_FILENAME)

    return ExportBundle(png_paths=tuple(png_paths), svg_path=svg_path, failed=tuple(failed))
