from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path
import sys

from iconkit_core import list_icon_names, render_png, render_vector, search_icon_names
from iconkit_studio import (
    DEFAULT_SETTINGS,
    EXTRA_SIZES,
    IconSelection,
    StudioSettings,
    build_style_config,
    export_bundle,
    load_settings,
    validate_settings,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="iconkit")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    icons = sub.add_parser("list-icons", help="List bundled icon names.")
    icons.add_argument("--search", default="", help="Case-insensitive substring filter.")

    svg = sub.add_parser("render-svg", help="Render the composite as SVG markup.")
    _add_style_arguments(svg)
    svg.add_argument("--out", type=Path, default=None, help="Write to file instead of stdout.")

    png = sub.add_parser("render-png", help="Render the composite as one PNG.")
    _add_style_arguments(png)
    png.add_argument("--size", type=int, default=256)
    png.add_argument("--out", type=Path, required=True)

    export = sub.add_parser("export", help="Write icon-<size>.png files and icon.svg.")
    _add_style_arguments(export)
    export.add_argument("--out-dir", type=Path, required=True)
    export.add_argument(
        "--extra-size",
        type=int,
        action="append",
        default=None,
        choices=list(EXTRA_SIZES),
        help="Additional PNG size; repeatable. Overrides extra_sizes from --settings.",
    )
    export.add_argument("--no-svg", action="store_true")
    export.add_argument("--no-png", action="store_true")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "list-icons":
        names = search_icon_names(args.search) if args.search else list_icon_names()
        for name in names:
            print(name)
        return 0

    settings = _resolve_settings(args)
    config = build_style_config(settings)

    if args.command == "render-svg":
        markup = render_vector(config)
        if args.out is None:
            sys.stdout.write(markup + "\n")
        else:
            args.out.write_text(markup, encoding="utf-8")
            print(f"wrote {args.out}")
        return 0

    if args.command == "render-png":
        if args.size <= 0:
            raise ValueError("size must be > 0")
        args.out.write_bytes(render_png(config, args.size))
        print(f"wrote {args.out}")
        return 0

    if args.command == "export":
        extra = args.extra_size if args.extra_size is not None else settings.extra_sizes
        bundle = export_bundle(
            config,
            out_dir=args.out_dir,
            extra_sizes=extra,
            include_png=not args.no_png,
            include_svg=not args.no_svg,
        )
        print(json.dumps(bundle.as_dict(), indent=2, sort_keys=True))
        return 1 if bundle.failed else 0

    raise RuntimeError(f"unsupported command: {args.command}")


def _add_style_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--settings", type=Path, default=None, help="TOML settings file.")
    parser.add_argument("--primary", default=None, help="Primary icon name.")
    parser.add_argument("--secondary", default=None, help="Overlay icon name.")
    parser.add_argument(
        "--pick",
        action="append",
        default=None,
        metavar="NAME",
        help="Toggle an icon like the picker: fills primary, then secondary; picking a selected icon clears it.",
    )


def _resolve_settings(args: argparse.Namespace) -> StudioSettings:
    settings = load_settings(args.settings) if args.settings is not None else DEFAULT_SETTINGS
    selection = IconSelection(
        primary=args.primary if args.primary is not None else settings.primary_icon,
        secondary=args.secondary if args.secondary is not None else settings.secondary_icon,
    )
    for name in args.pick or ():
        selection = selection.select(name)
    if (selection.primary, selection.secondary) == (settings.primary_icon, settings.secondary_icon):
        return settings
    merged = {**asdict(settings), "primary_icon": selection.primary, "secondary_icon": selection.secondary}
    return validate_settings(merged)


if __name__ == "__main__":
    raise SystemExit(main())
