from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from iconkit_studio.settings import (
    DEFAULT_SETTINGS,
    build_style_config,
    coerce_color,
    load_settings,
    validate_settings,
)


class StudioSettingsTests(unittest.TestCase):
    def test_defaults_validate_unchanged(self) -> None:
        self.assertEqual(validate_settings(), DEFAULT_SETTINGS)
        self.assertEqual(DEFAULT_SETTINGS.bg_color, "#262626")
        self.assertEqual(DEFAULT_SETTINGS.padding, 28)
        self.assertEqual(DEFAULT_SETTINGS.overlay_pos_x, 75.0)
        self.assertEqual(DEFAULT_SETTINGS.overlay_pos_y, 25.0)

    def test_unknown_key_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown setting: glow"):
            validate_settings({"glow": 1})

    def test_invalid_color_falls_back(self) -> None:
        with self.assertLogs("iconkit_studio.settings", level="WARNING"):
            settings = validate_settings({"bg_color": "red", "primary_stroke": "#12345"})
        self.assertEqual(settings.bg_color, "#262626")
        self.assertEqual(settings.primary_stroke, "#fafafa")
        self.assertEqual(validate_settings({"overlay_bg": "#ABC"}).overlay_bg, "#ABC")
        self.assertEqual(coerce_color(None, "#000000"), "#000000")

    def test_numbers_clamped_to_slider_ranges(self) -> None:
        with self.assertLogs("iconkit_studio.settings", level="WARNING") as logs:
            settings = validate_settings(
                {"padding": 100, "primary_stroke_width": 0.2, "overlay_scale": 0.9, "base_pos_x": -5}
            )
        self.assertEqual(len(logs.output), 4)
        self.assertEqual(settings.padding, 44)
        self.assertIsInstance(settings.padding, int)
        self.assertEqual(settings.primary_stroke_width, 1.0)
        self.assertEqual(settings.overlay_scale, 0.5)
        self.assertEqual(settings.base_pos_x, 0.0)

    def test_non_numeric_values_rejected(self) -> None:
        with self.assertRaises(ValueError):
            validate_settings({"base_scale": "big"})
        with self.assertRaises(ValueError):
            validate_settings({"overlay_bg_alpha": True})

    def test_shapes_and_icons_checked(self) -> None:
        with self.assertRaisesRegex(ValueError, "shape"):
            validate_settings({"shape": "hexagon"})
        with self.assertRaises(ValueError):
            validate_settings({"primary_icon": 5})
        self.assertEqual(validate_settings({"secondary_icon": None}).secondary_icon, "")

    def test_extra_sizes_must_be_integer_list(self) -> None:
        self.assertEqual(validate_settings({"extra_sizes": [256, 1024]}).extra_sizes, (256, 1024))
        with self.assertRaises(ValueError):
            validate_settings({"extra_sizes": "256"})
        with self.assertRaises(ValueError):
            validate_settings({"extra_sizes": [256.0]})

    def test_load_settings_from_toml(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "icon.toml"
            path.write_text(
                'primary_icon = "Home"\n'
                'secondary_icon = "Plus"\n'
                'shape = "circle"\n'
                "padding = 30\n"
                "extra_sizes = [512]\n",
                encoding="utf-8",
            )
            settings = load_settings(path)
        self.assertEqual(settings.primary_icon, "Home")
        self.assertEqual(settings.secondary_icon, "Plus")
        self.assertEqual(settings.shape, "circle")
        self.assertEqual(settings.padding, 30)
        self.assertEqual(settings.extra_sizes, (512,))

    def test_load_settings_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(FileNotFoundError):
                load_settings(Path(td) / "missing.toml")

    def test_build_style_config_without_secondary(self) -> None:
        config = build_style_config(DEFAULT_SETTINGS)
        self.assertEqual(config.canvas_size, 256)
        self.assertIsNone(config.primary.icon_id)
        self.assertIsNone(config.overlay)
        self.assertEqual(config.background.color, "#262626")
        self.assertEqual(config.background.shape, "rounded")

    def test_build_style_config_maps_overlay_fields(self) -> None:
        settings = validate_settings(
            {
                "primary_icon": "Home",
                "secondary_icon": "Plus",
                "secondary_stroke": "#ff0000",
                "overlay_bg_alpha": 0.5,
                "overlay_shape": "circle",
                "overlay_pos_x": 20,
            }
        )
        config = build_style_config(settings)
        self.assertEqual(config.primary.icon_id, "Home")
        self.assertEqual(config.primary.padding, 28)
        overlay = config.overlay
        self.assertIsNotNone(overlay)
        assert overlay is not None
        self.assertEqual(overlay.icon_id, "Plus")
        self.assertEqual(overlay.stroke_color, "#ff0000")
        self.assertEqual(overlay.background_alpha, 0.5)
        self.assertEqual(overlay.shape, "circle")
        self.assertEqual(overlay.position_x, 20.0)
        self.assertEqual(overlay.scale_fraction, 0.34)


if __name__ == "__main__":
    unittest.main()
