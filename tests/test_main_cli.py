from __future__ import annotations

import contextlib
import importlib.util
import io
import json
from pathlib import Path
import sys
import tempfile
import unittest

MODULE_PATH = Path(__file__).resolve().parents[1] / "main.py"
SPEC = importlib.util.spec_from_file_location("iconkit_main", MODULE_PATH)
if SPEC is None or SPEC.loader is None:
    raise RuntimeError(f"failed to load module spec for {MODULE_PATH}")
MODULE = importlib.util.module_from_spec(SPEC)
sys.modules[SPEC.name] = MODULE
SPEC.loader.exec_module(MODULE)

main = MODULE.main


class MainCliTests(unittest.TestCase):
    def test_list_icons_search(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(["list-icons", "--search", "chevron"])
        self.assertEqual(code, 0)
        self.assertEqual(
            out.getvalue().split(),
            ["ChevronDown", "ChevronLeft", "ChevronRight", "ChevronUp"],
        )

    def test_render_svg_to_stdout(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(["render-svg", "--primary", "Home", "--secondary", "Plus"])
        self.assertEqual(code, 0)
        markup = out.getvalue().strip()
        self.assertTrue(markup.startswith("<svg"))
        self.assertIn("translate(28, 28)", markup)

    def test_pick_toggles_like_the_picker(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(["render-svg", "--pick", "Home", "--pick", "Plus", "--pick", "Star"])
        self.assertEqual(code, 0)
        markup = out.getvalue()
        self.assertEqual(markup.count("<g "), 2)
        self.assertIn("<polygon", markup)

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(["render-svg", "--primary", "Home", "--pick", "Home"])
        self.assertNotIn("<g ", out.getvalue())

    def test_export_into_unusable_directory_fails_cleanly(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "taken"
            blocker.write_text("x", encoding="utf-8")
            out = io.StringIO()
            with contextlib.redirect_stdout(out), self.assertLogs("iconkit_studio.export", level="ERROR"):
                code = main(["export", "--primary", "Home", "--out-dir", str(blocker)])
            self.assertEqual(code, 1)
            self.assertIn("icon.svg", json.loads(out.getvalue())["failed"])

    def test_render_png_and_export(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            settings = root / "icon.toml"
            settings.write_text('primary_icon = "Star"\nshape = "circle"\n', encoding="utf-8")
            with contextlib.redirect_stdout(io.StringIO()):
                code = main(["render-png", "--settings", str(settings), "--size", "32", "--out", str(root / "one.png")])
            self.assertEqual(code, 0)
            self.assertTrue((root / "one.png").read_bytes().startswith(b"\x89PNG"))

            out = io.StringIO()
            with contextlib.redirect_stdout(out):
                code = main(["export", "--settings", str(settings), "--out-dir", str(root / "bundle"), "--no-png"])
            self.assertEqual(code, 0)
            payload = json.loads(out.getvalue())
            self.assertEqual(payload["png"], [])
            self.assertTrue(payload["svg"].endswith("icon.svg"))
            self.assertTrue((root / "bundle" / "icon.svg").exists())


if __name__ == "__main__":
    unittest.main()
