from __future__ import annotations

import unittest

from iconkit_studio.selection import IconSelection


class IconSelectionTests(unittest.TestCase):
    def test_first_pick_fills_primary_then_secondary(self) -> None:
        picks = IconSelection().select("Home")
        self.assertEqual(picks.primary, "Home")
        self.assertEqual(picks.secondary, "")
        picks = picks.select("Plus")
        self.assertEqual(picks.selected, ("Home", "Plus"))

    def test_third_pick_replaces_secondary(self) -> None:
        picks = IconSelection("Home", "Plus").select("Star")
        self.assertEqual(picks.selected, ("Home", "Star"))

    def test_reselect_toggles_off(self) -> None:
        picks = IconSelection("Home", "Plus")
        self.assertEqual(picks.select("Home"), IconSelection("", "Plus"))
        self.assertEqual(picks.select("Plus"), IconSelection("Home", ""))

    def test_empty_primary_is_refilled_before_secondary(self) -> None:
        picks = IconSelection("", "Plus").select("Star")
        self.assertEqual(picks, IconSelection("Star", "Plus"))

    def test_clear_slots(self) -> None:
        picks = IconSelection("Home", "Plus")
        self.assertEqual(picks.clear_primary().selected, ("Plus",))
        self.assertEqual(picks.clear_secondary().selected, ("Home",))
        self.assertEqual(IconSelection().selected, ())


if __name__ == "__main__":
    unittest.main()
