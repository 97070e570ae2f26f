from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class IconSelection:
    """Primary/secondary icon picks. Empty string means not set."""

    primary: str = ""
    secondary: str = ""

    @property
    def selected(self) -> tuple[str, ...]:
        return tuple(name for name in (self.primary, self.secondary) if name)

    def select(self, name: str) -> "IconSelection":
        if name == self.primary:
            return replace(self, primary="")
        if name == self.secondary:
            return replace(self, secondary="")
        if not self.primary:
            return replace(self, primary=name)
        # Secondary is filled when empty and replaced when both are set.
        return replace(self, secondary=name)

    def clear_primary(self) -> "IconSelection":
        return replace(self, primary="")

    def clear_secondary(self) -> "IconSelection":
        return replace(self, secondary="")
