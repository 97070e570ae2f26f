from __future__ import annotations

import re

Color = tuple[int, int, int, int]

_HEX = re.compile(r"#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})")
_FUNCTIONAL = re.compile(r"rgba?\(([^()]*)\)")


def parse_color(value: str, opacity: float = 1.0) -> Color:
    """Parse `#rgb`, `#rgba`, `#rrggbb`, `#rrggbbaa`, `rgb()` or `rgba()` text."""

    raw = value.strip()
    hex_match = _HEX.fullmatch(raw)
    if hex_match is not None:
        digits = hex_match.group(1)
        if len(digits) <= 4:
            digits = "".join(ch + ch for ch in digits)
        channels = list(bytes.fromhex(digits))
        if len(channels) == 3:
            channels.append(255)
    else:
        func_match = _FUNCTIONAL.fullmatch(raw)
        if func_match is None:
            raise ValueError(f"unsupported color `{value}`")
        channels = _functional_channels(func_match.group(1), value)
    r, g, b, a = channels
    alpha = int(round(max(0.0, min(1.0, (a / 255.0) * opacity)) * 255.0))
    return (r, g, b, alpha)


def _functional_channels(body: str, original: str) -> list[int]:
    parts = [p.strip() for p in body.split(",")]
    if len(parts) not in (3, 4):
        raise ValueError(f"unsupported color `{original}`")
    try:
        numbers = [float(p) for p in parts]
    except ValueError as exc:
        raise ValueError(f"unsupported color `{original}`") from exc
    channels = [max(0, min(255, int(n))) for n in numbers[:3]]
    alpha = numbers[3] if len(numbers) == 4 else 1.0
    channels.append(int(round(max(0.0, min(1.0, alpha)) * 255)))
    return channels
