"""SVG path data parsing and curve flattening.

Every subpath comes back as a polyline in user units. Curves and arcs are
split into chords short enough that, once the points are multiplied by
`scale`, no chord strays more than `tolerance` device pixels from the true
curve. The chord count depends only on the input, so output is repeatable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math

Point = tuple[float, float]

FLATTEN_TOLERANCE_PX = 0.1
MIN_CURVE_SEGMENTS = 4
MAX_FLATTEN_SEGMENTS = 4096

_COMMANDS = set("MmLlHhVvCcSsQqTtAaZz")


class PathDataError(ValueError):
    pass


@dataclass
class Subpath:
    points: list[Point] = field(default_factory=list)
    closed: bool = False


class _Scanner:
    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def _skip_separators(self) -> None:
        text = self._text
        while self._pos < len(text) and (text[self._pos].isspace() or text[self._pos] == ","):
            self._pos += 1

    def at_end(self) -> bool:
        self._skip_separators()
        return self._pos >= len(self._text)

    def peek_command(self) -> str | None:
        self._skip_separators()
        if self._pos < len(self._text) and self._text[self._pos] in _COMMANDS:
            return self._text[self._pos]
        return None

    def read_command(self) -> str:
        cmd = self.peek_command()
        if cmd is None:
            raise PathDataError(f"expected command at offset {self._pos}")
        self._pos += 1
        return cmd

    def read_flag(self) -> bool:
        self._skip_separators()
        if self._pos < len(self._text) and self._text[self._pos] in "01":
            flag = self._text[self._pos] == "1"
            self._pos += 1
            return flag
        raise PathDataError(f"expected arc flag at offset {self._pos}")

    def read_number(self) -> float:
        self._skip_separators()
        text = self._text
        start = self._pos
        i = start
        if i < len(text) and text[i] in "+-":
            i += 1
        digits = 0
        while i < len(text) and text[i].isdigit():
            i += 1
            digits += 1
        if i < len(text) and text[i] == ".":
            i += 1
            while i < len(text) and text[i].isdigit():
                i += 1
                digits += 1
        if digits == 0:
            raise PathDataError(f"expected number at offset {start}")
        if i < len(text) and text[i] in "eE":
            j = i + 1
            if j < len(text) and text[j] in "+-":
                j += 1
            if j < len(text) and text[j].isdigit():
                while j < len(text) and text[j].isdigit():
                    j += 1
                i = j
        self._pos = i
        return float(text[start:i])


def parse_numbers(text: str | None) -> list[float]:
    """Numbers of a `points` or `viewBox` style list, same grammar as path data."""

    if not text:
        return []
    scanner = _Scanner(text)
    numbers: list[float] = []
    while not scanner.at_end():
        numbers.append(scanner.read_number())
    return numbers


def parse_path(d: str, scale: float = 1.0, tolerance: float = FLATTEN_TOLERANCE_PX) -> list[Subpath]:
    if scale <= 0 or tolerance <= 0:
        raise ValueError("scale and tolerance must be > 0")
    chord_error = tolerance / scale
    scanner = _Scanner(d)
    subpaths: list[Subpath] = []
    current: Subpath | None = None
    x = y = 0.0
    start_x = start_y = 0.0
    last_ctrl: Point | None = None
    last_cmd = ""
    cmd = ""

    while not scanner.at_end():
        explicit = scanner.peek_command()
        if explicit is not None:
            cmd = scanner.read_command()
        elif not cmd or cmd in "Zz":
            raise PathDataError("path data must start with a command")
        elif cmd == "M":
            cmd = "L"
        elif cmd == "m":
            cmd = "l"

        upper = cmd.upper()
        relative = cmd.islower()

        if upper == "Z":
            if current is not None:
                current.closed = True
                if current.points and current.points[-1] != (start_x, start_y):
                    current.points.append((start_x, start_y))
            x, y = start_x, start_y
            current = None
            last_ctrl = None
            last_cmd = "Z"
            continue

        if current is None and upper != "M":
            current = Subpath(points=[(x, y)])
            subpaths.append(current)

        if upper == "M":
            nx, ny = scanner.read_number(), scanner.read_number()
            if relative:
                nx, ny = x + nx, y + ny
            x, y = nx, ny
            start_x, start_y = x, y
            current = Subpath(points=[(x, y)])
            subpaths.append(current)
            last_ctrl = None
        elif upper == "L":
            nx, ny = scanner.read_number(), scanner.read_number()
            if relative:
                nx, ny = x + nx, y + ny
            x, y = nx, ny
            current.points.append((x, y))
            last_ctrl = None
        elif upper == "H":
            nx = scanner.read_number()
            x = x + nx if relative else nx
            current.points.append((x, y))
            last_ctrl = None
        elif upper == "V":
            ny = scanner.read_number()
            y = y + ny if relative else ny
            current.points.append((x, y))
            last_ctrl = None
        elif upper in ("C", "S"):
            if upper == "C":
                x1, y1 = scanner.read_number(), scanner.read_number()
                if relative:
                    x1, y1 = x + x1, y + y1
            else:
                x1, y1 = _reflect(last_ctrl, (x, y)) if last_cmd in ("C", "S") else (x, y)
            x2, y2 = scanner.read_number(), scanner.read_number()
            ex, ey = scanner.read_number(), scanner.read_number()
            if relative:
                x2, y2, ex, ey = x + x2, y + y2, x + ex, y + ey
            current.points.extend(_cubic((x, y), (x1, y1), (x2, y2), (ex, ey), chord_error))
            last_ctrl = (x2, y2)
            x, y = ex, ey
        elif upper in ("Q", "T"):
            if upper == "Q":
                qx, qy = scanner.read_number(), scanner.read_number()
                if relative:
                    qx, qy = x + qx, y + qy
            else:
                qx, qy = _reflect(last_ctrl, (x, y)) if last_cmd in ("Q", "T") else (x, y)
            ex, ey = scanner.read_number(), scanner.read_number()
            if relative:
                ex, ey = x + ex, y + ey
            current.points.extend(_quadratic((x, y), (qx, qy), (ex, ey), chord_error))
            last_ctrl = (qx, qy)
            x, y = ex, ey
        elif upper == "A":
            rx, ry = abs(scanner.read_number()), abs(scanner.read_number())
            rotation = scanner.read_number()
            large_arc = scanner.read_flag()
            sweep = scanner.read_flag()
            ex, ey = scanner.read_number(), scanner.read_number()
            if relative:
                ex, ey = x + ex, y + ey
            current.points.extend(_arc((x, y), rx, ry, rotation, large_arc, sweep, (ex, ey), chord_error))
            last_ctrl = None
            x, y = ex, ey
        last_cmd = upper

    return subpaths


def _reflect(ctrl: Point | None, about: Point) -> Point:
    if ctrl is None:
        return about
    return (2 * about[0] - ctrl[0], 2 * about[1] - ctrl[1])


def _segment_count(estimate: float) -> int:
    return min(MAX_FLATTEN_SEGMENTS, max(MIN_CURVE_SEGMENTS, int(math.ceil(estimate))))


def _cubic(p0: Point, p1: Point, p2: Point, p3: Point, chord_error: float) -> list[Point]:
    # |B''| <= 6 * max second difference; a chord over dt deviates at most dt^2 * |B''| / 8.
    bend = max(
        math.hypot(p0[0] - 2 * p1[0] + p2[0], p0[1] - 2 * p1[1] + p2[1]),
        math.hypot(p1[0] - 2 * p2[0] + p3[0], p1[1] - 2 * p2[1] + p3[1]),
    )
    segments = _segment_count(math.sqrt(0.75 * bend / chord_error))
    out: list[Point] = []
    for i in range(1, segments + 1):
        t = i / segments
        mt = 1.0 - t
        a = mt * mt * mt
        b = 3 * mt * mt * t
        c = 3 * mt * t * t
        d = t * t * t
        out.append(
            (
                a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
                a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
            )
        )
    return out


def _quadratic(p0: Point, p1: Point, p2: Point, chord_error: float) -> list[Point]:
    bend = math.hypot(p0[0] - 2 * p1[0] + p2[0], p0[1] - 2 * p1[1] + p2[1])
    segments = _segment_count(math.sqrt(0.25 * bend / chord_error))
    out: list[Point] = []
    for i in range(1, segments + 1):
        t = i / segments
        mt = 1.0 - t
        out.append(
            (
                mt * mt * p0[0] + 2 * mt * t * p1[0] + t * t * p2[0],
                mt * mt * p0[1] + 2 * mt * t * p1[1] + t * t * p2[1],
            )
        )
    return out


def _arc(
    start: Point,
    rx: float,
    ry: float,
    rotation_deg: float,
    large_arc: bool,
    sweep: bool,
    end: Point,
    chord_error: float,
) -> list[Point]:
    x1, y1 = start
    x2, y2 = end
    if (x1, y1) == (x2, y2):
        return []
    if rx == 0 or ry == 0:
        return [end]

    phi = math.radians(rotation_deg % 360.0)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)
    dx = (x1 - x2) / 2
    dy = (y1 - y2) / 2
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy

    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale

    num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if large_arc == sweep:
        coef = -coef
    cxp = coef * (rx * y1p / ry)
    cyp = coef * -(ry * x1p / rx)
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2

    theta1 = _vector_angle(1.0, 0.0, (x1p - cxp) / rx, (y1p - cyp) / ry)
    delta = _vector_angle((x1p - cxp) / rx, (y1p - cyp) / ry, (-x1p - cxp) / rx, (-y1p - cyp) / ry)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi

    radius = max(rx, ry)
    if radius > chord_error:
        # Sagitta of a chord spanning `step` radians is radius * (1 - cos(step / 2)).
        step = 2 * math.acos(1 - chord_error / radius)
    else:
        step = math.pi / 2
    steps = min(MAX_FLATTEN_SEGMENTS, max(2, int(math.ceil(abs(delta) / step))))
    out: list[Point] = []
    for i in range(1, steps):
        theta = theta1 + delta * (i / steps)
        ex = rx * math.cos(theta)
        ey = ry * math.sin(theta)
        out.append((cos_phi * ex - sin_phi * ey + cx, sin_phi * ex + cos_phi * ey + cy))
    out.append(end)
    return out


def _vector_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    dot = ux * vx + uy * vy
    length = math.hypot(ux, uy) * math.hypot(vx, vy)
    if length == 0:
        return 0.0
    angle = math.acos(max(-1.0, min(1.0, dot / length)))
    if ux * vy - uy * vx < 0:
        angle = -angle
    return angle
