"""Planar geometry primitives: immutable points and axis-aligned rectangles."""

from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass(frozen=True)
class Point2D:
    """One point in the plane, compared and hashed by coordinate value."""

    x: float
    y: float

    def __post_init__(self) -> None:
        """Coerce coordinates to float and reject NaN / infinite values."""
        x = float(self.x)
        y = float(self.y)

        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"point coordinates must be finite, got ({x!r}, {y!r})")

        # -0.0 and 0.0 must hash the same.
        object.__setattr__(self, "x", x + 0.0)
        object.__setattr__(self, "y", y + 0.0)

    def distance_squared_to(self, other: Point2D) -> float:
        """Return squared Euclidean distance to `other`."""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def distance_to(self, other: Point2D) -> float:
        """Return Euclidean distance to `other`."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class RectHV:
    """Closed axis-aligned rectangle `[xmin, xmax] x [ymin, ymax]`.

    Bounds may be infinite, which is how the unbounded root region of a
    2d-tree is represented.
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def __post_init__(self) -> None:
        """Validate bounds once at construction time."""
        bounds = tuple(float(v) for v in (self.xmin, self.ymin, self.xmax, self.ymax))

        if any(math.isnan(v) for v in bounds):
            raise ValueError("rectangle bounds must not be NaN")

        xmin, ymin, xmax, ymax = bounds
        if xmax < xmin:
            raise ValueError(f"xmax < xmin: {xmax!r} < {xmin!r}")
        if ymax < ymin:
            raise ValueError(f"ymax < ymin: {ymax!r} < {ymin!r}")

        object.__setattr__(self, "xmin", xmin)
        object.__setattr__(self, "ymin", ymin)
        object.__setattr__(self, "xmax", xmax)
        object.__setattr__(self, "ymax", ymax)

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def contains(self, p: Point2D) -> bool:
        """Return True if `p` lies inside the rectangle or on its boundary."""
        return self.xmin <= p.x <= self.xmax and self.ymin <= p.y <= self.ymax

    def intersects(self, other: RectHV) -> bool:
        """Return True if the two rectangles share at least one point."""
        return (
            self.xmax >= other.xmin
            and self.ymax >= other.ymin
            and other.xmax >= self.xmin
            and other.ymax >= self.ymin
        )

    def distance_squared_to(self, p: Point2D) -> float:
        """Return squared distance from `p` to the closest point of the rectangle."""
        dx = 0.0
        dy = 0.0

        if p.x < self.xmin:
            dx = p.x - self.xmin
        elif p.x > self.xmax:
            dx = p.x - self.xmax

        if p.y < self.ymin:
            dy = p.y - self.ymin
        elif p.y > self.ymax:
            dy = p.y - self.ymax

        return dx * dx + dy * dy

    def distance_to(self, p: Point2D) -> float:
        return math.sqrt(self.distance_squared_to(p))

    def __str__(self) -> str:
        return f"[{self.xmin}, {self.xmax}] x [{self.ymin}, {self.ymax}]"


FULL_PLANE = RectHV(-math.inf, -math.inf, math.inf, math.inf)
