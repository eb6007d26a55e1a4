"""Brute-force point symbol table used as a reference for the 2d-tree."""

from __future__ import annotations

from typing import Generic, Iterable, TypeVar

import numpy as np

from .geometry import Point2D, RectHV
from .kd_tree import InvalidArgumentError

V = TypeVar("V")


class BruteForcePointST(Generic[V]):
    """Vectorized linear-scan table with the same API as `KdTreeST`.

    Every query scans all stored points, so results are easy to trust and
    serve as the ground truth when cross-checking the tree.
    """

    def __init__(self, items: Iterable[tuple[Point2D, V]] = ()) -> None:
        """Store (point, value) pairs; later pairs overwrite earlier ones."""
        self._values: dict[Point2D, V] = {}
        self._xy: np.ndarray | None = None

        for point, value in items:
            self.insert(point, value)

    def is_empty(self) -> bool:
        return len(self._values) == 0

    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def insert(self, point: Point2D, value: V) -> None:
        if point is None:
            raise InvalidArgumentError("point must not be None")
        if value is None:
            raise InvalidArgumentError("value must not be None")

        if point not in self._values:
            # Coordinate matrix is rebuilt on the next query.
            self._xy = None
        self._values[point] = value

    def get(self, point: Point2D) -> V | None:
        if point is None:
            raise InvalidArgumentError("point must not be None")
        return self._values.get(point)

    def contains(self, point: Point2D) -> bool:
        if point is None:
            raise InvalidArgumentError("point must not be None")
        return point in self._values

    def __contains__(self, point: object) -> bool:
        return isinstance(point, Point2D) and point in self._values

    def points(self) -> list[Point2D]:
        """Return all points in insertion order."""
        return list(self._values)

    def range(self, rect: RectHV) -> list[Point2D]:
        """Return points inside `rect` (boundary included) in insertion order."""
        if rect is None:
            raise InvalidArgumentError("rect must not be None")

        if self.is_empty():
            return []

        xy = self._coords()
        keep = (
            (xy[:, 0] >= rect.xmin)
            & (xy[:, 0] <= rect.xmax)
            & (xy[:, 1] >= rect.ymin)
            & (xy[:, 1] <= rect.ymax)
        )
        stored = self.points()
        return [stored[i] for i in np.flatnonzero(keep)]

    def nearest(self, point: Point2D) -> Point2D | None:
        """Return the first point (insertion order) at minimum distance."""
        if point is None:
            raise InvalidArgumentError("point must not be None")

        if self.is_empty():
            return None

        xy = self._coords()
        dx = xy[:, 0] - point.x
        dy = xy[:, 1] - point.y
        dist2 = dx * dx + dy * dy
        return self.points()[int(np.argmin(dist2))]

    def _coords(self) -> np.ndarray:
        if self._xy is None:
            coords = [(p.x, p.y) for p in self._values]
            self._xy = np.asarray(coords, dtype=np.float64).reshape(-1, 2)
        return self._xy
