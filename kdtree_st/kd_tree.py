"""2d-tree symbol table mapping planar points to values.

Each level of the tree splits on one coordinate: the root splits on x
(a vertical line through its point), its children on y (a horizontal line),
and so on, alternating with depth. A point that compares strictly less on the
splitting axis goes to the left/bottom subtree; ties and larger values go to
the right/top subtree.

Every node remembers the rectangle its whole subtree is confined to. Range
and nearest-neighbour queries use these regions to skip subtrees that cannot
contribute to the answer.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
import math
from typing import Generic, TypeVar

from .geometry import FULL_PLANE, Point2D, RectHV

V = TypeVar("V")


class InvalidArgumentError(ValueError):
    """Raised when a required point, value or rectangle argument is None."""


@dataclass(eq=False)
class _Node(Generic[V]):
    """One tree node. The splitting axis is not stored; it follows from depth."""

    point: Point2D
    value: V
    region: RectHV
    left_bottom: _Node[V] | None = None
    right_top: _Node[V] | None = None


def _split_region(region: RectHV, point: Point2D, vertical: bool) -> tuple[RectHV, RectHV]:
    """Split `region` at `point` on the given axis into (left/bottom, right/top)."""
    if vertical:
        return (
            RectHV(region.xmin, region.ymin, point.x, region.ymax),
            RectHV(point.x, region.ymin, region.xmax, region.ymax),
        )
    return (
        RectHV(region.xmin, region.ymin, region.xmax, point.y),
        RectHV(region.xmin, point.y, region.xmax, region.ymax),
    )


def _axis_delta(query: Point2D, point: Point2D, vertical: bool) -> float:
    """Signed offset of `query` from `point` on the splitting axis."""
    if vertical:
        return query.x - point.x
    return query.y - point.y


class KdTreeST(Generic[V]):
    """Symbol table of 2D points backed by an unbalanced 2d-tree.

    The tree is never rebalanced, so its shape is fully determined by the
    insertion order. Deletion is not supported.
    """

    def __init__(self) -> None:
        self._root: _Node[V] | None = None
        self._size = 0

    def is_empty(self) -> bool:
        """Return True if the table holds no points."""
        return self._size == 0

    def size(self) -> int:
        """Return the number of distinct points in the table."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def insert(self, point: Point2D, value: V) -> None:
        """Associate `value` with `point`, overwriting any previous value."""
        if point is None:
            raise InvalidArgumentError("point must not be None")
        if value is None:
            raise InvalidArgumentError("value must not be None")

        if self._root is None:
            self._root = _Node(point=point, value=value, region=FULL_PLANE)
            self._size = 1
            return

        node = self._root
        vertical = True
        while True:
            if node.point == point:
                node.value = value
                return

            if _axis_delta(point, node.point, vertical) < 0:
                if node.left_bottom is None:
                    region, _ = _split_region(node.region, node.point, vertical)
                    node.left_bottom = _Node(point=point, value=value, region=region)
                    self._size += 1
                    return
                node = node.left_bottom
            else:
                if node.right_top is None:
                    _, region = _split_region(node.region, node.point, vertical)
                    node.right_top = _Node(point=point, value=value, region=region)
                    self._size += 1
                    return
                node = node.right_top

            vertical = not vertical

    def __setitem__(self, point: Point2D, value: V) -> None:
        self.insert(point, value)

    def get(self, point: Point2D) -> V | None:
        """Return the value stored at `point`, or None if it is absent."""
        if point is None:
            raise InvalidArgumentError("point must not be None")

        node = self._root
        vertical = True
        while node is not None:
            if node.point == point:
                return node.value

            if _axis_delta(point, node.point, vertical) < 0:
                node = node.left_bottom
            else:
                node = node.right_top
            vertical = not vertical

        return None

    def contains(self, point: Point2D) -> bool:
        """Return True if the table holds a value for `point`."""
        if point is None:
            raise InvalidArgumentError("point must not be None")
        return self.get(point) is not None

    def __contains__(self, point: object) -> bool:
        if not isinstance(point, Point2D):
            return False
        return self.contains(point)

    def points(self) -> list[Point2D]:
        """Return all points in level order (left/bottom before right/top)."""
        return [point for point, _, _ in self.splits()]

    def __iter__(self) -> Iterator[Point2D]:
        return iter(self.points())

    def splits(self) -> Iterator[tuple[Point2D, RectHV, bool]]:
        """Yield `(point, region, vertical)` for every node in level order.

        `vertical` is True when the node splits its region with a vertical
        line through its point (an x-split).
        """
        if self._root is None:
            return

        queue: deque[tuple[_Node[V], bool]] = deque([(self._root, True)])
        while queue:
            node, vertical = queue.popleft()
            yield node.point, node.region, vertical

            if node.left_bottom is not None:
                queue.append((node.left_bottom, not vertical))
            if node.right_top is not None:
                queue.append((node.right_top, not vertical))

    def range(self, rect: RectHV) -> list[Point2D]:
        """Return every point inside `rect` or on its boundary.

        Points are returned in depth-first visit order (node, left/bottom
        subtree, right/top subtree), which carries no geometric meaning.
        """
        if rect is None:
            raise InvalidArgumentError("rect must not be None")

        found: list[Point2D] = []
        if self._root is None:
            return found

        stack: list[_Node[V]] = [self._root]
        while stack:
            node = stack.pop()

            if not rect.intersects(node.region):
                continue

            if rect.contains(node.point):
                found.append(node.point)

            # Right is pushed first so left/bottom is visited first.
            if node.right_top is not None:
                stack.append(node.right_top)
            if node.left_bottom is not None:
                stack.append(node.left_bottom)

        return found

    def nearest(self, point: Point2D) -> Point2D | None:
        """Return the stored point closest to `point`, or None if empty.

        Among equidistant points the first one met wins; the search visits the
        child on the query's side of each splitting line before the other one.
        """
        if point is None:
            raise InvalidArgumentError("point must not be None")

        best: Point2D | None = None
        best_dist2 = math.inf
        if self._root is None:
            return best

        stack: list[tuple[_Node[V], bool]] = [(self._root, True)]
        while stack:
            node, vertical = stack.pop()

            # Best may have improved since this node was pushed.
            if node.region.distance_squared_to(point) >= best_dist2:
                continue

            # Squared distance may overflow to inf for far-apart points.
            dist2 = node.point.distance_squared_to(point)
            if best is None or dist2 < best_dist2:
                best = node.point
                best_dist2 = dist2

            if _axis_delta(point, node.point, vertical) < 0:
                first, second = node.left_bottom, node.right_top
            else:
                first, second = node.right_top, node.left_bottom

            # Pushed in reverse so the same-side child is explored first.
            if second is not None and second.region.distance_squared_to(point) < best_dist2:
                stack.append((second, not vertical))
            if first is not None and first.region.distance_squared_to(point) < best_dist2:
                stack.append((first, not vertical))

        return best
