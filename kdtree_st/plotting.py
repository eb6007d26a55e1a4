"""Matplotlib rendering of a 2d-tree partition."""

from __future__ import annotations

from pathlib import Path

from matplotlib.axes import Axes
from matplotlib.figure import Figure
import numpy as np

from .geometry import RectHV
from .kd_tree import KdTreeST

VERTICAL_COLOR = "red"
HORIZONTAL_COLOR = "blue"
POINT_COLOR = "black"


def default_bounds(tree: KdTreeST, padding: float = 0.05) -> RectHV:
    """Return the bounding box of the tree's points padded on every side.

    Falls back to the unit square when the tree is empty or all points share
    a coordinate on both axes.
    """
    points = tree.points()
    if not points:
        return RectHV(0.0, 0.0, 1.0, 1.0)

    xy = np.asarray([(p.x, p.y) for p in points], dtype=np.float64)
    lo = xy.min(axis=0)
    hi = xy.max(axis=0)
    span = hi - lo

    if not np.any(span > 0):
        return RectHV(lo[0] - 0.5, lo[1] - 0.5, hi[0] + 0.5, hi[1] + 0.5)

    # Degenerate axis borrows the other axis' span.
    span = np.where(span > 0, span, span.max())
    pad = span * padding
    return RectHV(lo[0] - pad[0], lo[1] - pad[1], hi[0] + pad[0], hi[1] + pad[1])


def draw_tree(tree: KdTreeST, ax: Axes, bounds: RectHV | None = None) -> Axes:
    """Draw points and splitting segments of `tree` onto `ax`.

    x-splits are drawn as red vertical segments, y-splits as blue horizontal
    segments, each clipped to its node's region and to `bounds`.
    """
    view = bounds or default_bounds(tree)

    for point, region, vertical in tree.splits():
        if vertical:
            y0 = max(region.ymin, view.ymin)
            y1 = min(region.ymax, view.ymax)
            ax.plot([point.x, point.x], [y0, y1], color=VERTICAL_COLOR, linewidth=0.8)
        else:
            x0 = max(region.xmin, view.xmin)
            x1 = min(region.xmax, view.xmax)
            ax.plot([x0, x1], [point.y, point.y], color=HORIZONTAL_COLOR, linewidth=0.8)

    points = tree.points()
    if points:
        ax.scatter([p.x for p in points], [p.y for p in points], s=12, color=POINT_COLOR, zorder=3)

    ax.set_xlim(view.xmin, view.xmax)
    ax.set_ylim(view.ymin, view.ymax)
    ax.set_aspect("equal", adjustable="box")
    return ax


def save_tree_plot(
    tree: KdTreeST,
    path: str | Path,
    bounds: RectHV | None = None,
    title: str | None = None,
) -> Path:
    """Render `tree` on a headless figure and write it to `path`."""
    out_path = Path(path)

    fig = Figure(figsize=(6, 6))
    ax = fig.subplots()
    draw_tree(tree, ax, bounds=bounds)
    if title:
        ax.set_title(title)

    fig.tight_layout()
    fig.savefig(out_path, dpi=120)
    return out_path
