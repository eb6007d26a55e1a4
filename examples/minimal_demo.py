"""Minimal demo for the 2d-tree point symbol table.

Run:
    python examples/minimal_demo.py
"""

from __future__ import annotations

from pathlib import Path
import sys

# Ensure package import works when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from kdtree_st import KdTreeST, Point2D, RectHV, save_tree_plot


def make_demo_tree() -> KdTreeST[str]:
    """Insert five labelled points in a fixed order."""
    tree: KdTreeST[str] = KdTreeST()
    for x, y, label in [
        (0.7, 0.2, "A"),
        (0.5, 0.4, "B"),
        (0.2, 0.3, "C"),
        (0.4, 0.7, "D"),
        (0.9, 0.6, "E"),
    ]:
        tree.insert(Point2D(x, y), label)
    return tree


def main() -> None:
    """Build a small tree, run each query type, and save a plot of the partition."""
    tree = make_demo_tree()

    print("Size:", tree.size())
    print("Level order:", [str(p) for p in tree.points()])
    print("Value at (0.5, 0.4):", tree.get(Point2D(0.5, 0.4)))

    rect = RectHV(0.0, 0.0, 0.6, 0.6)
    print(f"Points in {rect}:", [str(p) for p in tree.range(rect)])

    query = Point2D(0.6, 0.5)
    champion = tree.nearest(query)
    print(f"Nearest to {query}:", champion, "value:", tree.get(champion) if champion else None)

    out_dir = REPO_ROOT / "workspace_outputs"
    out_dir.mkdir(parents=True, exist_ok=True)
    plot_path = save_tree_plot(tree, out_dir / "demo_tree.png", bounds=RectHV(0.0, 0.0, 1.0, 1.0))
    print("Saved tree plot to:", plot_path)


if __name__ == "__main__":
    main()
