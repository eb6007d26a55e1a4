"""Public API for the 2d-tree point symbol table."""

from .config import QueryConfig
from .geometry import FULL_PLANE, Point2D, RectHV
from .kd_tree import InvalidArgumentError, KdTreeST
from .plotting import draw_tree, save_tree_plot
from .query_run import ConfigError, QueryRunConfig, load_query_run_config, run_queries, run_queries_from_config
from .spatial_index import BruteForcePointST

__all__ = [
    "BruteForcePointST",
    "ConfigError",
    "FULL_PLANE",
    "InvalidArgumentError",
    "KdTreeST",
    "Point2D",
    "QueryConfig",
    "QueryRunConfig",
    "RectHV",
    "draw_tree",
    "load_query_run_config",
    "run_queries",
    "run_queries_from_config",
    "save_tree_plot",
]
