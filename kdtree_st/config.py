"""Configuration objects for 2d-tree query runs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryConfig:
    """Runtime options for one query run over a point table.

    Queries themselves live in the run config; this object only controls how
    they are executed and reported.
    """

    # If True, every result is compared against a brute-force table.
    cross_check: bool = True

    # If True, the run writes a PNG of the tree partition.
    plot: bool = False

    # Extra nearest queries drawn uniformly inside the points' bounding box.
    random_nearest_queries: int = 0

    # Seed for the random query sampler.
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate config values once at construction time."""
        if self.random_nearest_queries < 0:
            raise ValueError("random_nearest_queries must be >= 0")
