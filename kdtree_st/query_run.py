"""Reproducible, YAML-configured query runs over a 2d-tree."""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
import json
import logging
from pathlib import Path
import platform
import re
import subprocess
import sys
from typing import Any

import numpy as np
import pandas as pd
import yaml

from .config import QueryConfig
from .geometry import Point2D, RectHV
from .kd_tree import KdTreeST
from .plotting import default_bounds, save_tree_plot
from .spatial_index import BruteForcePointST

logger = logging.getLogger(__name__)

TABLE_FORMATS = {"csv", "tsv", "parquet", "whitespace"}


class ConfigError(ValueError):
    """Raised when a query-run config is invalid."""


@dataclass(frozen=True)
class QueryRunConfig:
    """Resolved config for one reproducible query run."""

    run_name: str
    output_root: Path
    points_path: Path
    points_format: str
    columns: dict[str, str | None]
    range_queries: tuple[RectHV, ...]
    nearest_queries: tuple[Point2D, ...]
    query_config: QueryConfig

    def to_serializable_dict(self) -> dict[str, Any]:
        """Return config as plain Python types for YAML/JSON output."""
        return {
            "run": {
                "name": self.run_name,
                "output_root": str(self.output_root),
                "seed": self.query_config.seed,
            },
            "inputs": {
                "points_path": str(self.points_path),
                "points_format": self.points_format,
                "columns": dict(self.columns),
            },
            "queries": {
                "range": [[r.xmin, r.ymin, r.xmax, r.ymax] for r in self.range_queries],
                "nearest": [[p.x, p.y] for p in self.nearest_queries],
            },
            "options": {
                "cross_check": self.query_config.cross_check,
                "plot": self.query_config.plot,
                "random_nearest_queries": self.query_config.random_nearest_queries,
            },
        }


def load_query_run_config(config_path: str | Path) -> QueryRunConfig:
    """Load and validate YAML config for a query run."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle)

    if not isinstance(raw, dict):
        raise ConfigError("config root must be a mapping")

    run = _as_dict(raw.get("run"), "run")
    inputs = _as_dict(raw.get("inputs"), "inputs")
    queries = _as_dict(raw.get("queries"), "queries")
    options = _as_dict(raw.get("options"), "options")

    run_name = str(run.get("name", "query_run"))
    if not run_name.strip():
        raise ConfigError("run.name must be a non-empty string")

    output_root = Path(str(run.get("output_root", "runs"))).expanduser().resolve()
    seed = run.get("seed")
    if seed is not None:
        seed = int(seed)

    points_path = Path(str(_require(inputs, "points_path", "inputs"))).expanduser().resolve()
    points_format = _normalize_format(str(inputs.get("points_format", "auto")), points_path)
    columns = _default_columns(_as_dict(inputs.get("columns", {}), "inputs.columns"))

    range_queries = tuple(
        _parse_rect(item, f"queries.range[{i}]") for i, item in enumerate(_as_list(queries.get("range"), "queries.range"))
    )
    nearest_queries = tuple(
        _parse_point(item, f"queries.nearest[{i}]")
        for i, item in enumerate(_as_list(queries.get("nearest"), "queries.nearest"))
    )

    try:
        query_config = QueryConfig(
            cross_check=bool(options.get("cross_check", True)),
            plot=bool(options.get("plot", False)),
            random_nearest_queries=int(options.get("random_nearest_queries", 0)),
            seed=seed,
        )
    except ValueError as exc:
        raise ConfigError(f"invalid options: {exc}") from exc

    return QueryRunConfig(
        run_name=run_name,
        output_root=output_root,
        points_path=points_path,
        points_format=points_format,
        columns=columns,
        range_queries=range_queries,
        nearest_queries=nearest_queries,
        query_config=query_config,
    )


def run_queries(config: QueryRunConfig) -> Path:
    """Run the full query pipeline and return the output run directory."""
    config.output_root.mkdir(parents=True, exist_ok=True)

    timestamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    run_dir = config.output_root / f"{_slugify(config.run_name)}_{timestamp}"
    run_dir.mkdir(parents=False, exist_ok=False)

    config_dir = run_dir / "config"
    logs_dir = run_dir / "logs"
    config_dir.mkdir(parents=True, exist_ok=True)
    logs_dir.mkdir(parents=True, exist_ok=True)

    options = config.query_config
    steps_log_path = logs_dir / "steps.jsonl"
    _append_step_log(
        steps_log_path,
        event="run_start",
        payload={"run_name": config.run_name, "seed": options.seed},
    )
    logger.info("Query run %r writing to %s", config.run_name, run_dir)

    points_df = _load_table(config.points_path, config.points_format)
    _validate_points_schema(points_df, config.columns)
    _append_step_log(steps_log_path, event="table_loaded", payload={"n_input_rows": int(len(points_df))})

    items = _build_items(points_df, config.columns)
    tree: KdTreeST[Any] = KdTreeST()
    for point, value in items:
        tree.insert(point, value)
    _append_step_log(
        steps_log_path,
        event="tree_built",
        payload={"n_input_rows": int(len(items)), "n_points": int(tree.size())},
    )
    logger.info("Built tree with %d distinct points from %d rows", tree.size(), len(items))

    reference = BruteForcePointST(items) if options.cross_check else None

    nearest_queries = list(config.nearest_queries)
    if options.random_nearest_queries > 0 and not tree.is_empty():
        rng = np.random.default_rng(options.seed)
        nearest_queries.extend(_sample_query_points(tree, options.random_nearest_queries, rng))

    range_rows, range_mismatches = _run_range_queries(tree, reference, config.range_queries)
    _append_step_log(
        steps_log_path,
        event="range_queries_done",
        payload={"n_queries": int(len(config.range_queries)), "n_mismatches": int(range_mismatches)},
    )

    nearest_rows, nearest_mismatches = _run_nearest_queries(tree, reference, nearest_queries)
    _append_step_log(
        steps_log_path,
        event="nearest_queries_done",
        payload={"n_queries": int(len(nearest_queries)), "n_mismatches": int(nearest_mismatches)},
    )

    if range_mismatches or nearest_mismatches:
        logger.warning(
            "Cross-check found %d range and %d nearest mismatches",
            range_mismatches,
            nearest_mismatches,
        )

    pd.DataFrame(range_rows, columns=_RANGE_COLUMNS).to_csv(run_dir / "range_results.csv", index=False)
    pd.DataFrame(nearest_rows, columns=_NEAREST_COLUMNS).to_csv(run_dir / "nearest_results.csv", index=False)

    if options.plot:
        plot_path = save_tree_plot(tree, run_dir / "tree.png", bounds=default_bounds(tree), title=config.run_name)
        _append_step_log(steps_log_path, event="plot_saved", payload={"path": str(plot_path)})

    summary = _compute_summary(
        n_input_rows=len(items),
        tree=tree,
        range_rows=range_rows,
        nearest_rows=nearest_rows,
        cross_checked=reference is not None,
        range_mismatches=range_mismatches,
        nearest_mismatches=nearest_mismatches,
    )

    _write_yaml(config_dir / "config_resolved.yaml", config.to_serializable_dict())
    _write_json(config_dir / "metadata.json", _build_metadata(config=config, run_dir=run_dir))
    _write_json(run_dir / "summary.json", summary)
    _append_step_log(
        steps_log_path,
        event="run_complete",
        payload={
            "n_range_queries": int(summary["n_range_queries"]),
            "n_nearest_queries": int(summary["n_nearest_queries"]),
        },
    )

    return run_dir


def run_queries_from_config(config_path: str | Path) -> Path:
    """Convenience wrapper: load config, execute queries, and return run dir."""
    config = load_query_run_config(config_path)
    return run_queries(config)


_RANGE_COLUMNS = ["query_index", "xmin", "ymin", "xmax", "ymax", "n_found", "matches_reference"]
_NEAREST_COLUMNS = [
    "query_index",
    "query_x",
    "query_y",
    "nearest_x",
    "nearest_y",
    "distance",
    "matches_reference",
]


def _run_range_queries(
    tree: KdTreeST[Any],
    reference: BruteForcePointST[Any] | None,
    rects: tuple[RectHV, ...],
) -> tuple[list[dict[str, Any]], int]:
    rows: list[dict[str, Any]] = []
    mismatches = 0

    for idx, rect in enumerate(rects):
        found = tree.range(rect)

        matches: bool | None = None
        if reference is not None:
            matches = set(found) == set(reference.range(rect))
            if not matches:
                mismatches += 1
                logger.warning("Range query %d disagrees with brute force: %s", idx, rect)

        rows.append(
            {
                "query_index": idx,
                "xmin": rect.xmin,
                "ymin": rect.ymin,
                "xmax": rect.xmax,
                "ymax": rect.ymax,
                "n_found": len(found),
                "matches_reference": matches,
            }
        )

    return rows, mismatches


def _run_nearest_queries(
    tree: KdTreeST[Any],
    reference: BruteForcePointST[Any] | None,
    queries: list[Point2D],
) -> tuple[list[dict[str, Any]], int]:
    rows: list[dict[str, Any]] = []
    mismatches = 0

    for idx, query in enumerate(queries):
        champion = tree.nearest(query)

        matches: bool | None = None
        if reference is not None:
            expected = reference.nearest(query)
            # Equidistant points may differ, so compare distances only.
            if champion is None or expected is None:
                matches = champion is None and expected is None
            else:
                matches = champion.distance_squared_to(query) == expected.distance_squared_to(query)
            if not matches:
                mismatches += 1
                logger.warning("Nearest query %d disagrees with brute force: %s", idx, query)

        rows.append(
            {
                "query_index": idx,
                "query_x": query.x,
                "query_y": query.y,
                "nearest_x": None if champion is None else champion.x,
                "nearest_y": None if champion is None else champion.y,
                "distance": None if champion is None else champion.distance_to(query),
                "matches_reference": matches,
            }
        )

    return rows, mismatches


def _sample_query_points(tree: KdTreeST[Any], n: int, rng: np.random.Generator) -> list[Point2D]:
    bounds = default_bounds(tree, padding=0.0)
    xs = rng.uniform(bounds.xmin, bounds.xmax, size=n)
    ys = rng.uniform(bounds.ymin, bounds.ymax, size=n)
    return [Point2D(float(x), float(y)) for x, y in zip(xs, ys)]


def _as_dict(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{name} must be a mapping")
    return value


def _as_list(value: Any, name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{name} must be a list")
    return value


def _require(mapping: dict[str, Any], key: str, section: str) -> Any:
    if key not in mapping:
        raise ConfigError(f"missing required key '{key}' in section '{section}'")
    return mapping[key]


def _parse_numbers(item: Any, count: int, name: str) -> list[float]:
    if not isinstance(item, (list, tuple)) or len(item) != count:
        raise ConfigError(f"{name} must be a list of {count} numbers")
    try:
        return [float(v) for v in item]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must contain only numbers") from exc


def _parse_rect(item: Any, name: str) -> RectHV:
    xmin, ymin, xmax, ymax = _parse_numbers(item, 4, name)
    try:
        return RectHV(xmin, ymin, xmax, ymax)
    except ValueError as exc:
        raise ConfigError(f"{name}: {exc}") from exc


def _parse_point(item: Any, name: str) -> Point2D:
    x, y = _parse_numbers(item, 2, name)
    try:
        return Point2D(x, y)
    except ValueError as exc:
        raise ConfigError(f"{name}: {exc}") from exc


def _default_columns(overrides: dict[str, Any]) -> dict[str, str | None]:
    cols: dict[str, Any] = {
        "x": "x",
        "y": "y",
        "value": None,
    }
    cols.update(overrides)

    if cols["value"] is not None:
        cols["value"] = str(cols["value"])

    for key in ("x", "y"):
        if cols.get(key) is None:
            raise ConfigError(f"inputs.columns.{key} must not be null")
        cols[key] = str(cols[key])

    return cols


def _normalize_format(raw_format: str, path: Path) -> str:
    value = raw_format.strip().lower()
    if value == "auto":
        suffix = path.suffix.lower()
        if suffix == ".csv":
            return "csv"
        if suffix == ".tsv":
            return "tsv"
        if suffix in {".parquet", ".pq"}:
            return "parquet"
        if suffix == ".txt":
            return "whitespace"
        raise ConfigError(f"cannot infer format from extension for file: {path}")

    if value not in TABLE_FORMATS:
        raise ConfigError(f"unsupported table format: {raw_format!r}")
    return value


def _load_table(path: Path, table_format: str) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"table file not found: {path}")

    if table_format == "csv":
        return pd.read_csv(path)
    if table_format == "tsv":
        return pd.read_csv(path, sep="\t")
    if table_format == "parquet":
        return pd.read_parquet(path)
    if table_format == "whitespace":
        # Headerless "x y" per line, the classic point-file layout.
        return pd.read_csv(path, sep=r"\s+", header=None, names=["x", "y"])

    raise ConfigError(f"unsupported format in loader: {table_format!r}")


def _validate_points_schema(df: pd.DataFrame, columns: dict[str, str | None]) -> None:
    required = [col for col in (columns["x"], columns["y"], columns["value"]) if col is not None]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"missing columns in points table: {missing}")

    for key in ("x", "y"):
        col = columns[key]
        assert col is not None
        _validate_numeric_series(df[col], f"points.{col}")

    value_col = columns["value"]
    if value_col is not None and df[value_col].isna().any():
        raise ValueError(f"points value column {value_col!r} contains missing values")


def _validate_numeric_series(series: pd.Series, name: str) -> None:
    numeric = pd.to_numeric(series, errors="coerce")
    if numeric.isna().any():
        raise ValueError(f"column {name} contains non-numeric or missing values")

    values = numeric.to_numpy(dtype=np.float64, copy=False)
    if not np.isfinite(values).all():
        raise ValueError(f"column {name} contains non-finite values")


def _build_items(df: pd.DataFrame, columns: dict[str, str | None]) -> list[tuple[Point2D, Any]]:
    x_col = columns["x"]
    y_col = columns["y"]
    assert x_col is not None
    assert y_col is not None

    xs = pd.to_numeric(df[x_col], errors="raise").to_numpy(dtype=np.float64)
    ys = pd.to_numeric(df[y_col], errors="raise").to_numpy(dtype=np.float64)

    value_col = columns["value"]
    if value_col is not None:
        values = df[value_col].tolist()
    else:
        values = list(range(len(df)))

    return [(Point2D(float(xs[i]), float(ys[i])), values[i]) for i in range(len(df))]


def _compute_summary(
    n_input_rows: int,
    tree: KdTreeST[Any],
    range_rows: list[dict[str, Any]],
    nearest_rows: list[dict[str, Any]],
    cross_checked: bool,
    range_mismatches: int,
    nearest_mismatches: int,
) -> dict[str, Any]:
    found_counts = np.asarray([int(row["n_found"]) for row in range_rows], dtype=np.int64)
    distances = np.asarray(
        [float(row["distance"]) for row in nearest_rows if row["distance"] is not None],
        dtype=np.float64,
    )

    return {
        "n_input_rows": int(n_input_rows),
        "n_points": int(tree.size()),
        "n_duplicate_rows": int(n_input_rows - tree.size()),
        "n_range_queries": int(len(range_rows)),
        "range_found_total": int(found_counts.sum()) if len(found_counts) else 0,
        "range_found_mean": float(found_counts.mean()) if len(found_counts) else 0.0,
        "n_nearest_queries": int(len(nearest_rows)),
        "nearest_distance_mean": float(distances.mean()) if len(distances) else 0.0,
        "nearest_distance_max": float(distances.max()) if len(distances) else 0.0,
        "cross_checked": bool(cross_checked),
        "range_mismatches": int(range_mismatches),
        "nearest_mismatches": int(nearest_mismatches),
    }


def _build_metadata(config: QueryRunConfig, run_dir: Path) -> dict[str, Any]:
    now = dt.datetime.now(dt.timezone.utc).isoformat()

    metadata = {
        "timestamp_utc": now,
        "run_dir": str(run_dir),
        "seed": config.query_config.seed,
        "python_version": sys.version,
        "platform": platform.platform(),
        "git_commit": _try_git_commit(),
    }
    return metadata


def _try_git_commit() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        return completed.stdout.strip() or None
    except (OSError, subprocess.CalledProcessError):
        return None


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=False)
        handle.write("\n")


def _write_yaml(path: Path, payload: dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, sort_keys=False)


def _append_step_log(path: Path, event: str, payload: dict[str, Any]) -> None:
    entry = {
        "timestamp_utc": dt.datetime.now(dt.timezone.utc).isoformat(),
        "event": event,
        "payload": payload,
    }
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(entry, sort_keys=False))
        handle.write("\n")


def _slugify(text: str) -> str:
    normalized = re.sub(r"[^A-Za-z0-9._-]+", "_", text.strip())
    normalized = normalized.strip("_")
    return normalized or "item"
