"""Rendering of a ``ProbeSummary`` as a text table or JSON."""

import json
from typing import List

import pandas as pd

from tileprobe.pipeline.aggregate import ProbeSummary

__all__ = ['render_table', 'render_json']

INDENT = "  "

_SIZE_COLUMNS = {
    "min": "MinSize", "min_at": "MinSizeAt",
    "max": "MaxSize", "max_at": "MaxSizeAt", "avg": "AvgSize",
}
_FEATURE_COLUMNS = {
    "min": "MinFeatures", "min_at": "MinFeaturesAt",
    "max": "MaxFeatures", "max_at": "MaxFeaturesAt", "avg": "AvgFeatures",
}
_LAYER_COLUMNS = {
    "layer": "Layer", "cover": "Cover",
    "min": "MinCount", "min_at": "MinCountAt",
    "max": "MaxCount", "max_at": "MaxCountAt", "avg": "AvgCount",
}


def _format_avg(value: float) -> str:
    return f"{value:.2f}"


def _frame_lines(df: pd.DataFrame, avg_column: str) -> List[str]:
    text = df.to_string(index=False, formatters={avg_column: _format_avg})
    return [INDENT + line for line in text.splitlines()]


def render_table(summary: ProbeSummary) -> str:
    """Render the two report sections as aligned text.

    Layout::

        Tile(zoom=8, count=16):
          MinSize MinSizeAt MaxSize MaxSizeAt AvgSize
          ...
          MinFeatures MinFeaturesAt MaxFeatures MaxFeaturesAt AvgFeatures
          ...
        Layers(count=2):
          Layer Cover MinCount MinCountAt MaxCount MaxCountAt AvgCount
          ...

    A ``Failed(count=N):`` section follows when tiles were skipped.
    """
    tiles_df, layers_df = summary.to_frames()
    lines = [f"Tile(zoom={summary.zoom}, count={summary.global_.tile_count}):"]

    if tiles_df.empty:
        lines.append(INDENT + "(no tiles)")
    else:
        tiles_df = tiles_df.set_index("quantity")
        for quantity, columns in (("size", _SIZE_COLUMNS), ("features", _FEATURE_COLUMNS)):
            row = tiles_df.loc[[quantity]].rename(columns=columns)
            lines.extend(_frame_lines(row[list(columns.values())], columns["avg"]))

    lines.append(f"Layers(count={len(summary.layers)}):")
    if not layers_df.empty:
        layers_df = layers_df.rename(columns=_LAYER_COLUMNS)
        lines.extend(_frame_lines(layers_df, "AvgCount"))

    if summary.failures:
        lines.append(f"Failed(count={len(summary.failures)}):")
        for failure in summary.failures:
            lines.append(f"{INDENT}{failure.coordinate} {failure.url} {failure.reason}")

    return "\n".join(lines)


def render_json(summary: ProbeSummary) -> str:
    """Render the summary as indented JSON."""
    return json.dumps(summary.to_dict(), indent=2)
