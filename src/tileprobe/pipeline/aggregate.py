"""Running aggregate state owned by the stream reducer.

Nothing here is thread-safe and nothing needs to be: the reducer thread is
the only writer. ``ProbeSummary`` is the frozen view handed to reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pandas as pd

from tileprobe.tiles.models import TileCoordinate, TileFailure

__all__ = ['ExtremumRecord', 'GlobalAggregate', 'LayerAggregate', 'ProbeSummary']


@dataclass
class ExtremumRecord:
    """Running minimum or maximum and the coordinate it was first seen at."""
    value: int
    at: TileCoordinate

    def offer_min(self, value: int, at: TileCoordinate) -> bool:
        # strict: an equal later value never replaces the first one
        if value < self.value:
            self.value, self.at = value, at
            return True
        return False

    def offer_max(self, value: int, at: TileCoordinate) -> bool:
        if value > self.value:
            self.value, self.at = value, at
            return True
        return False

    def to_dict(self) -> dict:
        return {"value": self.value, "x": self.at.x, "y": self.at.y}


@dataclass
class GlobalAggregate:
    """Size and feature statistics over every reduced tile."""
    min_size: Optional[ExtremumRecord] = None
    max_size: Optional[ExtremumRecord] = None
    total_size: int = 0
    min_features: Optional[ExtremumRecord] = None
    max_features: Optional[ExtremumRecord] = None
    total_features: int = 0
    tile_count: int = 0

    def observe(self, size: int, features: int, at: TileCoordinate) -> None:
        if self.tile_count == 0:
            self.min_size = ExtremumRecord(size, at)
            self.max_size = ExtremumRecord(size, at)
            self.min_features = ExtremumRecord(features, at)
            self.max_features = ExtremumRecord(features, at)
        else:
            self.min_size.offer_min(size, at)
            self.max_size.offer_max(size, at)
            self.min_features.offer_min(features, at)
            self.max_features.offer_max(features, at)
        self.total_size += size
        self.total_features += features
        self.tile_count += 1

    @property
    def avg_size(self) -> float:
        return self.total_size / self.tile_count if self.tile_count else 0.0

    @property
    def avg_features(self) -> float:
        return self.total_features / self.tile_count if self.tile_count else 0.0

    def to_dict(self) -> dict:
        def _ext(rec):
            return rec.to_dict() if rec is not None else None

        return {
            "tile_count": self.tile_count,
            "size": {
                "min": _ext(self.min_size),
                "max": _ext(self.max_size),
                "total": self.total_size,
                "avg": self.avg_size,
            },
            "features": {
                "min": _ext(self.min_features),
                "max": _ext(self.max_features),
                "total": self.total_features,
                "avg": self.avg_features,
            },
        }


@dataclass
class LayerAggregate:
    """Feature-count statistics of one layer over the tiles it appears in."""
    name: str
    min: ExtremumRecord
    max: ExtremumRecord
    total: int
    covered_tile_count: int

    @classmethod
    def seed(cls, name: str, count: int, at: TileCoordinate) -> "LayerAggregate":
        return cls(
            name=name,
            min=ExtremumRecord(count, at),
            max=ExtremumRecord(count, at),
            total=count,
            covered_tile_count=1,
        )

    def observe(self, count: int, at: TileCoordinate) -> None:
        self.min.offer_min(count, at)
        self.max.offer_max(count, at)
        self.total += count
        self.covered_tile_count += 1

    @property
    def avg(self) -> float:
        return self.total / self.covered_tile_count

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "cover": self.covered_tile_count,
            "min": self.min.to_dict(),
            "max": self.max.to_dict(),
            "total": self.total,
            "avg": self.avg,
        }


@dataclass(frozen=True)
class ProbeSummary:
    """Finalized statistics of one probe run.

    Built exactly once by the reducer after the last expected item. Layers are
    sorted by name (codepoint order), failures by coordinate.
    """
    zoom: int
    expected_tiles: int
    global_: GlobalAggregate
    layers: Tuple[LayerAggregate, ...] = ()
    failures: Tuple[TileFailure, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, zoom: int, expected_tiles: int, global_: GlobalAggregate,
              layers: Dict[str, LayerAggregate], failures: List[TileFailure]) -> "ProbeSummary":
        return cls(
            zoom=zoom,
            expected_tiles=expected_tiles,
            global_=global_,
            layers=tuple(layers[name] for name in sorted(layers)),
            failures=tuple(sorted(failures, key=lambda f: (f.coordinate.x, f.coordinate.y))),
        )

    def layer(self, name: str) -> LayerAggregate:
        for agg in self.layers:
            if agg.name == name:
                return agg
        raise KeyError(name)

    def to_frames(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Return (tile statistics, layer statistics) as DataFrames.

        The tile frame has one row per measured quantity (``size`` and
        ``features``); the layer frame one row per layer in name order.
        """
        g = self.global_
        tile_rows = []
        if g.tile_count:
            for quantity, lo, hi, avg in (
                ("size", g.min_size, g.max_size, g.avg_size),
                ("features", g.min_features, g.max_features, g.avg_features),
            ):
                tile_rows.append({
                    "quantity": quantity,
                    "min": lo.value,
                    "min_at": str(lo.at),
                    "max": hi.value,
                    "max_at": str(hi.at),
                    "avg": avg,
                })
        tiles_df = pd.DataFrame(
            tile_rows, columns=["quantity", "min", "min_at", "max", "max_at", "avg"]
        )

        layers_df = pd.DataFrame(
            [
                {
                    "layer": agg.name,
                    "cover": agg.covered_tile_count,
                    "min": agg.min.value,
                    "min_at": str(agg.min.at),
                    "max": agg.max.value,
                    "max_at": str(agg.max.at),
                    "avg": agg.avg,
                }
                for agg in self.layers
            ],
            columns=["layer", "cover", "min", "min_at", "max", "max_at", "avg"],
        )
        return tiles_df, layers_df

    def to_dict(self) -> dict:
        return {
            "zoom": self.zoom,
            "expected_tiles": self.expected_tiles,
            "tiles": self.global_.to_dict(),
            "layers": [agg.to_dict() for agg in self.layers],
            "failures": [
                {"x": f.coordinate.x, "y": f.coordinate.y, "url": f.url, "error": f.reason}
                for f in self.failures
            ],
        }
