"""Per-tile records produced by the fetcher and consumed by the reducer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

__all__ = ['TileCoordinate', 'TileRange', 'LayerSample', 'TileResult', 'TileFailure']


@dataclass(frozen=True)
class TileCoordinate:
    """(x, y) of one tile at the run's target zoom."""
    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


@dataclass(frozen=True)
class TileRange:
    """Inclusive rectangle of tile coordinates at a single zoom level."""
    zoom: int
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def count(self) -> int:
        return self.width * self.height

    def __iter__(self) -> Iterator[TileCoordinate]:
        # x outer, y inner
        for x in range(self.min_x, self.max_x + 1):
            for y in range(self.min_y, self.max_y + 1):
                yield TileCoordinate(x, y)

    def __len__(self) -> int:
        return self.count

    def __contains__(self, coord) -> bool:
        return (
            isinstance(coord, TileCoordinate)
            and self.min_x <= coord.x <= self.max_x
            and self.min_y <= coord.y <= self.max_y
        )


@dataclass(frozen=True)
class LayerSample:
    """Feature count of one named layer within one tile."""
    name: str
    feature_count: int


@dataclass(frozen=True)
class TileResult:
    """Outcome of one successful fetch.

    Attributes:
        coordinate: where the tile sits in the grid.
        byte_size: body length as received on the wire (compressed if gzip was used).
        total_features: sum of feature counts over all layers.
        layers: layer samples in payload order.
    """
    coordinate: TileCoordinate
    byte_size: int
    total_features: int
    layers: Tuple[LayerSample, ...] = ()

    @classmethod
    def from_layers(cls, coordinate: TileCoordinate, byte_size: int, layers) -> "TileResult":
        layers = tuple(layers)
        return cls(
            coordinate=coordinate,
            byte_size=byte_size,
            total_features=sum(layer.feature_count for layer in layers),
            layers=layers,
        )


@dataclass(frozen=True)
class TileFailure:
    """Outcome of one failed (or cancelled) fetch."""
    coordinate: TileCoordinate
    url: str
    error: Exception

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"
