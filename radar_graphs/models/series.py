from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional, Sequence

import numpy as np


class Point(NamedTuple):
    """One (x, y) sample in data space."""

    x: float
    y: float


@dataclass(frozen=True, eq=False)
class Series:
    """
    Named sequence of (x, y) samples derived from one Y column of one file.

    Notes
    - x and y are float64 arrays of equal length, in file-row order (not necessarily sorted by x).
    - Every stored pair is finite; use :meth:`from_pairs` to build from raw columns.
    """
    name: str
    x: np.ndarray
    y: np.ndarray

    def __post_init__(self) -> None:
        x = np.asarray(self.x, dtype=np.float64)
        y = np.asarray(self.y, dtype=np.float64)
        if x.shape != y.shape or x.ndim != 1:
            raise ValueError(f"Series '{self.name}': x and y must be 1-D of equal length, got {x.shape} and {y.shape}")
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise ValueError(f"Series '{self.name}': non-finite samples are not allowed")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    @classmethod
    def from_pairs(cls, name: str, xs: Sequence[float], ys: Sequence[float]) -> "Series":
        """Pair xs[i] with ys[i] for i < min(len) and drop pairs with a NaN/inf member."""
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        n = min(xs.size, ys.size)
        xs = xs[:n]
        ys = ys[:n]
        keep = np.isfinite(xs) & np.isfinite(ys)
        return cls(name=name, x=xs[keep], y=ys[keep])

    def __len__(self) -> int:
        return int(self.x.size)

    def points(self) -> Iterator[Point]:
        for xv, yv in zip(self.x.tolist(), self.y.tolist()):
            yield Point(xv, yv)


@dataclass(frozen=True)
class Bounds:
    """Data-space rectangle currently mapped onto the plot area."""
    min_x: float = 0.0
    max_x: float = 1.0
    min_y: float = 0.0
    max_y: float = 1.0

    @property
    def span_x(self) -> float:
        return self.max_x - self.min_x

    @property
    def span_y(self) -> float:
        return self.max_y - self.min_y


@dataclass
class SchemaMap:
    """
    Header-driven column assignment for one file. Discarded once series are built.

    time_scale_to_seconds: multiply raw time values by this to get seconds.
    """
    x_index: Optional[int] = None
    time_scale_to_seconds: float = 1.0
    x_title: Optional[str] = None
    y_indices: List[int] = field(default_factory=list)
