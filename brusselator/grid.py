from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, Tuple

import numpy as np


def wrap_index(k: int, n: int) -> int:
    """
    Map an integer index onto the periodic range ``0..n-1``.

    ``wrap_index(-1, n) == n - 1`` and ``wrap_index(n, n) == 0``.
    """
    return k % n


@dataclass(frozen=True)
class Grid2D:
    """
    Uniform periodic ``n x n`` grid on the square ``[0, length)^2``.

    Parameters
    ----------
    n:
        Number of grid points per axis (at least 2).
    length:
        Side length of the periodic square. The right/top edge is identified
        with the left/bottom edge, so it is not part of the grid.

    Notes
    -----
    Coordinates are ``x[i] = i * spacing`` with ``spacing = length / n``.
    Arrays on this grid use ``indexing="ij"``: the first axis is ``x``, the
    second axis is ``y``.
    """

    n: int
    length: float = 1.0

    def __post_init__(self) -> None:
        if int(self.n) != self.n or self.n < 2:
            raise ValueError("n must be an integer of at least 2.")
        if not self.length > 0:
            raise ValueError("length must be positive.")

        object.__setattr__(self, "n", int(self.n))
        object.__setattr__(self, "length", float(self.length))

        coords = np.arange(self.n) * self.spacing
        coords.setflags(write=False)
        object.__setattr__(self, "_coords", coords)

    # ------------------------------------------------------------------
    # Basic properties
    # ------------------------------------------------------------------
    @property
    def spacing(self) -> float:
        """Return the uniform grid spacing."""
        return self.length / self.n

    @property
    def x(self) -> np.ndarray:
        """Return the 1D grid coordinates along the first axis."""
        return self._coords

    @property
    def y(self) -> np.ndarray:
        """Return the 1D grid coordinates along the second axis."""
        return self._coords

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.n, self.n)

    @property
    def size(self) -> int:
        return self.n * self.n

    @property
    def X(self) -> np.ndarray:
        return np.meshgrid(self.x, self.y, indexing="ij")[0]

    @property
    def Y(self) -> np.ndarray:
        return np.meshgrid(self.x, self.y, indexing="ij")[1]

    @property
    def state_shape(self) -> Tuple[int, int, int]:
        """Shape of a two-component field state on this grid."""
        return (self.n, self.n, 2)

    # ------------------------------------------------------------------
    # Flattening helpers
    # ------------------------------------------------------------------
    def flatten(self, field: np.ndarray) -> np.ndarray:
        """Flatten an ``(n, n)`` field to a vector indexed by ``i*n + j``."""
        field = np.asarray(field, dtype=float)
        if field.shape != self.shape:
            raise ValueError(
                f"Field has shape {field.shape}, expected {self.shape}."
            )
        return field.reshape(self.size)

    def unflatten(self, vec: np.ndarray) -> np.ndarray:
        vec = np.asarray(vec, dtype=float)
        if vec.size != self.size:
            raise ValueError(
                f"Vector has {vec.size} entries, expected {self.size}."
            )
        return vec.reshape(self.shape)

    # ------------------------------------------------------------------
    # (De-)serialisation helpers
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict:
        """Convert this grid into a JSON-serialisable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "Grid2D":
        """
        Construct a Grid2D from a dictionary with key ``n`` and an optional
        ``length`` (defaults to 1.0).
        """
        return cls(n=int(data["n"]), length=float(data.get("length", 1.0)))
