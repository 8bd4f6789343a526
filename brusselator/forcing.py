from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

# Relative slack on the disc test so points exactly on the circle stay inside
# after rounding of the squared distance.
_BOUNDARY_RTOL = 64 * np.finfo(float).eps


@dataclass(frozen=True)
class Forcing:
    """
    Disc-shaped source term that switches on at a fixed time.

    ``f(x, y, t) = amplitude`` if ``(x - cx)**2 + (y - cy)**2 <= radius_squared``
    and ``t >= onset``, otherwise ``0.0``. Both comparisons are inclusive; the
    disc test allows a few ulps of rounding in the squared distance.
    The term is added to the ``U`` equation only.
    """

    center: Tuple[float, float] = (0.3, 0.6)
    radius_squared: float = 0.01
    amplitude: float = 5.0
    onset: float = 1.1

    def _inside(self, x, y):
        cx, cy = self.center
        d2 = (x - cx) ** 2 + (y - cy) ** 2
        return d2 <= self.radius_squared * (1.0 + _BOUNDARY_RTOL)

    @classmethod
    def disabled(cls) -> "Forcing":
        return cls(amplitude=0.0)

    def __call__(self, x: float, y: float, t: float) -> float:
        if self._inside(x, y) and t >= self.onset:
            return self.amplitude
        return 0.0

    def disc_mask(self, X: np.ndarray, Y: np.ndarray) -> np.ndarray:
        """Boolean mask of the grid points inside the (closed) disc."""
        return self._inside(np.asarray(X), np.asarray(Y))

    def on_grid(self, X: np.ndarray, Y: np.ndarray, t: float) -> np.ndarray:
        """Evaluate the forcing on mesh arrays ``X``, ``Y`` at time ``t``."""
        if t >= self.onset:
            return np.where(self.disc_mask(X, Y), self.amplitude, 0.0)
        return np.zeros(np.shape(X), dtype=float)

    def to_dict(self) -> Dict:
        return {
            "center": list(self.center),
            "radius_squared": self.radius_squared,
            "amplitude": self.amplitude,
            "onset": self.onset,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Forcing":
        default = cls()
        center = data.get("center", default.center)
        return cls(
            center=(float(center[0]), float(center[1])),
            radius_squared=float(data.get("radius_squared", default.radius_squared)),
            amplitude=float(data.get("amplitude", default.amplitude)),
            onset=float(data.get("onset", default.onset)),
        )
