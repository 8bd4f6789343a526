from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Dict, Sequence, Tuple, Union

from .errors import InvalidParameter
from .grid import Grid2D


@dataclass(frozen=True)
class BrusselatorParameters:
    """
    Rate constants and diffusion scaling of the 2D Brusselator.

    Parameters
    ----------
    A, B:
        Reaction rate constants.
    alpha:
        Diffusion coefficient.
    dx:
        Grid spacing used to scale the discrete Laplacian,
        ``alpha_eff = alpha / dx**2``.

    Only ``dx`` is checked; negative or zero rates are numerically valid and
    accepted.
    """

    A: float
    B: float
    alpha: float
    dx: float

    @property
    def alpha_eff(self) -> float:
        return self.alpha / (self.dx * self.dx)

    def validate(self) -> None:
        """Raise :class:`InvalidParameter` if ``dx`` is zero or not finite."""
        if not math.isfinite(self.dx):
            raise InvalidParameter(f"Grid spacing dx must be finite, got {self.dx!r}.")
        if self.dx == 0:
            raise InvalidParameter("Grid spacing dx must be non-zero.")

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.A, self.B, self.alpha, self.dx)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def coerce(
        cls, obj: Union["BrusselatorParameters", Sequence[float]]
    ) -> "BrusselatorParameters":
        """Accept either an instance or a plain ``(A, B, alpha, dx)`` sequence."""
        if isinstance(obj, cls):
            return obj
        values = tuple(obj)
        if len(values) != 4:
            raise InvalidParameter(
                f"Expected parameters (A, B, alpha, dx), got {len(values)} values."
            )
        return cls(*(float(v) for v in values))

    @classmethod
    def for_grid(
        cls,
        grid: Grid2D,
        A: float = 3.4,
        B: float = 1.0,
        alpha: float = 10.0,
    ) -> "BrusselatorParameters":
        """Build parameters whose ``dx`` is the spacing of ``grid``."""
        return cls(A=float(A), B=float(B), alpha=float(alpha), dx=grid.spacing)

    # ------------------------------------------------------------------
    # (De-)serialisation helpers
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict, grid: Grid2D | None = None) -> "BrusselatorParameters":
        """
        Construct parameters from a dictionary.

        ``dx`` may be omitted when a grid is given, in which case the grid
        spacing is used.
        """
        if "dx" in data:
            dx = float(data["dx"])
        elif grid is not None:
            dx = grid.spacing
        else:
            raise ValueError("Parameters require 'dx' when no grid is given.")
        return cls(
            A=float(data.get("A", 3.4)),
            B=float(data.get("B", 1.0)),
            alpha=float(data.get("alpha", 10.0)),
            dx=dx,
        )
