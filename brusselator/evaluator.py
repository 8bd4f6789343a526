"""
Method-of-lines right-hand side of the 2D Brusselator.

The PDE

    U_t = alpha * (U_xx + U_yy) + B + U^2 V - (A + 1) U + f(x, y, t)
    V_t = alpha * (V_xx + V_yy) + A U - U^2 V

is discretised on a periodic ``N x N`` grid with the 5-point stencil. The
state packs both fields into one array of shape ``(N, N, 2)`` with
``U = u[:, :, 0]`` and ``V = u[:, :, 1]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence, Tuple, Union

import numpy as np

from .errors import ShapeMismatch
from .forcing import Forcing
from .grid import Grid2D, wrap_index
from .parameters import BrusselatorParameters

Array = np.ndarray
ParametersLike = Union[BrusselatorParameters, Sequence[float]]


def periodic_laplacian(f: Array) -> Array:
    """
    Unscaled 5-point Laplacian of a 2D field with periodic wraparound.

    ``lap[i, j] = f[i-1, j] + f[i+1, j] + f[i, j-1] + f[i, j+1] - 4 f[i, j]``
    where all indices are taken modulo the axis length.
    """
    return (
        np.roll(f, 1, axis=0)
        + np.roll(f, -1, axis=0)
        + np.roll(f, 1, axis=1)
        + np.roll(f, -1, axis=1)
        - 4.0 * f
    )


@dataclass(frozen=True)
class Brusselator2DEvaluator:
    """
    Evaluate ``du/dt`` of the semi-discretised Brusselator into a buffer.

    Parameters
    ----------
    grid:
        Periodic grid the state lives on.
    forcing:
        Source term added to the ``U`` equation. Defaults to the standard
        disc at ``(0.3, 0.6)`` switched on at ``t = 1.1``.

    The evaluator holds no time-dependent state; the only cached data is the
    disc mask of the forcing on ``grid``, so instances are frozen.
    """

    grid: Grid2D
    forcing: Forcing = field(default_factory=Forcing)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_disc", self.forcing.disc_mask(self.grid.X, self.grid.Y))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def _check_shapes(self, du: Array, u: Array) -> None:
        expected = self.grid.state_shape
        if du.shape != expected:
            raise ShapeMismatch(
                f"Output buffer has shape {du.shape}, expected {expected}."
            )
        if u.shape != expected:
            raise ShapeMismatch(f"State has shape {u.shape}, expected {expected}.")

    def forcing_values(self, t: float) -> Array:
        """Forcing term on the whole grid at time ``t``."""
        if t >= self.forcing.onset:
            return np.where(self._disc, self.forcing.amplitude, 0.0)
        return np.zeros(self.grid.shape, dtype=float)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def evaluate(self, du: Array, u: Array, parameters: ParametersLike, t: float) -> None:
        """
        Overwrite ``du`` with the time derivative of state ``u`` at time ``t``.

        Parameters
        ----------
        du:
            Writable float array of shape ``(N, N, 2)``; every entry is
            overwritten.
        u:
            Current state of shape ``(N, N, 2)``; never modified.
        parameters:
            :class:`BrusselatorParameters` or a plain ``(A, B, alpha, dx)``
            tuple.
        t:
            Current time.

        Raises
        ------
        TypeError
            If ``du`` is not a floating-point NumPy array.
        ShapeMismatch
            If ``du`` or ``u`` do not have shape ``(N, N, 2)``.
        InvalidParameter
            If ``dx`` is zero or not finite.

        All of these are raised before ``du`` is touched.
        """
        if not isinstance(du, np.ndarray):
            raise TypeError("Output buffer du must be a NumPy array.")
        if not np.issubdtype(du.dtype, np.floating):
            raise TypeError(f"Output buffer du must have a floating dtype, got {du.dtype}.")
        u = np.asarray(u)
        self._check_shapes(du, u)

        p = BrusselatorParameters.coerce(parameters)
        p.validate()
        A, B = p.A, p.B
        alpha_eff = p.alpha_eff

        U = u[:, :, 0]
        V = u[:, :, 1]
        uuv = U * U * V

        # Both components are finished before du is written, so du may alias u.
        dU = alpha_eff * periodic_laplacian(U) + B + uuv - (A + 1.0) * U + self.forcing_values(t)
        dV = alpha_eff * periodic_laplacian(V) + A * U - uuv

        du[:, :, 0] = dU
        du[:, :, 1] = dV

    def cell_derivative(
        self, u: Array, i: int, j: int, parameters: ParametersLike, t: float
    ) -> Tuple[float, float]:
        """
        Derivative pair ``(dU/dt, dV/dt)`` of a single cell.

        Straight per-cell form of :meth:`evaluate`, useful as a reference and
        for inspecting individual cells.
        """
        u = np.asarray(u)
        if u.shape != self.grid.state_shape:
            raise ShapeMismatch(
                f"State has shape {u.shape}, expected {self.grid.state_shape}."
            )
        p = BrusselatorParameters.coerce(parameters)
        p.validate()

        n = self.grid.n
        ip1, im1 = wrap_index(i + 1, n), wrap_index(i - 1, n)
        jp1, jm1 = wrap_index(j + 1, n), wrap_index(j - 1, n)

        def lap(c: int) -> float:
            return (
                u[im1, j, c] + u[ip1, j, c] + u[i, jm1, c] + u[i, jp1, c]
                - 4.0 * u[i, j, c]
            )

        Uij = float(u[i, j, 0])
        Vij = float(u[i, j, 1])
        uuv = Uij * Uij * Vij
        f = self.forcing(self.grid.x[i], self.grid.y[j], t)

        dU = p.alpha_eff * lap(0) + p.B + uuv - (p.A + 1.0) * Uij + f
        dV = p.alpha_eff * lap(1) + p.A * Uij - uuv
        return float(dU), float(dV)
