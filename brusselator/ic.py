from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from .errors import ShapeMismatch
from .grid import Grid2D

Array = np.ndarray


def reference_initial_state(grid: Grid2D) -> Array:
    """
    Standard Brusselator initial state on ``grid``.

    ``U[i, j] = 22 * (y_j * (1 - y_j))**1.5`` and
    ``V[i, j] = 27 * (x_i * (1 - x_i))**1.5`` with coordinates scaled to the
    unit square, so the profile spans the grid for any ``length``.
    """
    X = grid.X / grid.length
    Y = grid.Y / grid.length
    u0 = np.empty(grid.state_shape, dtype=float)
    u0[:, :, 0] = 22.0 * (Y * (1.0 - Y)) ** 1.5
    u0[:, :, 1] = 27.0 * (X * (1.0 - X)) ** 1.5
    return u0


def _build_safe_eval_env() -> dict:
    """
    Very small, explicit namespace for expression evaluation.

    Only numpy is exposed, under the name ``np``; ``x`` and ``y`` are
    injected at call time.
    """
    return {"np": np}


def _as_field(value, grid: Grid2D, name: str) -> Array:
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 0:
        return np.full(grid.shape, float(arr))
    if arr.shape != grid.shape:
        raise ShapeMismatch(
            f"Initial {name} has shape {arr.shape}, but the grid has shape {grid.shape}."
        )
    return arr


@dataclass
class InitialCondition2D:
    """
    Initial state of both fields, specified as exactly one of:

    - a pair of string expressions in ``x``, ``y`` and ``np``
      (e.g. ``("1.0 + 0.1*np.sin(2*np.pi*x)", "3.0")``),
    - a callable ``f(X, Y) -> (U, V)`` on the ``indexing="ij"`` mesh,
    - a concrete array of shape ``(N, N, 2)``,
    - ``reference=True`` for :func:`reference_initial_state`.

    Scalar results are broadcast over the grid.
    """

    exprs: Optional[Tuple[str, str]] = None
    values: Optional[Array] = None
    func: Optional[Callable[[Array, Array], Tuple[Array, Array]]] = None
    reference: bool = False

    def __post_init__(self) -> None:
        modes = [
            self.exprs is not None,
            self.values is not None,
            self.func is not None,
            bool(self.reference),
        ]
        if sum(modes) != 1:
            raise ValueError(
                "InitialCondition2D expects exactly one of exprs, values, func or reference."
            )
        if self.exprs is not None and len(self.exprs) != 2:
            raise ValueError("exprs must be a pair (u_expr, v_expr).")

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_reference(cls) -> "InitialCondition2D":
        return cls(reference=True)

    @classmethod
    def from_expressions(cls, u_expr: str, v_expr: str) -> "InitialCondition2D":
        return cls(exprs=(u_expr, v_expr))

    @classmethod
    def from_values(cls, values) -> "InitialCondition2D":
        return cls(values=np.asarray(values, dtype=float))

    @classmethod
    def from_callable(
        cls, func: Callable[[Array, Array], Tuple[Array, Array]]
    ) -> "InitialCondition2D":
        return cls(func=func)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def evaluate(self, grid: Grid2D) -> Array:
        """Return a new ``(N, N, 2)`` state array on ``grid``."""
        if self.reference:
            return reference_initial_state(grid)

        X, Y = grid.X, grid.Y
        if self.exprs is not None:
            env = _build_safe_eval_env()
            env["x"] = X
            env["y"] = Y
            u_expr, v_expr = self.exprs
            U = eval(u_expr, {"__builtins__": {}}, env)
            V = eval(v_expr, {"__builtins__": {}}, env)
        elif self.func is not None:
            U, V = self.func(X, Y)
        else:
            arr = np.array(self.values, dtype=float)
            if arr.shape != grid.state_shape:
                raise ShapeMismatch(
                    f"Initial condition values have shape {arr.shape}, "
                    f"but the grid state has shape {grid.state_shape}."
                )
            return arr

        u0 = np.empty(grid.state_shape, dtype=float)
        u0[:, :, 0] = _as_field(U, grid, "U")
        u0[:, :, 1] = _as_field(V, grid, "V")
        return u0
