"""
Plotting utilities for 2D Brusselator fields.

All functions in this module are optional helpers: solving works without
them. The module forces the Agg backend so it is safe in headless
environments (e.g. CI servers).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Sequence

import matplotlib

# Use non-interactive backend suitable for headless environments.
matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from tqdm.auto import tqdm  # noqa: E402

from .grid import Grid2D  # noqa: E402

COMPONENT_NAMES = ("U", "V")


def _save_and_close(fig, savepath: Optional[str | Path]) -> None:
    if savepath is not None:
        savepath = str(savepath)
        os.makedirs(os.path.dirname(savepath) or ".", exist_ok=True)
        fig.savefig(savepath, dpi=150, bbox_inches="tight")
    plt.close(fig)


def plot_2d(
    X: np.ndarray,
    Y: np.ndarray,
    Z: np.ndarray,
    title: Optional[str] = None,
    savepath: Optional[str | Path] = None,
    label: str = "u(x,y)",
) -> None:
    """
    Plot a 2D field as a heatmap.

    Parameters
    ----------
    X, Y:
        Mesh arrays (``indexing="ij"``) of the grid coordinates.
    Z:
        Field values with the same shape as ``X``.
    title:
        Optional plot title.
    savepath:
        Optional filesystem path. If provided, the plot is saved as a PNG
        (dpi=150).
    """
    X = np.asarray(X)
    Y = np.asarray(Y)
    Z = np.asarray(Z)
    if not (X.shape == Y.shape == Z.shape):
        raise ValueError("X, Y and Z must have the same shape.")

    fig, ax = plt.subplots()
    mesh = ax.pcolormesh(X, Y, Z, shading="auto", cmap="viridis")
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_aspect("equal")
    if title:
        ax.set_title(title)
    fig.colorbar(mesh, ax=ax, label=label)

    _save_and_close(fig, savepath)


def plot_field_snapshots(
    grid: Grid2D,
    states: np.ndarray,
    times: Sequence[float],
    component: int = 0,
    prefix: str = "solution2d",
    out_dir: Optional[str | Path] = None,
) -> List[Path]:
    """
    Save one heatmap per time point for a single field component.

    Parameters
    ----------
    states:
        Array of shape ``(nt, N, N, 2)``.
    times:
        Sequence of ``nt`` times.
    component:
        0 for ``U``, 1 for ``V``.

    Returns
    -------
    paths:
        List of Path objects for the generated PNG files.
    """
    states = np.asarray(states)
    times = list(times)

    if states.ndim != 4 or states.shape[1:] != grid.state_shape:
        raise ValueError(
            f"states must have shape (nt,) + {grid.state_shape}, got {states.shape}."
        )
    if states.shape[0] != len(times):
        raise ValueError("states first dimension must match len(times).")
    if component not in (0, 1):
        raise ValueError("component must be 0 (U) or 1 (V).")

    if out_dir is None:
        out_dir = "."
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    name = COMPONENT_NAMES[component]
    X, Y = grid.X, grid.Y

    paths: List[Path] = []
    iterator = tqdm(
        enumerate(times),
        total=len(times),
        desc=f"Plotting {name} snapshots",
        leave=False,
    )
    for k, t in iterator:
        fpath = out_dir / f"{prefix}_{name}_t{k:04d}.png"
        plot_2d(
            X,
            Y,
            states[k, :, :, component],
            title=f"{name} at t={t:.3g}",
            savepath=fpath,
            label=name,
        )
        paths.append(fpath)

    return paths


def plot_mean_time_series(
    times: Sequence[float],
    states: np.ndarray,
    title: Optional[str] = None,
    savepath: Optional[str | Path] = None,
) -> None:
    """
    Plot the spatial means of ``U`` and ``V`` against time.

    ``states`` has shape ``(nt, N, N, 2)``.
    """
    times = np.asarray(times)
    states = np.asarray(states)
    if states.ndim != 4 or states.shape[-1] != 2:
        raise ValueError("states must have shape (nt, N, N, 2).")
    if states.shape[0] != times.size:
        raise ValueError("states first dimension must match len(times).")

    means = states.mean(axis=(1, 2))

    fig, ax = plt.subplots()
    for c, name in enumerate(COMPONENT_NAMES):
        ax.plot(times, means[:, c], label=f"mean {name}")
    ax.set_xlabel("t")
    ax.set_ylabel("spatial mean")
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend(fontsize="small")

    _save_and_close(fig, savepath)
