from __future__ import annotations

import numpy as np
from scipy.sparse import coo_matrix, csr_matrix, identity, kron

from .grid import Grid2D


def build_periodic_1d_second_difference(n: int) -> csr_matrix:
    """
    Sparse ``n x n`` matrix of the periodic ``[1, -2, 1]`` stencil (unscaled).

    Entries are assembled in COO form and summed, so for ``n = 2`` the left
    and right neighbours (which coincide) contribute a coupling of 2.
    """
    if n < 2:
        raise ValueError("n must be at least 2.")
    idx = np.arange(n)
    rows = np.concatenate([idx, idx, idx])
    cols = np.concatenate([idx, (idx - 1) % n, (idx + 1) % n])
    vals = np.concatenate([-2.0 * np.ones(n), np.ones(n), np.ones(n)])
    return coo_matrix((vals, (rows, cols)), shape=(n, n)).tocsr()


def build_periodic_2d_laplacian(grid: Grid2D) -> csr_matrix:
    """
    Sparse 5-point Laplacian on the flattened grid (index ``i*N + j``).

    Built as the Kronecker sum ``D (x) I + I (x) D`` of the periodic 1D
    second-difference matrix ``D``. The result is unscaled; multiply by
    ``alpha / dx**2`` to obtain the diffusion operator.
    """
    n = grid.n
    D = build_periodic_1d_second_difference(n)
    I = identity(n, format="csr")
    lap = (kron(D, I, format="csr") + kron(I, D, format="csr")).tocsr()
    lap.eliminate_zeros()
    return lap


def jacobian_sparsity(grid: Grid2D) -> csr_matrix:
    """
    0/1 sparsity pattern of the Jacobian in the interleaved state layout.

    The flat state index is ``(i*N + j)*2 + c``. Diffusion couples each
    component with itself at the four neighbours; the reaction terms couple
    ``U`` and ``V`` within a cell.
    """
    lap = build_periodic_2d_laplacian(grid)
    diffusion = kron(abs(lap), identity(2), format="csr")
    # kron stores full 2x2 blocks; drop the U-V zeros between neighbours
    diffusion.eliminate_zeros()
    reaction = kron(identity(grid.size, format="csr"), np.ones((2, 2)))
    pattern = (diffusion + reaction).tocsr()
    pattern.data[:] = 1.0
    return pattern
