"""
Exceptions raised by the Brusselator package.

All errors derive from ``ValueError`` so that callers which already guard
constructors and loaders with ``except ValueError`` keep working.
"""

from __future__ import annotations


class BrusselatorError(ValueError):
    """Base class for all package-specific errors."""


class ShapeMismatch(BrusselatorError):
    """State or output arrays do not have the expected ``(N, N, 2)`` shape."""


class InvalidParameter(BrusselatorError):
    """A model parameter cannot be used (e.g. zero grid spacing)."""


class LinearSolveError(BrusselatorError):
    """A linear solve hit a zero pivot or the Krylov iteration did not converge."""
