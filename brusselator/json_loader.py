from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .forcing import Forcing
from .grid import Grid2D
from .ic import InitialCondition2D
from .parameters import BrusselatorParameters
from .problem import BrusselatorProblem


JsonDict = Dict[str, Any]


def _parse_grid(cfg: JsonDict) -> Grid2D:
    """Parse the ``grid`` section."""
    if "n" not in cfg:
        raise ValueError("Grid configuration requires 'n'.")
    return Grid2D.from_dict(cfg)


def _parse_parameters(cfg: Optional[JsonDict], grid: Grid2D) -> BrusselatorParameters:
    """Parse the ``parameters`` section; ``dx`` defaults to the grid spacing."""
    return BrusselatorParameters.from_dict(cfg or {}, grid=grid)


def _parse_forcing(cfg) -> Forcing:
    """
    Parse the ``forcing`` section.

    A missing section gives the standard forcing, ``null`` or ``false``
    disables it.
    """
    if cfg is None or cfg is False:
        return Forcing.disabled()
    if cfg is True:
        return Forcing()
    return Forcing.from_dict(cfg)


def _parse_initial_condition(cfg: Optional[JsonDict]) -> InitialCondition2D:
    """Parse the ``initial_condition`` section."""
    if cfg is None:
        return InitialCondition2D.from_reference()

    ic_type = cfg.get("type", "reference").lower()
    if ic_type == "reference":
        return InitialCondition2D.from_reference()
    elif ic_type == "expression":
        return InitialCondition2D.from_expressions(cfg["u"], cfg["v"])
    elif ic_type == "values":
        return InitialCondition2D.from_values(cfg["values"])
    else:
        raise ValueError(f"Unknown initial condition type {ic_type!r}.")


def parse_time_settings(
    time_cfg: Optional[JsonDict],
) -> Tuple[Tuple[float, float], Optional[np.ndarray], Dict[str, Any]]:
    """
    Parse the ``time`` section into ``(t_span, t_eval, solve_kwargs)``.

    ``solve_kwargs`` holds ``method``, ``jacobian``, ``rtol`` and ``atol`` and
    can be passed straight to :meth:`BrusselatorProblem.solve`.
    """
    time_cfg = time_cfg or {}
    t0 = float(time_cfg.get("t0", 0.0))
    t1 = float(time_cfg.get("t1", 11.5))

    if "t_eval" in time_cfg:
        t_eval = np.asarray(time_cfg["t_eval"], dtype=float)
    elif "num_points" in time_cfg:
        t_eval = np.linspace(t0, t1, int(time_cfg["num_points"]))
    else:
        t_eval = None

    solve_kwargs: Dict[str, Any] = {
        "method": time_cfg.get("method", "BDF"),
        "jacobian": time_cfg.get("jacobian", "sparsity"),
        "rtol": float(time_cfg.get("rtol", 1e-6)),
        "atol": float(time_cfg.get("atol", 1e-8)),
    }
    return (t0, t1), t_eval, solve_kwargs


def build_problem_from_dict(config: JsonDict) -> BrusselatorProblem:
    """
    Build a BrusselatorProblem from an in-memory JSON-like dictionary.

    This is the core entry point; ``load_from_json`` is a small wrapper
    around it. The ``time``, ``visualization`` and ``dataset`` sections are
    not used here; they are read by the runner.
    """
    grid = _parse_grid(config["grid"])
    parameters = _parse_parameters(config.get("parameters"), grid)
    if "forcing" in config:
        forcing = _parse_forcing(config["forcing"])
    else:
        forcing = Forcing()
    ic = _parse_initial_condition(config.get("initial_condition"))

    return BrusselatorProblem(
        grid=grid,
        parameters=parameters,
        forcing=forcing,
        ic=ic,
    )


def load_from_json(path: str | Path) -> BrusselatorProblem:
    """
    Load a BrusselatorProblem from a JSON file.

    Parameters
    ----------
    path:
        Path to the JSON configuration file.
    """
    p = Path(path)
    with p.open("r", encoding="utf8") as f:
        config = json.load(f)
    return build_problem_from_dict(config)
