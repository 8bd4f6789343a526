"""
Dataset generation for parameter sweeps of the 2D Brusselator.

This module samples model parameters, solves the problem for each sample and
collects the trajectories into a PyTorch ``.pt`` file.
"""

from __future__ import annotations

import copy
import json
import logging
import random
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
from tqdm.auto import tqdm

try:
    import torch
    TORCH_AVAILABLE = True
except ImportError:
    TORCH_AVAILABLE = False

from .json_loader import build_problem_from_dict, parse_time_settings
from .parameters import BrusselatorParameters
from .plotting import plot_mean_time_series

logger = logging.getLogger(__name__)

MODEL_PARAMETER_NAMES = tuple(f.name for f in fields(BrusselatorParameters))


@dataclass
class ParameterRange:
    """
    Represents a parameter range for sampling.

    Parameters
    ----------
    name:
        Parameter name (e.g., "A", "alpha").
    low:
        Lower bound of the parameter range.
    high:
        Upper bound of the parameter range.
    """

    name: str
    low: float
    high: float

    def __post_init__(self):
        if self.low >= self.high:
            raise ValueError(f"ParameterRange {self.name}: low ({self.low}) must be < high ({self.high})")


class ParameterSampler:
    """
    Samples parameter values uniformly from the given ranges.

    Parameters
    ----------
    param_ranges:
        List of ParameterRange objects defining the parameter space.
    seed:
        Optional random seed for reproducible sampling.
    """

    def __init__(self, param_ranges: List[ParameterRange], seed: Optional[int] = None):
        self.param_ranges = param_ranges
        self.rng = random.Random(seed)

    def sample(self) -> Dict[str, float]:
        """Sample one set of parameter values, e.g. ``{"A": 3.21, "B": 1.07}``."""
        return {pr.name: self.rng.uniform(pr.low, pr.high) for pr in self.param_ranges}

    def sample_n(self, n: int) -> List[Dict[str, float]]:
        return [self.sample() for _ in range(n)]


def _substitute_parameters(obj: Any, params: Dict[str, float]) -> Any:
    """
    Recursively substitute parameter placeholders in a JSON-like structure.

    A string equal to a parameter name is replaced by its value; inside
    longer strings (initial-condition expressions) the name is replaced as a
    whole word.
    """
    if isinstance(obj, dict):
        return {key: _substitute_parameters(value, params) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_substitute_parameters(item, params) for item in obj]
    if isinstance(obj, str):
        if obj in params:
            return params[obj]
        result = obj
        for name, value in params.items():
            result = re.sub(r"\b" + re.escape(name) + r"\b", repr(value), result)
        return result
    return obj


def _apply_sample(template: Dict[str, Any], params: Dict[str, float]) -> Dict[str, Any]:
    """Build the configuration of one sample from the template."""
    config = _substitute_parameters(copy.deepcopy(template), params)
    # Model parameters are set directly so templates need no placeholders for them.
    model_cfg = dict(config.get("parameters") or {})
    for name, value in params.items():
        if name in MODEL_PARAMETER_NAMES:
            model_cfg[name] = value
    config["parameters"] = model_cfg
    return config


def generate_dataset(
    config_template: Union[str, Path, Dict[str, Any]],
    param_ranges: List[ParameterRange],
    num_samples: int,
    savepath: Union[str, Path] = "dataset.pt",
    seed: Optional[int] = None,
    t_span: Optional[tuple[float, float]] = None,
    t_eval: Optional[Sequence[float]] = None,
    solver_method: Optional[str] = None,
    solver_kwargs: Optional[Dict[str, Any]] = None,
    save_full_time: bool = True,
    save_plots: bool = False,
    problem_name: Optional[str] = None,
    overwrite: bool = False,
) -> Dict[str, Any]:
    """
    Generate a dataset by sampling Brusselator parameters and solving for each
    sample.

    Parameters
    ----------
    config_template:
        Path to a JSON configuration or a dictionary. String values equal to a
        sampled parameter name act as placeholders.
    param_ranges:
        Parameter ranges to sample from. Names ``A``, ``B``, ``alpha`` and
        ``dx`` are written into the ``parameters`` section directly.
    num_samples:
        Number of parameter samples to generate and solve.
    savepath:
        Path where the .pt file will be saved.
    seed:
        Random seed for reproducible parameter sampling.
    t_span, t_eval:
        Time span and output times; default to the template's ``time`` block.
    solver_method:
        ODE solver method; defaults to the template's ``time.method``.
    solver_kwargs:
        Additional keyword arguments for :meth:`BrusselatorProblem.solve`.
    save_full_time:
        If True, save the full time sequence, otherwise only the final state.
    save_plots:
        If True, save a mean-field time series plot per sample under
        ``dataset_generate_plots/{problem_name}/``.
    overwrite:
        If False and the dataset file already exists, load and return it
        instead of regenerating.

    Returns
    -------
    dict
        - "params": tensor of shape (num_samples, num_params)
        - "param_names": list of parameter names in order
        - "x", "y": tensors of shape (N,)
        - "t": tensor of shape (nt,)
        - "u": tensor of shape (num_samples, nt, N, N, 2)
    """
    if not TORCH_AVAILABLE:
        raise ImportError("PyTorch is required for dataset generation. Install with: pip install torch")
    if num_samples < 1:
        raise ValueError("num_samples must be at least 1.")

    savepath = Path(savepath)
    if savepath.exists() and not overwrite:
        logger.info("Loading existing dataset from %s", savepath)
        return torch.load(savepath)

    if problem_name is None:
        problem_name = savepath.stem
        if problem_name.endswith("_dataset"):
            problem_name = problem_name[: -len("_dataset")]

    plot_dir = None
    if save_plots:
        plot_dir = Path("dataset_generate_plots") / problem_name
        plot_dir.mkdir(parents=True, exist_ok=True)

    if isinstance(config_template, (str, Path)):
        with open(config_template, "r", encoding="utf8") as f:
            template = json.load(f)
    else:
        template = copy.deepcopy(config_template)

    default_span, default_eval, solve_kwargs = parse_time_settings(template.get("time"))
    if t_span is None:
        t_span = default_span
    if t_eval is None:
        t_eval = default_eval
    if t_eval is None:
        t_eval = np.linspace(t_span[0], t_span[1], 100)
    if solver_method is not None:
        solve_kwargs["method"] = solver_method
    if solver_kwargs:
        solve_kwargs.update(solver_kwargs)

    sampler = ParameterSampler(param_ranges, seed=seed)
    param_names = [pr.name for pr in param_ranges]

    all_params = []
    all_solutions = []
    grid = None
    time_vector = None

    for i in tqdm(range(num_samples), desc="Generating dataset", unit="sample"):
        params = sampler.sample()
        all_params.append([params[name] for name in param_names])

        param_str = ", ".join(f"{name}={params[name]:.6f}" for name in param_names)
        tqdm.write(f"Sample {i+1}/{num_samples}: {param_str}")

        problem = build_problem_from_dict(_apply_sample(template, params))
        if grid is None:
            grid = problem.grid
        elif problem.grid != grid:
            raise ValueError("All samples must share the same grid; do not sample the grid size.")

        sol = problem.solve(t_span=t_span, t_eval=t_eval, plot=False, **solve_kwargs)
        if not sol.success:
            raise RuntimeError(f"Sample {i+1} failed to integrate: {sol.message}")

        if time_vector is None:
            time_vector = sol.t if save_full_time else sol.t[-1:]

        if save_full_time:
            all_solutions.append(sol.states)
        else:
            all_solutions.append(sol.states[-1:])

        if plot_dir is not None:
            plot_mean_time_series(
                sol.t,
                sol.states,
                title=f"Sample {i+1}: {param_str}",
                savepath=plot_dir / f"sample_{i+1:04d}_means.png",
            )

    dataset = {
        "params": torch.tensor(all_params, dtype=torch.float32),
        "param_names": param_names,
        "x": torch.tensor(grid.x, dtype=torch.float32),
        "y": torch.tensor(grid.y, dtype=torch.float32),
        "t": torch.tensor(time_vector, dtype=torch.float32),
        "u": torch.tensor(np.array(all_solutions), dtype=torch.float32),
    }

    savepath.parent.mkdir(parents=True, exist_ok=True)
    torch.save(dataset, savepath)
    logger.info("Saved dataset with %d samples to %s", num_samples, savepath)

    return dataset
