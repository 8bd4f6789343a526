from __future__ import annotations

import argparse
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict

import numpy as np

from brusselator.dataset import ParameterRange, generate_dataset
from brusselator.json_loader import build_problem_from_dict, parse_time_settings
from brusselator.plotting import plot_mean_time_series


def _load_config(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf8") as f:
        return json.load(f)


def _run_dataset(args: argparse.Namespace, config: Dict[str, Any], config_path: Path) -> None:
    dataset_cfg = config.get("dataset", {})

    param_dict = dataset_cfg.get("parameters", {})
    if not param_dict:
        raise ValueError("Dataset generation requires 'dataset.parameters' in JSON config.")

    param_ranges = [
        ParameterRange(name=name, low=float(bounds[0]), high=float(bounds[1]))
        for name, bounds in param_dict.items()
    ]

    num_samples = args.samples if args.samples is not None else int(dataset_cfg.get("num_samples", 50))
    savepath = args.save if args.save is not None else dataset_cfg.get("savepath", "dataset.pt")
    overwrite = bool(dataset_cfg.get("overwrite", False))

    problem_name = config_path.stem
    if problem_name.endswith("_parameterized"):
        problem_name = problem_name[: -len("_parameterized")]

    if not args.no_output:
        print(f"Generating {num_samples} samples...")
        print(f"Parameters: {[pr.name for pr in param_ranges]}")
        print(f"Saving to: {savepath}")

    dataset = generate_dataset(
        config_template=config,
        param_ranges=param_ranges,
        num_samples=num_samples,
        savepath=savepath,
        seed=dataset_cfg.get("seed"),
        save_plots=bool(dataset_cfg.get("save_plots", False)),
        problem_name=problem_name,
        overwrite=overwrite,
    )

    if not args.no_output:
        print("Dataset ready:")
        print(f"  Parameters shape: {tuple(dataset['params'].shape)}")
        print(f"  Solution shape: {tuple(dataset['u'].shape)}")
        print(f"  Time points: {dataset['t'].shape[0]}")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(
        description="Run a JSON-defined 2D Brusselator problem via Method of Lines."
    )
    parser.add_argument("config", type=str, help="Path to JSON configuration file.")
    parser.add_argument(
        "--no-output",
        action="store_true",
        help="Suppress detailed output; only exit code indicates success.",
    )
    parser.add_argument(
        "--dataset",
        action="store_true",
        help="Enable dataset generation mode (overrides JSON dataset.enabled).",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help="Number of samples for dataset generation (overrides JSON dataset.num_samples).",
    )
    parser.add_argument(
        "--save",
        type=str,
        default=None,
        help="Save path for dataset .pt file (overrides JSON dataset.savepath).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log solver diagnostics.",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config_path = Path(args.config)
    config = _load_config(config_path)

    dataset_cfg = config.get("dataset", {})
    if args.dataset or bool(dataset_cfg.get("enabled", False)):
        if not args.no_output:
            print("Dataset generation mode enabled.")
        _run_dataset(args, config, config_path)
        return

    problem = build_problem_from_dict(config)
    t_span, t_eval, solve_kwargs = parse_time_settings(config.get("time"))

    # All plots from JSON-driven runs go under "plots/<save_dir>/"
    vis_cfg = config.get("visualization", {})
    vis_enable = bool(vis_cfg.get("enable", False))
    base_plots_dir = Path("plots") / (vis_cfg.get("save_dir") or "default")

    result = problem.solve(
        t_span,
        t_eval=t_eval,
        plot=vis_enable,
        plot_dir=str(base_plots_dir),
        **solve_kwargs,
    )

    if vis_enable:
        plot_mean_time_series(
            result.t,
            result.states,
            title="Spatial means",
            savepath=base_plots_dir / "solution2d_means.png",
        )

    if not result.success:
        raise SystemExit(f"Time integration failed: {result.message}")

    if not args.no_output:
        final = result.states[-1]
        rms_u = math.sqrt(float(np.mean(final[:, :, 0] ** 2)))
        rms_v = math.sqrt(float(np.mean(final[:, :, 1] ** 2)))
        print(f"Solved problem from t={t_span[0]} to t={result.t[-1]}")
        print(f"Grid size: {problem.grid.n}x{problem.grid.n}")
        print(f"RHS evaluations: {result.nfev}, Jacobian evaluations: {result.njev}")
        print(f"RMS of U at final time: {rms_u:.6e}")
        print(f"RMS of V at final time: {rms_v:.6e}")


if __name__ == "__main__":
    main()
