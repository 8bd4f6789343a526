import json
from pathlib import Path

import numpy as np
import pytest

from brusselator import (
    BrusselatorParameters,
    Forcing,
    Grid2D,
    build_problem_from_dict,
    load_from_json,
    reference_initial_state,
)
from brusselator.json_loader import parse_time_settings

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


def _minimal_config(**sections):
    config = {"grid": {"n": 4}}
    config.update(sections)
    return config


def test_load_reference_example():
    problem = load_from_json(EXAMPLES / "brusselator2d.json")

    assert problem.grid == Grid2D(32, 1.0)
    assert problem.parameters == BrusselatorParameters(3.4, 1.0, 10.0, 1.0 / 32)
    assert problem.forcing == Forcing()
    assert np.array_equal(problem.initial_state(), reference_initial_state(problem.grid))


def test_load_from_json_file(tmp_path):
    path = tmp_path / "problem.json"
    path.write_text(json.dumps(_minimal_config(parameters={"A": 2.0, "B": 0.5})))

    problem = load_from_json(path)

    assert problem.parameters.A == 2.0
    assert problem.parameters.B == 0.5
    assert problem.parameters.dx == 0.25


def test_missing_forcing_section_uses_default():
    problem = build_problem_from_dict(_minimal_config())
    assert problem.forcing == Forcing()


@pytest.mark.parametrize("value", [None, False])
def test_null_forcing_disables_source(value):
    problem = build_problem_from_dict(_minimal_config(forcing=value))
    assert problem.forcing.amplitude == 0.0


def test_partial_forcing_section_keeps_defaults():
    problem = build_problem_from_dict(_minimal_config(forcing={"amplitude": 2.0}))
    assert problem.forcing == Forcing(amplitude=2.0)


def test_expression_initial_condition():
    config = _minimal_config(
        initial_condition={"type": "expression", "u": "1.0 + x", "v": "2.0 * y"}
    )
    problem = build_problem_from_dict(config)
    u0 = problem.initial_state()

    assert np.allclose(u0[:, :, 0], 1.0 + problem.grid.X)
    assert np.allclose(u0[:, :, 1], 2.0 * problem.grid.Y)


def test_values_initial_condition():
    values = np.arange(32, dtype=float).reshape(4, 4, 2)
    config = _minimal_config(initial_condition={"type": "values", "values": values.tolist()})

    problem = build_problem_from_dict(config)

    assert np.array_equal(problem.initial_state(), values)


def test_unknown_initial_condition_type():
    config = _minimal_config(initial_condition={"type": "gaussian"})
    with pytest.raises(ValueError):
        build_problem_from_dict(config)


def test_grid_requires_size():
    with pytest.raises(ValueError):
        build_problem_from_dict({"grid": {"length": 1.0}})


def test_parse_time_settings_defaults():
    t_span, t_eval, kwargs = parse_time_settings(None)

    assert t_span == (0.0, 11.5)
    assert t_eval is None
    assert kwargs == {"method": "BDF", "jacobian": "sparsity", "rtol": 1e-6, "atol": 1e-8}


def test_parse_time_settings_num_points_and_explicit_times():
    _, t_eval, kwargs = parse_time_settings(
        {"t0": 0.0, "t1": 2.0, "num_points": 5, "method": "Radau", "jacobian": None}
    )
    assert np.allclose(t_eval, [0.0, 0.5, 1.0, 1.5, 2.0])
    assert kwargs["method"] == "Radau"
    assert kwargs["jacobian"] is None

    _, t_eval, _ = parse_time_settings({"t_eval": [0.0, 0.3]})
    assert np.array_equal(t_eval, [0.0, 0.3])


def test_small_example_solves():
    with open(EXAMPLES / "brusselator2d_small.json", "r", encoding="utf8") as f:
        config = json.load(f)

    problem = build_problem_from_dict(config)
    t_span, t_eval, kwargs = parse_time_settings(config["time"])
    sol = problem.solve(t_span, t_eval=t_eval, **kwargs)

    assert sol.success
    assert sol.states.shape == (7, 8, 8, 2)
    assert np.all(np.isfinite(sol.states))


def test_reference_initial_condition_on_longer_domain_is_finite():
    problem = build_problem_from_dict({"grid": {"n": 8, "length": 2.0}})

    assert problem.parameters.dx == 0.25
    assert np.all(np.isfinite(problem.initial_state()))
