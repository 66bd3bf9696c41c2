"""Unit tests for parameter validation and named scenarios."""

import math

import pytest

from mmcsim.params import InvalidParameter, QueueParams
from mmcsim.scenarios import SCENARIOS, get_params, list_scenarios
from mmcsim.variates import ci95_halfwidth, draw_priority, make_rng, relative_error


def test_from_means_converts_to_rates():
    params = QueueParams.from_means(arrival_mean=2.0, service_mean=1.0, servers=2)
    assert math.isclose(params.lam, 0.5)
    assert math.isclose(params.mu, 1.0)
    assert math.isclose(params.rho, 0.25)
    assert params.is_stable
    assert params.n_customers == 100
    assert params.use_priority is False


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"arrival_mean": 0.0}, "arrival_mean"),
        ({"service_mean": -2.0}, "service_mean"),
        ({"servers": 0}, "servers"),
        ({"servers": 1.5}, "servers"),
        ({"n_customers": -3}, "n_customers"),
    ],
)
def test_from_means_rejects_bad_input(kwargs, field):
    values = {"arrival_mean": 2.0, "service_mean": 1.0, "servers": 2, "n_customers": 10}
    values.update(kwargs)
    with pytest.raises(InvalidParameter) as excinfo:
        QueueParams.from_means(**values)
    assert excinfo.value.field == field
    assert field in str(excinfo.value)


def test_invalid_parameter_is_a_value_error():
    with pytest.raises(ValueError):
        QueueParams(lam=float("inf"), mu=1.0, servers=1)


def test_unstable_params_are_flagged_not_rejected():
    params = QueueParams(lam=3.0, mu=1.0, servers=2)
    assert not params.is_stable
    assert math.isclose(params.rho, 1.5)


def test_scenarios_build_valid_params():
    assert list(list_scenarios()) == sorted(SCENARIOS)
    for name in list_scenarios():
        params = get_params(name, n_customers=50, seed=3)
        assert params.is_stable
        assert params.n_customers == 50
        assert params.seed == 3
    assert get_params("p").use_priority


def test_unknown_scenario_raises():
    with pytest.raises(KeyError):
        get_params("Z")


def test_make_rng_passes_generators_through():
    rng = make_rng(4)
    assert make_rng(rng) is rng


def test_draw_priority_levels():
    rng = make_rng(0)
    draws = {draw_priority(rng) for _ in range(300)}
    assert draws == {1, 2, 3}
    assert draw_priority(rng, enabled=False) == 1


def test_relative_error_guard_zero_reference():
    assert relative_error(0.0, 0.0) == 0.0
    assert math.isinf(relative_error(1.0, 0.0))
    assert math.isclose(relative_error(1.1, 1.0), 0.1)


def test_ci95_halfwidth():
    assert ci95_halfwidth([5.0]) == 0.0
    assert math.isclose(ci95_halfwidth([1.0, 3.0]), 1.96 * math.sqrt(2.0) / math.sqrt(2.0))
