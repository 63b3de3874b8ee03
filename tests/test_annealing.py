import math

import numpy as np
import pytest

from simplexsolver.optimizers.exceptions import InvalidConfigurationError
from simplexsolver.optimizers.simplex import (
    PointValuePair,
    Simplex,
    SimulatedAnnealing,
    constant_schedule,
    exponential_schedule,
    linear_schedule,
    logarithmic_schedule,
)


class ScriptedUniform:
    """Stands in for a Generator, replaying a fixed list of draws."""

    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = 0

    def random(self):
        value = self.draws[self.calls]
        self.calls += 1
        return value


def test_schedules():
    assert constant_schedule(2.0)(50) == 2.0
    assert exponential_schedule(10.0, 0.5)(3) == pytest.approx(1.25)
    linear = linear_schedule(4.0, horizon=3)
    assert [linear(k) for k in range(5)] == pytest.approx([4.0, 3.0, 2.0, 1.0, 0.0])
    assert logarithmic_schedule(1.0)(0) == pytest.approx(1.0)
    assert logarithmic_schedule(1.0)(10) < 1.0


@pytest.mark.parametrize("make", [
    lambda: constant_schedule(0.0),
    lambda: exponential_schedule(1.0, 0.0),
    lambda: exponential_schedule(-1.0, 0.5),
    lambda: linear_schedule(1.0, -1),
    lambda: logarithmic_schedule(0.0),
    lambda: SimulatedAnnealing(-1, constant_schedule(1.0)),
])
def test_invalid_configuration(make):
    with pytest.raises(InvalidConfigurationError):
        make()


def test_is_active_up_to_horizon():
    annealing = SimulatedAnnealing(3, constant_schedule(1.0), seed=0)
    assert [annealing.is_active(k) for k in range(5)] == [True, True, True, True, False]


def test_better_candidate_always_accepted_without_draw():
    rng = ScriptedUniform([])
    annealing = SimulatedAnnealing(10, constant_schedule(1.0), rng=rng)
    assert annealing.accept(1.0, 0.5, minimize=True, iteration=0)
    assert annealing.accept(1.0, 1.5, minimize=False, iteration=0)
    assert rng.calls == 0
    assert annealing.n_accepted == 2


def test_metropolis_rule():
    # exp(-1 / 1) ~= 0.368
    rng = ScriptedUniform([0.36, 0.37])
    annealing = SimulatedAnnealing(10, constant_schedule(1.0), rng=rng)
    assert annealing.accept(0.0, 1.0, minimize=True, iteration=0)
    assert not annealing.accept(0.0, 1.0, minimize=True, iteration=0)
    assert (annealing.n_accepted, annealing.n_rejected) == (1, 1)


def test_worse_candidate_when_maximizing():
    rng = ScriptedUniform([0.36])
    annealing = SimulatedAnnealing(10, constant_schedule(1.0), rng=rng)
    assert annealing.accept(1.0, 0.0, minimize=False, iteration=0)


def test_past_horizon_never_accepts():
    rng = ScriptedUniform([])
    annealing = SimulatedAnnealing(2, constant_schedule(1.0), rng=rng)
    assert not annealing.accept(1.0, 0.0, minimize=True, iteration=3)
    assert rng.calls == 0


def test_zero_temperature_rejects_worse():
    rng = ScriptedUniform([0.0])
    annealing = SimulatedAnnealing(10, linear_schedule(1.0, horizon=0), rng=rng)
    assert not annealing.accept(0.0, 1e-9, minimize=True, iteration=1)
    assert rng.calls == 1


def test_acceptance_is_reproducible_for_a_seed():
    values = np.random.default_rng(123).uniform(0.0, 2.0, size=(200, 2))

    def decisions(seed):
        annealing = SimulatedAnnealing(200, exponential_schedule(1.0, 0.98), seed=seed)
        return [annealing.accept(cur, cand, True, k) for k, (cur, cand) in enumerate(values)]

    first = decisions(7)
    assert first == decisions(7)
    assert any(first) and not all(first)


def test_alternative_moves_by_random_fraction_of_mean_displacement():
    simplex = Simplex(reference=[[0.0, 0.0], [2.0, 0.0], [0.0, 4.0]])
    simplex.build([0.0, 0.0])
    # Offsets of the others from vertex 0 are [2, 0] and [0, 4]; mean [1, 2]
    rng = ScriptedUniform([0.75, 0.0])
    annealing = SimulatedAnnealing(10, constant_schedule(1.0), rng=rng)
    candidate = annealing.alternative(simplex, 0, lambda x: float(np.sum(x)))

    assert candidate.point.tolist() == pytest.approx([0.25, -1.0])
    assert candidate.value == pytest.approx(-0.75)
    assert rng.calls == 2


def test_alternative_for_non_first_vertex():
    simplex = Simplex(1)
    simplex.set_points([PointValuePair([0.0], 0.0), PointValuePair([4.0], 1.0)])
    annealing = SimulatedAnnealing(10, constant_schedule(1.0), rng=ScriptedUniform([1.0]))
    candidate = annealing.alternative(simplex, 1, lambda x: 0.0)
    assert candidate.point.tolist() == [2.0]
    assert not math.isnan(candidate.value)
