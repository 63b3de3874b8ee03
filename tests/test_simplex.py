import dataclasses
import math

import numpy as np
import pytest

from simplexsolver.function_generators.fun_nonlinear import notched_slope
from simplexsolver.optimizers.base import CountingObjective, GoalType, Incrementor
from simplexsolver.optimizers.exceptions import InvalidConfigurationError, TooManyEvaluationsError
from simplexsolver.optimizers.simplex import (
    MultiDirectionalStep,
    NelderMeadStep,
    PointValuePair,
    Simplex,
    make_comparator,
)


def counting(fun, max_count=10_000):
    return CountingObjective(fun, Incrementor(max_count, TooManyEvaluationsError))


def linear(x):
    return float(np.sum(x))


def coords(simplex):
    return [p.point.tolist() for p in simplex.points]


def assert_best_first(simplex, comparator):
    best = simplex.get_point(0)
    for p in simplex.points[1:]:
        assert comparator(best, p) <= 0


def test_point_value_pair_is_immutable():
    x = np.array([1.0, 2.0])
    p = PointValuePair(x)
    x[0] = 99.0
    assert p.point.tolist() == [1.0, 2.0]
    assert not p.is_evaluated
    with pytest.raises(ValueError):
        p.point[0] = 5.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.value = 1.0

    q = p.evaluated(linear)
    assert q is not p
    assert q.value == 3.0
    assert math.isnan(p.value)


def test_comparator_direction_and_nan():
    low, high, unevaluated = PointValuePair([0.0], 1.0), PointValuePair([0.0], 2.0), PointValuePair([0.0])
    minimize = make_comparator(GoalType.MINIMIZE)
    maximize = make_comparator(GoalType.MAXIMIZE)

    assert minimize(low, high) < 0
    assert maximize(low, high) > 0
    assert minimize(low, PointValuePair([5.0], 1.0)) == 0
    assert minimize(unevaluated, high) > 0
    assert maximize(unevaluated, low) > 0
    assert minimize(unevaluated, PointValuePair([1.0])) == 0


def test_build_from_side_length():
    simplex = Simplex(2, 1.0)
    simplex.build([0.0, 0.0])
    assert coords(simplex) == [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0]]
    assert simplex.get_size() == 3
    assert simplex.dimension == 2
    assert all(not p.is_evaluated for p in simplex.points)


def test_build_from_steps():
    simplex = Simplex(steps=[1.0, 2.0, -0.5])
    simplex.build([1.0, 1.0, 1.0])
    assert coords(simplex) == [
        [1.0, 1.0, 1.0],
        [2.0, 1.0, 1.0],
        [2.0, 3.0, 1.0],
        [2.0, 3.0, 0.5],
    ]


def test_build_from_reference():
    simplex = Simplex(reference=[[1.0, 1.0], [2.0, 1.0], [1.0, 3.0]])
    simplex.build([0.0, 0.0])
    assert coords(simplex) == [[0.0, 0.0], [1.0, 0.0], [0.0, 2.0]]


@pytest.mark.parametrize("kwargs", [
    dict(),
    dict(n=2, steps=[1.0, 1.0]),
    dict(n=0),
    dict(n=2, side_length=0.0),
    dict(steps=[1.0, 0.0]),
    dict(reference=[[0.0, 0.0]]),
    dict(reference=[[0.0, 0.0], [1.0, 0.0]]),
    dict(reference=[[0.0, 0.0], [1.0, 0.0], [0.0, 0.0]]),
    dict(reference=[[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]]),
    dict(reference=[[0.0, 0.0], [1.0], [0.0, 1.0]]),
    dict(steps=[1.0, 1.0], side_length=2.0),
    dict(reference=[[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], side_length=2.0),
])
def test_invalid_layouts_are_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        Simplex(**kwargs)


def test_build_dimension_mismatch():
    simplex = Simplex(3)
    with pytest.raises(InvalidConfigurationError):
        simplex.build([0.0, 0.0])


@pytest.mark.parametrize("kwargs", [
    dict(rho=0.0),
    dict(khi=1.0),
    dict(rho=2.5, khi=2.0),
    dict(gamma=1.0),
    dict(sigma=0.0),
])
def test_invalid_nelder_mead_coefficients(kwargs):
    with pytest.raises(InvalidConfigurationError):
        NelderMeadStep(**kwargs)


@pytest.mark.parametrize("kwargs", [dict(khi=0.5), dict(gamma=1.5)])
def test_invalid_multidirectional_coefficients(kwargs):
    with pytest.raises(InvalidConfigurationError):
        MultiDirectionalStep(**kwargs)


def test_evaluate_orders_best_first_and_skips_evaluated_vertices():
    fun = counting(lambda x: -linear(x))
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(2)
    simplex.build([0.0, 0.0])
    simplex.evaluate(fun, comparator)

    assert fun.evaluations == 3
    assert coords(simplex) == [[1.0, 1.0], [1.0, 0.0], [0.0, 0.0]]
    simplex.evaluate(fun, comparator)
    assert fun.evaluations == 3


def test_nelder_mead_expansion_step():
    fun = counting(linear)
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(2)
    simplex.build([0.0, 0.0])
    simplex.evaluate(fun, comparator)
    simplex.iterate(fun, comparator)

    # Reflection [0, -1] beats the best vertex, expansion [-0.5, -2] beats the reflection
    assert fun.evaluations == 3 + 2
    assert coords(simplex) == [[-0.5, -2.0], [0.0, 0.0], [1.0, 0.0]]
    assert [p.value for p in simplex.points] == [-2.5, 0.0, 1.0]


def test_nelder_mead_shrink_step():
    fun = counting(notched_slope)
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(1)
    simplex.build([0.0])
    simplex.evaluate(fun, comparator)
    simplex.iterate(fun, comparator)

    # Reflection and inside contraction both fail, so the simplex shrinks toward the trap
    assert fun.evaluations == 2 + 3
    assert coords(simplex) == [[0.0], [0.5]]
    assert simplex.get_point(0).value == pytest.approx(0.05)


def test_multidirectional_expansion_step():
    fun = counting(linear)
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(2, step=MultiDirectionalStep())
    simplex.build([0.0, 0.0])
    simplex.evaluate(fun, comparator)
    simplex.iterate(fun, comparator)

    assert fun.evaluations == 3 + 4
    assert coords(simplex) == [[-2.0, -2.0], [-2.0, 0.0], [0.0, 0.0]]


def test_multidirectional_contraction_step():
    fun = counting(lambda x: float(np.sum(x ** 2)))
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(2, step=MultiDirectionalStep())
    simplex.build([0.0, 0.0])
    simplex.evaluate(fun, comparator)
    simplex.iterate(fun, comparator)

    # The origin is the minimum: no reflection helps, so the others move halfway toward it
    assert fun.evaluations == 3 + 4
    assert coords(simplex) == [[0.0, 0.0], [0.5, 0.0], [0.5, 0.5]]


@pytest.mark.parametrize("step", [NelderMeadStep(), MultiDirectionalStep()])
@pytest.mark.parametrize("goal", [GoalType.MINIMIZE, GoalType.MAXIMIZE])
def test_best_vertex_stays_first(step, goal):
    sign = 1.0 if goal is GoalType.MINIMIZE else -1.0
    fun = counting(lambda x: sign * float((x[0] - 1) ** 2 + 3 * (x[1] + 2) ** 2 + x[0] * x[1]))
    comparator = make_comparator(goal)
    simplex = Simplex(2, 0.7, step=step)
    simplex.build([3.0, 3.0])
    simplex.evaluate(fun, comparator)
    assert_best_first(simplex, comparator)

    for _ in range(50):
        simplex.iterate(fun, comparator)
        assert_best_first(simplex, comparator)
        assert all(p.is_evaluated and p.dimension == 2 for p in simplex.points)


def test_multidirectional_evaluation_accounting():
    n, k = 3, 25
    fun = counting(lambda x: float(np.sum((x - np.arange(n)) ** 2)))
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(n, step=MultiDirectionalStep())
    simplex.build(np.zeros(n))
    simplex.evaluate(fun, comparator)
    for _ in range(k):
        simplex.iterate(fun, comparator)

    assert fun.evaluations == (n + 1) + k * 2 * n


def test_nelder_mead_evaluation_accounting():
    n = 4
    fun = counting(lambda x: float(np.sum((x - 1.5) ** 2)))
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(n)
    simplex.build(np.zeros(n))
    simplex.evaluate(fun, comparator)
    assert fun.evaluations == n + 1

    for _ in range(100):
        before = fun.evaluations
        simplex.iterate(fun, comparator)
        assert fun.evaluations - before in (1, 2, n + 2)


def test_set_point_validates_and_iterate_reorders():
    fun = counting(linear)
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(2)
    simplex.build([0.0, 0.0])
    simplex.evaluate(fun, comparator)

    with pytest.raises(InvalidConfigurationError):
        simplex.set_point(0, PointValuePair([1.0, 2.0, 3.0], 0.0))
    with pytest.raises(IndexError):
        simplex.set_point(3, PointValuePair([1.0, 2.0], 0.0))

    # Put a bad vertex in slot 0 the way the annealing step does
    simplex.set_point(0, PointValuePair([5.0, 5.0], 10.0))
    simplex.iterate(fun, comparator)
    assert_best_first(simplex, comparator)


def test_replace_worst_point_keeps_order():
    comparator = make_comparator(GoalType.MINIMIZE)
    simplex = Simplex(2)
    simplex.set_points([PointValuePair([0.0, 0.0], 1.0),
                        PointValuePair([1.0, 0.0], 2.0),
                        PointValuePair([0.0, 1.0], 3.0)])
    simplex.replace_worst_point(PointValuePair([2.0, 2.0], 1.5), comparator)
    assert [p.value for p in simplex.points] == [1.0, 1.5, 2.0]


def test_get_point_before_build():
    with pytest.raises(InvalidConfigurationError):
        Simplex(2).get_point(0)
