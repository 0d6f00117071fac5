import math

import pytest

from diffdrive_trajopt.optimizer import OptimizableVariableData, layered_search, search


def test_samples_are_sub_interval_midpoints():
    data = OptimizableVariableData(range_min=0, range_max=10, per_layer=5, tolerance=0.1)

    assert data.gap == 2
    assert data.samples() == pytest.approx([1, 3, 5, 7, 9])


def test_fixed_domain_is_a_single_point():
    data = OptimizableVariableData.fixed(4.2)

    assert data.samples() == [4.2]
    assert data.gap == 0


@pytest.mark.parametrize("kwargs", [
    dict(range_min=1, range_max=0, per_layer=1, tolerance=1),
    dict(range_min=0, range_max=1, per_layer=0, tolerance=1),
    dict(range_min=0, range_max=1, per_layer=1, tolerance=0),
])
def test_invalid_domains_are_rejected(kwargs):
    with pytest.raises(ValueError):
        OptimizableVariableData(**kwargs)


@pytest.mark.asyncio
async def test_search_evaluates_full_grid_and_returns_minimum():
    calls = []

    def score(v):
        calls.append(dict(v))
        return (v['a'] - 3) ** 2 + (v['b'] + 1) ** 2

    best = await search(score, {
        'a': OptimizableVariableData(0, 10, per_layer=5, tolerance=0.1),
        'b': OptimizableVariableData(-4, 4, per_layer=4, tolerance=0.1),
    })

    assert len(calls) == 5 * 4
    assert best == pytest.approx({'a': 3, 'b': -1})


@pytest.mark.asyncio
async def test_search_accepts_coroutine_score_functions():
    async def score(v):
        return abs(v['x'] - 7)

    best = await search(score, {'x': OptimizableVariableData(0, 10, per_layer=5, tolerance=0.1)})

    assert best['x'] == pytest.approx(7)


@pytest.mark.asyncio
async def test_search_never_selects_nan():
    def score(v):
        # The true minimum region returns NaN and must be skipped
        return math.nan if v['x'] < 2 else v['x']

    best = await search(score, {'x': OptimizableVariableData(0, 10, per_layer=5, tolerance=0.1)})

    assert best['x'] == pytest.approx(3)


@pytest.mark.asyncio
async def test_search_with_only_unusable_scores_returns_a_grid_point():
    best = await search(lambda v: math.nan, {'x': OptimizableVariableData(0, 10, per_layer=5, tolerance=0.1)})

    assert best['x'] == pytest.approx(1)


@pytest.mark.asyncio
async def test_search_evaluations_are_sequential():
    in_flight = 0
    max_in_flight = 0

    async def score(v):
        nonlocal in_flight, max_in_flight
        in_flight += 1
        max_in_flight = max(max_in_flight, in_flight)
        in_flight -= 1
        return v['x'] + v['y']

    await search(score, {
        'x': OptimizableVariableData(0, 1, per_layer=3, tolerance=0.1),
        'y': OptimizableVariableData(0, 1, per_layer=3, tolerance=0.1),
    })

    assert max_in_flight == 1


@pytest.mark.asyncio
async def test_layered_search_converges_on_convex_loss():
    best = await layered_search(
        10,
        lambda v: (v['x'] - 3) ** 2,
        {'x': OptimizableVariableData(0, 10, per_layer=4, tolerance=0.01)},
    )

    assert best['x'] == pytest.approx(3, abs=0.01)


@pytest.mark.asyncio
async def test_layered_search_converges_in_two_dimensions():
    best = await layered_search(
        12,
        lambda v: (v['x'] - 1.234) ** 2 + 2 * (v['y'] + 4.321) ** 2,
        {
            'x': OptimizableVariableData(-10, 10, per_layer=4, tolerance=0.01),
            'y': OptimizableVariableData(-10, 10, per_layer=4, tolerance=0.01),
        },
    )

    assert best['x'] == pytest.approx(1.234, abs=0.01)
    assert best['y'] == pytest.approx(-4.321, abs=0.01)


@pytest.mark.asyncio
async def test_layered_search_stops_early_when_all_variables_pinned():
    calls = []

    best = await layered_search(
        5,
        lambda v: calls.append(v) or 0.0,
        {'x': OptimizableVariableData.fixed(2.0), 'y': OptimizableVariableData.fixed(-1.0)},
    )

    assert best == {'x': 2.0, 'y': -1.0}
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_layered_search_with_zero_layers_is_a_single_search():
    calls = []

    await layered_search(
        0,
        lambda v: calls.append(v) or v['x'],
        {'x': OptimizableVariableData(0, 10, per_layer=5, tolerance=0.01)},
    )

    assert len(calls) == 5


@pytest.mark.asyncio
async def test_layered_search_does_not_mutate_input_domains():
    domain = OptimizableVariableData(0, 10, per_layer=4, tolerance=0.01)

    await layered_search(3, lambda v: (v['x'] - 3) ** 2, {'x': domain})

    assert domain == OptimizableVariableData(0, 10, per_layer=4, tolerance=0.01)
