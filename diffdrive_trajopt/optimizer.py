"""
Hierarchical grid-search optimizer.

``search`` evaluates a score function on the full tensor grid of variable
values, ``layered_search`` then repeatedly narrows every variable's range
around the best point found. No gradient information is needed, so the score
may be non-convex or discontinuous; the result is a local optimum.

Score functions may be plain callables or coroutine functions. Evaluation is
strictly sequential and depth-first: exactly one score call is in flight at
any time.
"""

import inspect
import logging
import math
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Mapping, Optional, Union

logger = logging.getLogger(__name__)

Assignment = dict[str, float]
ScoreFunction = Callable[[Assignment], Union[float, Awaitable[float]]]


@dataclass(frozen=True)
class OptimizableVariableData:
    """Search domain and sampling density for one scalar variable."""
    range_min: float
    range_max: float
    per_layer: int
    tolerance: float

    def __post_init__(self):
        if self.range_min > self.range_max:
            raise ValueError(f"range_min ({self.range_min}) must not exceed range_max ({self.range_max})")
        if self.per_layer < 1:
            raise ValueError(f"per_layer must be at least 1, got {self.per_layer}")
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")

    @classmethod
    def fixed(cls, value: float) -> "OptimizableVariableData":
        """Single-point domain pinned at value."""
        return cls(range_min=value, range_max=value, per_layer=1, tolerance=math.inf)

    @property
    def gap(self) -> float:
        """Width of each sub-interval sampled in one search."""
        return (self.range_max - self.range_min) / self.per_layer

    def samples(self) -> list[float]:
        """Midpoints of the per_layer equal sub-intervals of the range."""
        gap = self.gap
        return [self.range_min + gap / 2 + i * gap for i in range(self.per_layer)]


@dataclass(frozen=True)
class OptimizableVec2Data:
    """Optional per-axis search domains for a Cartesian vector."""
    x: Optional[OptimizableVariableData] = None
    y: Optional[OptimizableVariableData] = None


@dataclass(frozen=True)
class OptimizablePolarVec2Data:
    """Optional search domains for a vector's direction (rad) and magnitude."""
    direction: Optional[OptimizableVariableData] = None
    magnitude: Optional[OptimizableVariableData] = None


async def _score(score_fn: ScoreFunction, assignment: Assignment) -> float:
    result = score_fn(assignment)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _grid_search(score_fn: ScoreFunction,
                       variables: Mapping[str, OptimizableVariableData]) -> tuple[float, Assignment]:
    keys = list(variables)

    best_score = math.inf
    best: Optional[Assignment] = None

    async def find_min(assignment: Assignment, depth: int):
        nonlocal best_score, best

        key = keys[depth]
        for value in variables[key].samples():
            current = {**assignment, key: value}

            if depth + 1 < len(keys):
                await find_min(current, depth + 1)
                continue

            score = await _score(score_fn, current)
            if best is None:
                best = current
            if not math.isnan(score) and score < best_score:
                best_score = score
                best = current

    if not keys:
        return math.inf, {}

    await find_min({}, 0)
    return best_score, best


async def search(score_fn: ScoreFunction, variables: Mapping[str, OptimizableVariableData]) -> Assignment:
    """
    Exhaustive grid search over every variable's sample points.

    Costs prod(per_layer) score evaluations. NaN scores are never selected.

    Args:
        score_fn: Maps a full assignment {name: value} to a score (lower is better)
        variables: Search domain per variable name

    Returns:
        The assignment with the lowest score. If no evaluation produced a
        usable score, the first grid point is returned.
    """
    _, best = await _grid_search(score_fn, variables)
    return best


async def layered_search(layers: int, score_fn: ScoreFunction,
                         variables: Mapping[str, OptimizableVariableData]) -> Assignment:
    """
    Grid search followed by up to ``layers`` rounds of range narrowing.

    Each round re-centers every variable on the best value with the previous
    sub-interval gap as its new full range. A variable whose gap is already
    below its tolerance is pinned to the best value; when every variable is
    pinned the search stops early. The best assignment seen in any round is
    returned.
    """
    ranges = dict(variables)
    best_score, best = await _grid_search(score_fn, ranges)

    for layer in range(layers):
        logger.debug("Optimizer layer %d: score=%s %s", layer, best_score, best)

        in_tolerance = True
        narrowed = {}
        for key, current_range in ranges.items():
            last_gap = current_range.gap
            value = best[key]

            if last_gap < current_range.tolerance:
                narrowed[key] = replace(current_range, range_min=value, range_max=value, per_layer=1)
                continue

            in_tolerance = False
            new_min = value - last_gap / 2
            new_max = value + last_gap / 2
            per_layer = min(current_range.per_layer,
                            max(1, math.ceil((new_max - new_min) / current_range.tolerance)))
            narrowed[key] = replace(current_range, range_min=new_min, range_max=new_max, per_layer=per_layer)

        ranges = narrowed

        if in_tolerance:
            logger.debug("Optimizer reached tolerance after %d layer(s)", layer)
            break

        score, candidate = await _grid_search(score_fn, ranges)
        if score < best_score:
            best_score, best = score, candidate

    return best
