"""
PURPOSE: Adapt external request shapes into decision models.

The HTTP endpoint accepts loosely-typed JSON from the UI and never rejects it:
every numeric field is clamped into a safe range, NaN or garbage maps to the
range minimum, and missing fields take defaults. The MCP tools validate their
input with pydantic first and then use the same adapters.

RESPONSIBILITIES:
- Clamp and coerce loosely-typed numbers
- Assumption list → weighted-sum DecisionModel
- Variable map → DecisionVariable list
"""

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

from .config import (
    MEAN_RANGE,
    NUM_RUNS,
    STD_RANGE,
    THRESHOLD_RANGE,
    WEIGHT_RANGE,
    get_iteration_bounds,
)
from .evaluator import (
    DecisionModel,
    DecisionModelError,
    DecisionVariable,
    UncertainInput,
    weighted_sum_formula,
)

POSITIVE = "positive"
NEGATIVE = "negative"


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]; NaN maps to low."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def to_number(value: Any, default: float) -> float:
    """Loose numeric coercion: None → default, bad input → NaN."""
    if value is None:
        return default
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            # Integer literal beyond float range; clamps to the range bound.
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def is_truthy(value: Any) -> bool:
    """JSON truthiness as the UI sees it: containers are true even when empty."""
    if isinstance(value, (list, dict)):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _clamped(value: Any, bounds) -> float:
    low, high, default = bounds
    return clamp(to_number(value, default), low, high)


@dataclass(frozen=True)
class Assumption:
    """One weighted, signed, normally-distributed assumption."""
    name: str
    mean: float
    std: float
    weight: float = 1.0
    direction: str = POSITIVE
    enabled: bool = True
    id: Optional[str] = None

    @property
    def sign(self) -> int:
        return -1 if self.direction == NEGATIVE else 1

    @classmethod
    def coerce(cls, raw: Mapping[str, Any]) -> "Assumption":
        """Build an assumption from untrusted JSON, clamping every number."""
        raw_id = raw.get("id")
        return cls(
            id=str(raw_id) if raw_id is not None else None,
            name=str(raw.get("name") or ""),
            mean=_clamped(raw.get("mean"), MEAN_RANGE),
            std=_clamped(raw.get("std"), STD_RANGE),
            weight=_clamped(raw.get("weight"), WEIGHT_RANGE),
            direction=NEGATIVE if raw.get("direction") == NEGATIVE else POSITIVE,
            enabled=is_truthy(raw.get("enabled")),
        )


@dataclass(frozen=True)
class SimRequest:
    """A normalized probability-mode request."""
    assumptions: List[Assumption] = field(default_factory=list)
    iterations: int = NUM_RUNS
    threshold: float = 0.0
    seed: Optional[float] = None

    @property
    def enabled(self) -> List[Assumption]:
        return [a for a in self.assumptions if a.enabled]


def coerce_sim_request(body: Any) -> SimRequest:
    """
    Normalize an HTTP simulation body.

    Never raises: a non-object body is treated as empty, non-object
    assumption entries are dropped, and a seed is honoured only when it is a
    JSON number.
    """
    if not isinstance(body, Mapping):
        body = {}

    min_iterations, max_iterations = get_iteration_bounds()
    raw_iterations = to_number(body.get("iterations"), NUM_RUNS)
    if math.isfinite(raw_iterations):
        raw_iterations = math.floor(raw_iterations)
    iterations = int(clamp(raw_iterations, min_iterations, max_iterations))

    threshold = _clamped(body.get("threshold"), THRESHOLD_RANGE)

    raw_assumptions = body.get("assumptions")
    if not isinstance(raw_assumptions, list):
        raw_assumptions = []
    assumptions = [Assumption.coerce(a) for a in raw_assumptions if isinstance(a, Mapping)]

    seed = body.get("seed")
    if isinstance(seed, bool) or not isinstance(seed, (int, float)):
        seed = None

    return SimRequest(
        assumptions=assumptions,
        iterations=iterations,
        threshold=threshold,
        seed=seed,
    )


def build_assumption_model(assumptions: Sequence[Assumption]) -> DecisionModel:
    """Weighted-sum model over the enabled assumptions only."""
    inputs = []
    coefficients = []
    for index, assumption in enumerate(a for a in assumptions if a.enabled):
        key = f"{index}:{assumption.id or assumption.name}"
        inputs.append(UncertainInput(key=key, mean=assumption.mean, std=assumption.std))
        coefficients.append((key, assumption.sign * assumption.weight))
    return DecisionModel(inputs=tuple(inputs), formula=weighted_sum_formula(coefficients))


def parse_variables(variables: Mapping[str, Mapping[str, Any]]) -> List[DecisionVariable]:
    """Variable map (name → {base, min, max, label?}) → ordered DecisionVariable list."""
    if not variables:
        raise DecisionModelError("at least one variable is required")
    parsed = []
    for name, spec in variables.items():
        try:
            parsed.append(
                DecisionVariable(
                    name=str(name),
                    base=float(spec["base"]),
                    min=float(spec["min"]),
                    max=float(spec["max"]),
                    label=spec.get("label"),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecisionModelError(f"invalid variable '{name}': {e}") from e
    return parsed
