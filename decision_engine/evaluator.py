"""
PURPOSE: Turn one set of sampler draws into one scalar trial outcome.

RESPONSIBILITIES:
- Internal independent-variable representation (UncertainInput)
- Decision variables parameterised by base/min/max (DecisionVariable)
- Pluggable outcome formulas (weighted sum, hiring model, additive)
- Single responsibility: one trial at a time, no aggregation
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .config import SPREAD_DIVISOR
from .sampler import Sampler

Formula = Callable[[Mapping[str, float]], float]


class DecisionModelError(ValueError):
    """Raised when a decision model cannot be built or evaluated."""


class UnknownVariableError(DecisionModelError):
    """Raised when a formula needs a variable the request did not supply."""


@dataclass(frozen=True)
class UncertainInput:
    """One independent, normally-distributed input.

    Attributes:
        key (str): Unique key the formula reads the sample under.
        mean (float): Centre of the distribution.
        std (float): Standard deviation (>= 0).
        lower (float | None): Optional clamp bound applied after sampling.
        upper (float | None): Optional clamp bound applied after sampling.
    """
    key: str
    mean: float
    std: float
    lower: Optional[float] = None
    upper: Optional[float] = None

    def draw(self, sampler: Sampler) -> float:
        value = self.mean + self.std * sampler.next_normal()
        if self.upper is not None:
            value = min(self.upper, value)
        if self.lower is not None:
            value = max(self.lower, value)
        return value


@dataclass(frozen=True)
class DecisionVariable:
    """A decision input given as a central estimate and a bound range."""
    name: str
    base: float
    min: float
    max: float
    label: Optional[str] = None

    @property
    def std(self) -> float:
        return (self.max - self.min) / SPREAD_DIVISOR

    def with_base(self, base: float) -> "DecisionVariable":
        return replace(self, base=base)

    def to_input(self) -> UncertainInput:
        return UncertainInput(
            key=self.name,
            mean=self.base,
            std=self.std,
            lower=self.min,
            upper=self.max,
        )


@dataclass(frozen=True)
class DecisionModel:
    """Independent inputs plus the formula mapping their samples to an outcome."""
    inputs: Tuple[UncertainInput, ...]
    formula: Formula

    def evaluate_trial(self, sampler: Sampler) -> float:
        """Draw every input once, in order, and apply the formula."""
        samples = {}
        for item in self.inputs:
            samples[item.key] = item.draw(sampler)
        return float(self.formula(samples))

    @property
    def size(self) -> int:
        return len(self.inputs)


def weighted_sum_formula(coefficients: Sequence[Tuple[str, float]]) -> Formula:
    """Formula summing coefficient * sample over the given (key, coefficient) pairs."""
    pairs = tuple(coefficients)

    def formula(samples: Mapping[str, float]) -> float:
        score = 0.0
        for key, coefficient in pairs:
            score += coefficient * samples[key]
        return score

    return formula


HIRING_VARIABLES = (
    "salary",
    "benefits_multiplier",
    "utilization_rate",
    "ramp_up_discount",
    "project_win_rate",
    "avg_project_value",
)
HIRING_PROJECTS_PER_YEAR = 20
HIRING_RAMPED_SHARE = 0.75


def hiring_formula(samples: Mapping[str, float]) -> float:
    """Net first-year value of a hire: project revenue minus loaded salary."""
    missing = [name for name in HIRING_VARIABLES if name not in samples]
    if missing:
        raise UnknownVariableError(f"hiring model is missing variables: {', '.join(missing)}")
    cost = samples["salary"] * samples["benefits_multiplier"]
    projects = HIRING_PROJECTS_PER_YEAR * samples["utilization_rate"]
    effective = (
        projects * HIRING_RAMPED_SHARE
        + projects * (1 - HIRING_RAMPED_SHARE) * samples["ramp_up_discount"]
    )
    revenue = effective * samples["project_win_rate"] * samples["avg_project_value"]
    return revenue - cost


def additive_formula(samples: Mapping[str, float]) -> float:
    total = 0.0
    for value in samples.values():
        total += value
    return total


FORMULAS: Dict[str, Formula] = {
    "hiring": hiring_formula,
    "additive": additive_formula,
}
AUTO_FORMULA = "auto"


def resolve_formula(name: str, variable_names: Iterable[str]) -> Formula:
    """
    Look up a formula by name.

    "auto" picks the hiring model when all of its variables are present and
    falls back to the additive model otherwise.
    """
    names = set(variable_names)
    if name == AUTO_FORMULA:
        name = "hiring" if names.issuperset(HIRING_VARIABLES) else "additive"
    formula = FORMULAS.get(name)
    if formula is None:
        raise DecisionModelError(f"Unknown decision model: {name}")
    if formula is hiring_formula:
        missing = [v for v in HIRING_VARIABLES if v not in names]
        if missing:
            raise UnknownVariableError(f"hiring model is missing variables: {', '.join(missing)}")
    return formula


def build_variable_model(variables: Sequence[DecisionVariable], formula: Formula) -> DecisionModel:
    """Model over decision variables; samples are clamped to each variable's range."""
    if not variables:
        raise DecisionModelError("at least one variable is required")
    return DecisionModel(
        inputs=tuple(variable.to_input() for variable in variables),
        formula=formula,
    )
