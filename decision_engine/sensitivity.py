"""
PURPOSE: One-at-a-time sensitivity analysis for decision variables.

For each variable, the simulation is rerun twice with that variable's central
estimate pinned at its lower and upper bound (all other variables unchanged).
The swing in mean outcome, relative to the base run's mean, is the variable's
impact. Variables are ranked by impact.

SRP/DRY: Single responsibility = sensitivity analysis only.
         No result formatting, no recommendation logic.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .config import SENSITIVITY_NUM_RUNS
from .evaluator import DecisionModelError, DecisionVariable, Formula, build_variable_model
from .outputs import PercentileResult
from .simulation import MonteCarloSimulation

logger = logging.getLogger(__name__)


@dataclass
class SensitivityRow:
    """Impact of a single decision variable.

    Attributes:
        variable (str): Variable name.
        base (float): Central estimate used in the base run.
        min (float): Lower bound (low scenario).
        max (float): Upper bound (high scenario).
        outcome_at_low (float): Mean outcome with base pinned at min.
        outcome_at_high (float): Mean outcome with base pinned at max.
        impact_percent (float): |high - low| / |base mean| * 100.
    """
    variable: str
    base: float
    min: float
    max: float
    outcome_at_low: float
    outcome_at_high: float
    impact_percent: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "variable": self.variable,
            "base": self.base,
            "min": self.min,
            "max": self.max,
            "outcome_at_low": self.outcome_at_low,
            "outcome_at_high": self.outcome_at_high,
            "impact_percent": self.impact_percent,
        }


class SensitivityAnalyzer:
    """
    Ranks decision variables by the swing they cause in mean outcome.

    Method:
    - Low scenario: variable's base replaced by its min.
    - High scenario: variable's base replaced by its max.
    - Both scenarios run in percentile mode with num_runs trials.
    - impact_percent = |mean_high - mean_low| / |base_result.mean| * 100,
      defined as 0 when the base mean is exactly 0.

    With a random_seed, every scenario is run from the same seed, so repeated
    analyses return identical rows.
    """

    def __init__(
        self,
        formula: Formula,
        num_runs: int = SENSITIVITY_NUM_RUNS,
        random_seed=None,
        top_n: Optional[int] = None,
    ):
        """
        Initialize analyzer.

        Args:
            formula: Outcome formula shared with the base run.
            num_runs: Trials per scenario (default 5000).
            random_seed: Optional seed for reproducible scenarios.
            top_n: Number of top variables to return (None = all).
        """
        self.formula = formula
        self.simulation = MonteCarloSimulation(num_runs=num_runs, random_seed=random_seed)
        self.top_n = top_n

    def analyze(
        self,
        variables: Sequence[DecisionVariable],
        base_result: PercentileResult,
    ) -> List[SensitivityRow]:
        """
        Compute one row per variable, sorted by impact (descending).

        Ties keep the input order of the variables.

        Raises:
            DecisionModelError: If variables is empty.
        """
        variables = list(variables)
        if not variables:
            raise DecisionModelError("at least one variable is required")
        rows = []
        for index, variable in enumerate(variables):
            low_mean = self._scenario_mean(variables, index, variable.min)
            high_mean = self._scenario_mean(variables, index, variable.max)
            rows.append(
                SensitivityRow(
                    variable=variable.name,
                    base=variable.base,
                    min=variable.min,
                    max=variable.max,
                    outcome_at_low=low_mean,
                    outcome_at_high=high_mean,
                    impact_percent=self._impact_percent(low_mean, high_mean, base_result.mean),
                )
            )

        rows.sort(key=lambda row: row.impact_percent, reverse=True)
        if self.top_n is not None:
            rows = rows[: self.top_n]
        return rows

    def _scenario_mean(self, variables: List[DecisionVariable], index: int, pinned_base: float) -> float:
        scenario = list(variables)
        scenario[index] = scenario[index].with_base(pinned_base)
        model = build_variable_model(scenario, self.formula)
        return self.simulation.run_percentiles(model).mean

    @staticmethod
    def _impact_percent(low_mean: float, high_mean: float, base_mean: float) -> float:
        if base_mean == 0:
            logger.warning("Base mean outcome is 0; reporting 0%% impact")
            return 0.0
        return abs((high_mean - low_mean) / base_mean * 100)
