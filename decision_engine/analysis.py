"""
PURPOSE: In-process entry points shared by the HTTP endpoint and the MCP tools.

- run_assumption_simulation: probability mode over a weighted-sum assumption list
- analyze_decision: percentile mode over a variable map plus sensitivity ranking
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .config import DECISION_NUM_RUNS, SENSITIVITY_NUM_RUNS
from .evaluator import AUTO_FORMULA, FORMULAS, build_variable_model, resolve_formula
from .inputs import SimRequest, build_assumption_model, parse_variables
from .outputs import OutputFormatter, PercentileResult, ProbabilityResult
from .sensitivity import SensitivityAnalyzer, SensitivityRow
from .simulation import MonteCarloSimulation

logger = logging.getLogger(__name__)


def run_assumption_simulation(request: SimRequest) -> ProbabilityResult:
    model = build_assumption_model(request.assumptions)
    simulation = MonteCarloSimulation(num_runs=request.iterations, random_seed=request.seed)
    result = simulation.run_probability(model, threshold=request.threshold)
    logger.info(
        "Simulated %d trials over %d assumptions: p=%.4f (%s)",
        result.iterations,
        result.enabled_count,
        result.probability_success,
        result.label,
    )
    return result


@dataclass
class DecisionAnalysis:
    decision_name: str
    model: str
    results: PercentileResult
    sensitivity: List[SensitivityRow]

    @property
    def summary(self) -> str:
        return OutputFormatter.decision_summary(self.decision_name, self.results, self.sensitivity)

    def to_dict(self) -> Dict[str, Any]:
        return OutputFormatter.decision_payload(
            self.decision_name, self.results, self.sensitivity, model_name=self.model
        )


def analyze_decision(
    decision_name: str,
    variables: Mapping[str, Mapping[str, Any]],
    model: str = AUTO_FORMULA,
    num_runs: int = DECISION_NUM_RUNS,
    sensitivity_runs: int = SENSITIVITY_NUM_RUNS,
    seed: Optional[int] = None,
) -> DecisionAnalysis:
    """
    Run the base simulation and the one-at-a-time sensitivity analysis.

    Raises:
        DecisionModelError: For an empty variable map, malformed variables,
            an unknown model name or a model missing required variables.
    """
    parsed = parse_variables(variables)
    formula = resolve_formula(model, (v.name for v in parsed))
    simulation = MonteCarloSimulation(num_runs=num_runs, random_seed=seed)
    results = simulation.run_percentiles(build_variable_model(parsed, formula))

    analyzer = SensitivityAnalyzer(formula, num_runs=sensitivity_runs, random_seed=seed)
    rows = analyzer.analyze(parsed, results)
    logger.info(
        "Analyzed decision %r: mean=%.2f, most sensitive=%s",
        decision_name,
        results.mean,
        rows[0].variable,
    )
    return DecisionAnalysis(
        decision_name=decision_name,
        model=_formula_name(formula),
        results=results,
        sensitivity=rows,
    )


def _formula_name(formula) -> str:
    for name, candidate in FORMULAS.items():
        if candidate is formula:
            return name
    return getattr(formula, "__name__", "custom")
