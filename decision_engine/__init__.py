"""
Monte Carlo decision engine.

PURPOSE:
    Estimate how likely an uncertain decision is to pay off by sampling
    independent, normally-distributed inputs thousands of times.

RESPONSIBILITIES:
    - Seeded or system-random standard normal sampling
    - Weighted-sum and formula-based trial evaluation
    - Probability-of-success and percentile aggregation
    - One-at-a-time sensitivity ranking

SRP/DRY CHECK:
    - sampler.py: Uniform and normal random sources only
    - evaluator.py: One trial → one outcome only
    - inputs.py: External request shapes → decision models only
    - simulation.py: N-trial aggregation only
    - sensitivity.py: Sensitivity analysis only
    - outputs.py: Result types, labels and text formatting only
    - analysis.py: In-process entry points for the service surfaces
"""

from .analysis import DecisionAnalysis, analyze_decision, run_assumption_simulation
from .evaluator import (
    DecisionModel,
    DecisionModelError,
    DecisionVariable,
    UncertainInput,
    UnknownVariableError,
)
from .inputs import Assumption, SimRequest, coerce_sim_request
from .outputs import OutputFormatter, PercentileResult, ProbabilityResult
from .sampler import Mulberry32, Sampler
from .sensitivity import SensitivityAnalyzer, SensitivityRow
from .simulation import MonteCarloSimulation, SimulationMode

__version__ = "0.1.0"

__all__ = [
    "Assumption",
    "DecisionAnalysis",
    "DecisionModel",
    "DecisionModelError",
    "DecisionVariable",
    "MonteCarloSimulation",
    "Mulberry32",
    "OutputFormatter",
    "PercentileResult",
    "ProbabilityResult",
    "Sampler",
    "SensitivityAnalyzer",
    "SensitivityRow",
    "SimRequest",
    "SimulationMode",
    "UncertainInput",
    "UnknownVariableError",
    "analyze_decision",
    "coerce_sim_request",
    "run_assumption_simulation",
]
