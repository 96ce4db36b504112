"""
PURPOSE: Core Monte Carlo simulation engine for decision outcomes.

Runs N independent trials of a decision model and aggregates them either into a
success probability against a threshold or into percentile statistics of the
outcome distribution.

SINGLE RESPONSIBILITY:
- Execute N independent trials for a given decision model
- Aggregate results (success rate, floor-indexed percentiles, mean)
- Return result objects (no I/O, no text formatting)

CONSTRAINTS:
- Plain sequential loop; no early stopping, no variance reduction
- Does NOT modify the model; reads only
"""

import logging
import math
from enum import Enum
from typing import Optional

import numpy as np

from .config import NUM_RUNS, PERCENTILES, RANDOM_SEED
from .evaluator import DecisionModel
from .outputs import OutputFormatter, PercentileResult, ProbabilityResult
from .sampler import Sampler, UniformSource

logger = logging.getLogger(__name__)


class SimulationMode(str, Enum):
    PROBABILITY = "probability"
    PERCENTILE = "percentile"


class MonteCarloSimulation:
    """
    Monte Carlo simulation engine for decision models.

    Each run:
    - Creates a fresh sampler (seeded runs therefore repeat exactly)
    - Draws every model input once per trial and applies the model formula
    - Aggregates all trial outcomes into a probability or percentile result
    """

    def __init__(
        self,
        num_runs: int = NUM_RUNS,
        random_seed=RANDOM_SEED,
        uniform: Optional[UniformSource] = None,
    ):
        """
        Initialize simulation engine.

        Args:
            num_runs: Number of Monte Carlo trials per run (must be >= 1)
            random_seed: Seed for the deterministic uniform source (None = system entropy)
            uniform: Explicit uniform source; overrides random_seed. Its stream is
                     shared across runs of this instance.
        """
        if num_runs < 1:
            raise ValueError("num_runs must be at least 1")
        self.num_runs = int(num_runs)
        self.random_seed = random_seed
        self._uniform = uniform

    def _new_sampler(self) -> Sampler:
        if self._uniform is not None:
            return Sampler(uniform=self._uniform)
        return Sampler.from_seed(self.random_seed)

    def run_trials(self, model: DecisionModel) -> np.ndarray:
        """Run all trials and return the raw outcome per trial, in trial order."""
        sampler = self._new_sampler()
        outcomes = np.zeros(self.num_runs)
        for trial_idx in range(self.num_runs):
            outcomes[trial_idx] = model.evaluate_trial(sampler)
        return outcomes

    def run_probability(self, model: DecisionModel, threshold: float = 0.0) -> ProbabilityResult:
        """
        Estimate P(outcome > threshold).

        Args:
            model: Decision model to evaluate
            threshold: Strict lower bound an outcome must exceed to count as success

        Returns:
            ProbabilityResult with the success fraction and its LOW/MEDIUM/HIGH label
        """
        outcomes = self.run_trials(model)
        success_count = int(np.count_nonzero(outcomes > threshold))
        probability = success_count / self.num_runs
        logger.debug(
            "Probability run: %d/%d trials above threshold %s",
            success_count,
            self.num_runs,
            threshold,
        )
        return ProbabilityResult(
            iterations=self.num_runs,
            probability_success=probability,
            label=OutputFormatter.label_for(probability),
            threshold=threshold,
            enabled_count=model.size,
        )

    def run_percentiles(self, model: DecisionModel) -> PercentileResult:
        """
        Summarize the outcome distribution.

        Percentiles index the ascending-sorted outcomes at floor(n * q); there is
        no interpolation, so p10 <= median <= p90 always holds.
        """
        outcomes = np.sort(self.run_trials(model))
        n = self.num_runs
        return PercentileResult(
            mean=float(np.sum(outcomes) / n),
            median=float(outcomes[_floor_index(n, PERCENTILES["median"])]),
            p10=float(outcomes[_floor_index(n, PERCENTILES["p10"])]),
            p90=float(outcomes[_floor_index(n, PERCENTILES["p90"])]),
            prob_positive=int(np.count_nonzero(outcomes > 0)) / n,
        )

    def run(self, model: DecisionModel, mode=SimulationMode.PROBABILITY, threshold: float = 0.0):
        """Dispatch to run_probability or run_percentiles."""
        mode = SimulationMode(mode)
        if mode is SimulationMode.PROBABILITY:
            return self.run_probability(model, threshold)
        return self.run_percentiles(model)


def _floor_index(n: int, quantile: float) -> int:
    return min(n - 1, math.floor(n * quantile))
