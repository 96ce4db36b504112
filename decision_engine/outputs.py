"""
PURPOSE: Result types and formatting for Monte Carlo decision runs.

This module turns raw simulation aggregates into the two result shapes the
surfaces return (probability mode and percentile mode), the LOW/MEDIUM/HIGH
label, the pessimistic/expected/optimistic buckets and the plain-text summary
handed to conversational agents.

SRP/DRY: Single responsibility = output formatting and labelling logic.
         No simulation, no sensitivity analysis.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from .config import LOW_CUTOFF, MEDIUM_CUTOFF


@dataclass
class ProbabilityResult:
    """Probability-mode output.

    Attributes:
        iterations (int): Number of trials run.
        probability_success (float): Fraction of trials with outcome > threshold.
        label (str): "LOW", "MEDIUM" or "HIGH".
        threshold (float): Threshold the outcomes were compared against.
        enabled_count (int): Number of inputs that took part in each trial.
    """
    iterations: int
    probability_success: float
    label: str
    threshold: float
    enabled_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Wire format shared by the HTTP endpoint and the run_decision_mc tool."""
        return {
            "iterations": self.iterations,
            "probabilitySuccess": self.probability_success,
            "label": self.label,
            "summary": {
                "threshold": self.threshold,
                "enabledCount": self.enabled_count,
            },
        }


@dataclass
class PercentileResult:
    """Percentile-mode output over the sorted trial outcomes."""
    mean: float
    median: float
    p10: float
    p90: float
    prob_positive: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": self.mean,
            "median": self.median,
            "p10": self.p10,
            "p90": self.p90,
            "prob_positive": self.prob_positive,
        }


@dataclass
class Bucket:
    value: float
    label: str
    emoji: str

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label, "emoji": self.emoji}


class OutputFormatter:
    """
    Formats simulation results into labels, buckets and agent-facing text.

    Label thresholds:
    - LOW: probability < 0.33
    - MEDIUM: 0.33 <= probability < 0.66
    - HIGH: probability >= 0.66
    """

    LOW_THRESHOLD = LOW_CUTOFF
    MEDIUM_THRESHOLD = MEDIUM_CUTOFF

    @staticmethod
    def label_for(
        probability: float,
        low: float = LOW_THRESHOLD,
        medium: float = MEDIUM_THRESHOLD,
    ) -> str:
        if probability < low:
            return "LOW"
        elif probability < medium:
            return "MEDIUM"
        else:
            return "HIGH"

    @staticmethod
    def buckets(result: PercentileResult) -> Dict[str, Bucket]:
        return {
            "pessimistic": Bucket(result.p10, "Pessimistic (10th %ile)", "🔴"),
            "expected": Bucket(result.median, "Expected Outcome", "🔵"),
            "optimistic": Bucket(result.p90, "Optimistic (90th %ile)", "🟢"),
        }

    @staticmethod
    def format_money(value: float) -> str:
        """Whole-dollar amount with thousands separators; halves round up."""
        if not math.isfinite(value):
            return f"${value}"
        return f"${math.floor(value + 0.5):,}"

    @staticmethod
    def decision_summary(
        decision_name: str,
        result: PercentileResult,
        sensitivity_rows: Sequence[Any],
    ) -> str:
        """
        Plain-text summary of a decision analysis.

        Args:
            decision_name: Title shown in bold.
            result: Percentile-mode result of the base run.
            sensitivity_rows: Rows sorted by descending impact; the first one
                is reported as the most sensitive variable.

        Returns:
            Multi-line markdown-ish string.
        """
        buckets = OutputFormatter.buckets(result)
        lines = [
            f"**{decision_name}**",
            "",
            f"{buckets['pessimistic'].emoji} Pessimistic: {OutputFormatter.format_money(buckets['pessimistic'].value)}",
            f"{buckets['expected'].emoji} Expected: {OutputFormatter.format_money(buckets['expected'].value)}",
            f"{buckets['optimistic'].emoji} Optimistic: {OutputFormatter.format_money(buckets['optimistic'].value)}",
            "",
            f"Probability positive: {result.prob_positive * 100:.1f}%",
        ]
        if sensitivity_rows:
            top = sensitivity_rows[0]
            lines.append(f"Most sensitive: {top.variable} ({top.impact_percent:.0f}% impact)")
        return "\n".join(lines)

    @staticmethod
    def decision_payload(
        decision_name: str,
        result: PercentileResult,
        sensitivity_rows: Sequence[Any],
        model_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Structured counterpart of decision_summary for JSON consumers."""
        payload: Dict[str, Any] = {
            "decision_name": decision_name,
            "results": result.to_dict(),
            "buckets": {k: v.to_dict() for k, v in OutputFormatter.buckets(result).items()},
            "sensitivity": [row.to_dict() for row in sensitivity_rows],
        }
        if model_name is not None:
            payload["model"] = model_name
        return payload

