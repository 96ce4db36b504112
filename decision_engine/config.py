"""
PURPOSE: Simulation configuration and bucketing parameters for the decision engine.

RESPONSIBILITIES:
- Define simulation hyperparameters (number of runs, iteration bounds, seeds)
- Probability label cut points
- Clamping ranges applied to loosely-typed HTTP input
- Single responsibility: configuration only, no simulation logic
"""

# Simulation Parameters
NUM_RUNS = 20000  # Default iterations for the probability endpoint
MIN_ITERATIONS = 1000
MAX_ITERATIONS = 300000  # Upper bound keeps a single request in the low seconds
TOOL_MAX_ITERATIONS = 200000  # Upper bound accepted by the run_decision_mc tool schema
RANDOM_SEED = None  # Set to int for reproducibility, None for random

# Decision analysis (percentile mode + sensitivity)
DECISION_NUM_RUNS = 10000
SENSITIVITY_NUM_RUNS = 5000  # Per scenario; two scenarios per variable
SPREAD_DIVISOR = 4.0  # std = (max - min) / SPREAD_DIVISOR

# Probability Labels
# p < LOW_CUTOFF → LOW, p < MEDIUM_CUTOFF → MEDIUM, else HIGH
LOW_CUTOFF = 0.33
MEDIUM_CUTOFF = 0.66

# Percentile Outputs (floor index into the sorted outcomes)
PERCENTILES = {"p10": 0.1, "median": 0.5, "p90": 0.9}

# Clamping ranges for the HTTP simulation endpoint: (min, max, default)
THRESHOLD_RANGE = (-1000.0, 1000.0, 0.0)
MEAN_RANGE = (-1e6, 1e6, 0.0)
STD_RANGE = (0.0, 1e6, 0.0)
WEIGHT_RANGE = (0.0, 1e6, 1.0)


def get_iteration_bounds():
    """Return (min, max) iteration bounds for the HTTP path."""
    return MIN_ITERATIONS, MAX_ITERATIONS
