"""
Harness module.
Contains the run orchestrator, fairness metrics and report rendering.
"""

from jobqueue.harness.fairness import (
    coefficient_of_variation,
    gini_coefficient,
    jain_index,
    summarize,
)
from jobqueue.harness.runner import Harness, TrialRunner, run_trials

__all__ = [
    "Harness",
    "TrialRunner",
    "run_trials",
    "summarize",
    "jain_index",
    "gini_coefficient",
    "coefficient_of_variation",
]
