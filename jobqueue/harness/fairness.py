"""
Throughput and fairness metrics over per-consumer processed counts.

Pure functions; no concurrency involved.
"""

from collections.abc import Sequence

import numpy as np

from jobqueue.constants import FairnessVerdict
from jobqueue.types.run import FairnessReport


def _as_array(counts: Sequence[int]) -> np.ndarray:
    return np.asarray(counts, dtype=np.float64)


def jain_index(counts: Sequence[int]) -> float:
    """
    Jain's fairness index: (sum x)^2 / (n * sum x^2).

    1.0 means every consumer processed the same number of jobs; 1/n means one
    consumer did everything. Defined as 0.0 when all counts are 0.
    """
    x = _as_array(counts)
    if x.size == 0:
        return 0.0
    sum_sq = float(np.sum(x * x))
    if sum_sq == 0.0:
        return 0.0
    total = float(np.sum(x))
    return (total * total) / (x.size * sum_sq)


def gini_coefficient(counts: Sequence[int]) -> float:
    """
    Gini coefficient via the sorted weighted sum.

    G = 2 * sum(i * x_i) / (n * sum x) - (n + 1) / n over counts sorted
    ascending with 1-based i, clamped to [0, 1]. The maximum for n consumers
    is (n - 1) / n. Defined as 0.0 when the total is 0.
    """
    x = np.sort(_as_array(counts))
    n = x.size
    if n == 0:
        return 0.0
    total = float(np.sum(x))
    if total == 0.0:
        return 0.0
    ranks = np.arange(1, n + 1, dtype=np.float64)
    g = (2.0 * float(np.sum(ranks * x))) / (n * total) - (n + 1) / n
    return float(np.clip(g, 0.0, 1.0))


def coefficient_of_variation(counts: Sequence[int]) -> float:
    """Population standard deviation divided by the mean; 0.0 when the mean is 0."""
    x = _as_array(counts)
    if x.size == 0:
        return 0.0
    mean = float(np.mean(x))
    if mean == 0.0:
        return 0.0
    return float(np.std(x)) / mean


def throughput(total: int, elapsed_seconds: float) -> float:
    """Jobs per second; 0.0 for a non-positive elapsed time."""
    if elapsed_seconds <= 0:
        return 0.0
    return total / elapsed_seconds


def classify(counts: Sequence[int], cv: float, cv_threshold: float) -> FairnessVerdict:
    """STARVATION if any consumer got nothing, else FAIR within the CV threshold, else UNEVEN."""
    if any(c == 0 for c in counts):
        return FairnessVerdict.STARVATION
    if cv <= cv_threshold:
        return FairnessVerdict.FAIR
    return FairnessVerdict.UNEVEN


def summarize(
    counts: Sequence[int],
    elapsed_seconds: float,
    cv_threshold: float,
) -> FairnessReport:
    """
    Aggregate terminal consumer counts into a FairnessReport.

    Args:
        counts: processed_count of every consumer, read after join.
        elapsed_seconds: Wall-clock duration of the run.
        cv_threshold: Largest coefficient of variation still considered fair.

    Returns:
        FairnessReport: All throughput and fairness figures plus the verdict.
    """
    x = _as_array(counts)
    n = int(x.size)

    if n == 0:
        return FairnessReport(
            consumers=0,
            total=0,
            min=0,
            max=0,
            spread=0,
            mean=0.0,
            std_dev=0.0,
            cv=0.0,
            throughput=0.0,
            jain=0.0,
            gini=0.0,
            min_share=0.0,
            imbalance_ratio=None,
            verdict=classify(counts, 0.0, cv_threshold),
        )

    total = int(sum(counts))
    lo = int(min(counts))
    hi = int(max(counts))
    cv = coefficient_of_variation(counts)

    return FairnessReport(
        consumers=n,
        total=total,
        min=lo,
        max=hi,
        spread=hi - lo,
        mean=float(np.mean(x)),
        std_dev=float(np.std(x)),
        cv=cv,
        throughput=throughput(total, elapsed_seconds),
        jain=jain_index(counts),
        gini=gini_coefficient(counts),
        min_share=(lo / total) if total > 0 else 0.0,
        imbalance_ratio=(hi / lo) if lo > 0 else None,
        verdict=classify(counts, cv, cv_threshold),
    )
