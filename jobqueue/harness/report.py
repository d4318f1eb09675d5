"""
Human-readable rendering of run results.
"""

from jobqueue.types.run import RunResult, TrialSummary


def format_config(result: RunResult) -> str:
    cfg = result.config
    return (
        "=== Configuration ===\n"
        f"capacity={cfg.capacity}, producers={cfg.producers}, "
        f"consumers={cfg.consumers}, jobsPerProducer={cfg.jobs_per_producer}, "
        f"verbose={str(cfg.verbose).lower()}, logEvery={cfg.log_every}, "
        f"noSleep={str(cfg.no_sleep).lower()}\n"
    )


def format_report(result: RunResult) -> str:
    """
    Render the metrics summary of a run.

    Args:
        result: The finished run.

    Returns:
        Multi-line report text ending with a newline.
    """
    report = result.report
    lines = ["=== Metrics Summary ==="]

    for stats in result.consumers:
        lines.append(f"Consumer {stats.consumer_id} processed: {stats.processed_count}")

    lines += [
        f"Total processed              : {report.total}",
        f"Min processed by a consumer  : {report.min}",
        f"Max processed by a consumer  : {report.max}",
        f"Elapsed time (s)             : {result.elapsed_seconds:.3f}",
        f"Throughput (jobs/sec)        : {report.throughput:.2f}",
        "",
        "=== Fairness ===",
        f"Jain's index                 : {report.jain:.4f}",
        f"Gini coefficient             : {report.gini:.4f}",
        f"Mean / std dev               : {report.mean:.2f} / {report.std_dev:.2f}",
        f"Coefficient of variation     : {report.cv:.4f}",
        f"Min share                    : {report.min_share:.4f}",
    ]

    if report.imbalance_ratio is None:
        lines.append(
            "Fairness WARNING: at least one consumer processed 0 jobs (possible starvation)."
        )
    else:
        lines.append(f"Fairness imbalance ratio (max/min): {report.imbalance_ratio:.2f}")

    lines += [
        f"Fairness spread (max - min)  : {report.spread}",
        f"Verdict                      : {report.verdict.value.upper()}",
        "",
    ]

    if result.cancelled:
        lines.append("Run cancelled before completion.")
    elif result.shutdown_early:
        lines.append(
            f"Queue shut down early: {result.produced_total} of "
            f"{result.config.expected_jobs} jobs submitted, "
            f"{result.discarded_total} refused."
        )
    else:
        lines.append("All jobs processed. Queue shut down cleanly.")

    return "\n".join(lines) + "\n"


def format_trial_summary(summary: TrialSummary) -> str:
    """Render the worst-case block over a set of trials."""
    lines = [f"=== Worst-Case Summary (over {len(summary.trials)} trials) ==="]
    lines += [
        f"Worst trial : {summary.worst_trial}",
        f"Counts      : {summary.worst_counts}",
        f"Min Jain    : {summary.worst_jain:.4f}",
        f"Max Gini    : {summary.worst_gini:.4f}",
        f"Min MinShare: {summary.worst_min_share:.4f}",
    ]
    if summary.any_starvation:
        lines.append("Starvation detected in at least one trial.")
    return "\n".join(lines) + "\n"
