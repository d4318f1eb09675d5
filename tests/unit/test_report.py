"""
Unit tests for report rendering.
"""

from jobqueue.constants import WorkerState
from jobqueue.harness.fairness import summarize
from jobqueue.harness.report import format_config, format_report, format_trial_summary
from jobqueue.types.run import ConsumerStats, RunConfig, RunResult, TrialSummary


def make_result(counts: list[int], **kwargs) -> RunResult:
    config = RunConfig(producers=2, consumers=len(counts), jobs_per_producer=sum(counts) // 2)
    return RunResult(
        config=config,
        consumers=[
            ConsumerStats(consumer_id=i + 1, processed_count=c, state=WorkerState.EXITED)
            for i, c in enumerate(counts)
        ],
        produced_total=sum(counts),
        discarded_total=0,
        elapsed_seconds=2.0,
        report=summarize(counts, 2.0, config.fairness_cv_threshold),
        **kwargs,
    )


class TestFormatReport:
    """Tests for format_report()."""

    def test_balanced_report(self):
        """Test the main figures of a balanced run."""
        text = format_report(make_result([10, 10]))

        assert "Consumer 1 processed: 10" in text
        assert "Consumer 2 processed: 10" in text
        assert "Total processed              : 20" in text
        assert "Throughput (jobs/sec)        : 10.00" in text
        assert "Jain's index                 : 1.0000" in text
        assert "Fairness imbalance ratio (max/min): 1.00" in text
        assert "Verdict                      : FAIR" in text
        assert "All jobs processed. Queue shut down cleanly." in text

    def test_starvation_warning(self):
        """Test the warning printed when a consumer got nothing."""
        text = format_report(make_result([0, 20]))

        assert "possible starvation" in text
        assert "imbalance ratio" not in text
        assert "STARVATION" in text

    def test_cancelled_run(self):
        """Test the closing line of a cancelled run."""
        text = format_report(make_result([1, 1], cancelled=True))

        assert "Run cancelled before completion." in text

    def test_early_shutdown(self):
        """Test the closing line of a mid-run shutdown."""
        result = make_result([3, 3], shutdown_early=True)

        text = format_report(result)

        assert "Queue shut down early: 6 of 6 jobs submitted" in text

    def test_config_block(self):
        """Test the configuration header."""
        text = format_config(make_result([5, 5]))

        assert text.startswith("=== Configuration ===")
        assert "producers=2" in text
        assert "consumers=2" in text


class TestFormatTrialSummary:
    """Tests for format_trial_summary()."""

    def test_worst_case_block(self):
        """Test the worst-case summary figures."""
        results = [make_result([10, 10]), make_result([8, 12])]
        summary = TrialSummary(
            trials=results,
            worst_jain=min(r.report.jain for r in results),
            worst_gini=max(r.report.gini for r in results),
            worst_min_share=min(r.report.min_share for r in results),
            worst_trial=2,
            worst_counts=[8, 12],
        )

        text = format_trial_summary(summary)

        assert "over 2 trials" in text
        assert "Worst trial : 2" in text
        assert "Counts      : [8, 12]" in text
        assert "Starvation" not in text

