"""
Command-line entry point for the producer/consumer harness.

Defaults come from Settings (environment / .env); flags override them.
"""

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Sequence

from pydantic import ValidationError

from jobqueue.config import get_settings
from jobqueue.constants import ClosedEnqueuePolicy
from jobqueue.errors import InvalidConfigurationError, OperationCancelledError
from jobqueue.harness.report import format_config, format_report, format_trial_summary
from jobqueue.harness.runner import Harness, TrialRunner
from jobqueue.observability.logging import setup_logging
from jobqueue.observability.metrics import get_metrics
from jobqueue.observability.tracing import setup_tracing
from jobqueue.types.run import RunConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CANCELLED = 1
EXIT_INVALID_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="jobqueue-harness",
        description="Run producers and consumers over a bounded job queue and report fairness.",
    )
    parser.add_argument("--capacity", type=int, default=settings.queue_capacity,
                        help="queue capacity")
    parser.add_argument("--producers", type=int, default=settings.producers,
                        help="number of producer threads")
    parser.add_argument("--consumers", type=int, default=settings.consumers,
                        help="number of consumer threads")
    parser.add_argument("--jobs", type=int, default=settings.jobs_per_producer,
                        help="jobs per producer")
    parser.add_argument("--quiet", action="store_true",
                        help="disable per-job progress logs (recommended for throughput)")
    parser.add_argument("--log-every", type=int, default=settings.log_every,
                        help="log progress every N jobs (when not quiet)")
    parser.add_argument("--no-sleep", action="store_true", default=settings.no_sleep,
                        help="skip simulated job processing time")
    parser.add_argument("--seed", type=int, default=settings.seed_base,
                        help="seed of the first producer; producer i uses seed + i")
    parser.add_argument("--trials", type=int, default=1,
                        help="repeat the run N times with shifted seeds")
    parser.add_argument("--cv-threshold", type=float, default=settings.fairness_cv_threshold,
                        help="largest coefficient of variation reported as FAIR")
    parser.add_argument("--shutdown-after", type=float, default=None,
                        help="shut the queue down after N seconds even if producers are not done")
    parser.add_argument("--reject-closed", action="store_true",
                        help="raise instead of silently discarding jobs submitted after shutdown")
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    """
    Build a validated RunConfig from parsed arguments.

    Raises:
        pydantic.ValidationError: For out-of-range values.
    """
    settings = get_settings()
    policy = (
        ClosedEnqueuePolicy.REJECT if args.reject_closed else settings.closed_enqueue_policy
    )
    return RunConfig.from_settings(
        settings,
        capacity=args.capacity,
        producers=args.producers,
        consumers=args.consumers,
        jobs_per_producer=args.jobs,
        verbose=settings.verbose and not args.quiet,
        log_every=args.log_every,
        no_sleep=args.no_sleep,
        seed_base=args.seed,
        fairness_cv_threshold=args.cv_threshold,
        shutdown_after_seconds=args.shutdown_after,
        closed_enqueue_policy=policy,
    )


def install_signal_handlers(target: Harness | TrialRunner) -> None:
    """Cancel the run on SIGINT/SIGTERM."""

    def handle(signum: int, frame: object) -> None:
        logger.warning("Received signal, cancelling run", extra={"signal": signum})
        # Cancel from a helper thread: a signal landing inside queue.shutdown(),
        # which holds the non-reentrant queue lock, would deadlock in _wake_all
        threading.Thread(target=target.cancel, name="harness-cancel", daemon=True).start()

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, handle)


def main(argv: Sequence[str] | None = None) -> int:
    """
    Parse arguments, run the harness and print the report.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    setup_logging()
    setup_tracing()

    try:
        config = config_from_args(args)
        if args.trials < 1:
            raise InvalidConfigurationError(f"trials must be >= 1, got {args.trials}")
    except (ValidationError, InvalidConfigurationError) as e:
        sys.stderr.write(f"Invalid arguments.\n{e}\n")
        return EXIT_INVALID_CONFIG

    settings = get_settings()
    metrics = get_metrics()
    if settings.metrics_port is not None:
        metrics.serve(settings.metrics_port)
        logger.info("Serving metrics", extra={"port": settings.metrics_port})

    if args.trials > 1:
        runner = TrialRunner(config, args.trials, metrics=metrics)
        install_signal_handlers(runner)
        try:
            summary = runner.run()
        except OperationCancelledError:
            return EXIT_CANCELLED
        last = summary.trials[-1]
        sys.stdout.write(format_config(last))
        for result in summary.trials:
            sys.stdout.write("\n" + format_report(result))
        sys.stdout.write("\n" + format_trial_summary(summary))
        return EXIT_CANCELLED if last.cancelled else EXIT_OK

    harness = Harness(config, metrics=metrics)
    install_signal_handlers(harness)
    result = harness.run()

    sys.stdout.write(format_config(result) + "\n")
    sys.stdout.write(format_report(result))
    return EXIT_CANCELLED if result.cancelled else EXIT_OK


def run() -> None:
    """Run the harness CLI."""
    sys.exit(main())


if __name__ == "__main__":
    run()
