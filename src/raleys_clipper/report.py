import logging

from .models import ClipOutcome, ClipTally

logger = logging.getLogger(__name__)
# Separate logger for reports - can be configured with its own file handler
report_logger = logging.getLogger("raleys_clipper.reports")

NOTHING_TO_DO = "No offers available to be clipped."


def format_outcome(outcome: ClipOutcome) -> str:
    if outcome.success:
        return f"Clipped {outcome.offer}"
    return f"Failed to clip {outcome.offer}: {outcome.reason}"


def log_outcome(outcome: ClipOutcome) -> None:
    """Print one status line per clipped offer. Failures are already logged as warnings."""
    if outcome.success:
        logger.info(format_outcome(outcome))


def build_report(tally: ClipTally, outcomes: list[ClipOutcome] | None = None) -> str:
    """Build the text summary of a clipping run."""
    if tally.nothing_to_do:
        return NOTHING_TO_DO

    plural = "" if tally.total == 1 else "s"
    lines = [f"Clipped {tally.clipped} of {tally.total} offer{plural} ({tally.failed} failed)."]

    failures = [o for o in outcomes or [] if not o.success]
    if failures:
        lines.append("Failed offers:")
        for outcome in failures:
            lines.append(f"  - {outcome.offer}: {outcome.reason}")
    return "\n".join(lines)


def log_report(tally: ClipTally, outcomes: list[ClipOutcome] | None = None) -> str:
    """Log the report to the console and to the report logger, returning the report text."""
    report = build_report(tally, outcomes)
    logger.info(report)
    report_logger.info(report)
    return report
