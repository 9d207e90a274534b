"""Sweep summary: success/failure counts, status and failure distributions, latency."""

import logging
from dataclasses import dataclass, field

from dhc.models import ProbeResult

logger = logging.getLogger(__name__)


@dataclass
class SweepSummary:
    """Statistics computed from the results of one sweep.

    Attributes:
        total: Number of probed addresses.
        succeeded: Results with an empty ``error``.
        failed: Results with a non-empty ``error``.
        status_distribution: ``(status_code, count)`` pairs sorted by count
            descending.  Successful probes without a parsable code are
            counted under ``"-"``.
        failure_distribution: ``(kind, count)`` pairs sorted by count
            descending, where *kind* is the error prefix (e.g.
            ``"Timeout"``).
        fastest_ms: Lowest latency among successful probes, or None.
        slowest_ms: Highest latency among successful probes, or None.
    """

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    status_distribution: list[tuple[str, int]] = field(default_factory=list)
    failure_distribution: list[tuple[str, int]] = field(default_factory=list)
    fastest_ms: int | None = None
    slowest_ms: int | None = None


def summarize(results: list[ProbeResult]) -> SweepSummary:
    """Compute summary statistics for a list of probe results."""
    status_counts: dict[str, int] = {}
    failure_counts: dict[str, int] = {}
    latencies: list[int] = []

    for r in results:
        if r.error:
            kind = r.error.split(":", 1)[0]
            failure_counts[kind] = failure_counts.get(kind, 0) + 1
            continue

        code = r.status_code or "-"
        status_counts[code] = status_counts.get(code, 0) + 1
        latencies.append(r.elapsed_ms)

    status_distribution = sorted(
        status_counts.items(), key=lambda item: item[1], reverse=True
    )
    failure_distribution = sorted(
        failure_counts.items(), key=lambda item: item[1], reverse=True
    )

    return SweepSummary(
        total=len(results),
        succeeded=len(latencies),
        failed=len(results) - len(latencies),
        status_distribution=status_distribution,
        failure_distribution=failure_distribution,
        fastest_ms=min(latencies) if latencies else None,
        slowest_ms=max(latencies) if latencies else None,
    )


def summary_to_meta(results: list[ProbeResult]) -> dict:
    """Compute the summary and return it as a plain dict.

    Suitable for ``SweepRun.meta`` and JSON output.
    """
    summary = summarize(results)
    return {
        "total": summary.total,
        "succeeded": summary.succeeded,
        "failed": summary.failed,
        "status_distribution": summary.status_distribution,
        "failure_distribution": summary.failure_distribution,
        "fastest_ms": summary.fastest_ms,
        "slowest_ms": summary.slowest_ms,
    }
