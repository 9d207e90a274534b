"""Data models: ProbeResult and SweepRun dataclasses, plus field helpers."""

import ipaddress
from dataclasses import dataclass, field
from datetime import UTC, datetime

NO_PTR = "(no PTR)"
NO_RESPONSE = "(no response)"


@dataclass
class ProbeResult:
    """Outcome of probing one resolved address.

    Exactly one of ``status_line`` and ``error`` is non-empty once the
    probe has finished.

    Attributes:
        address: IPv4 or IPv6 address that was probed.
        reverse_name: PTR hostname, or ``NO_PTR`` if the reverse lookup
            failed.
        display_url: ``https://`` URL built from the PTR name when one was
            found, otherwise from the literal address.
        status_line: First line of the HTTP response (e.g.
            ``"HTTP/1.1 200 OK"``), or ``NO_RESPONSE`` if the peer closed
            without sending anything.
        status_code: Status code token taken from ``status_line``.
        elapsed_ms: Milliseconds from probe start to first response byte
            or to failure.
        error: Failure description; empty on success.
    """

    address: str
    reverse_name: str = ""
    display_url: str = ""
    status_line: str = ""
    status_code: str = ""
    elapsed_ms: int = 0
    error: str = ""


@dataclass
class SweepRun:
    """Record of one sweep over every address of a domain.

    Attributes:
        domain: Domain that was resolved and probed.
        results: One ``ProbeResult`` per address, in resolution order.
        duration_seconds: Wall-clock duration of the whole sweep.
        timestamp: When the sweep started (UTC).
        meta: Optional extra information (e.g. the sweep summary).
    """

    domain: str
    results: list[ProbeResult]
    duration_seconds: float
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC),
    )
    meta: dict = field(default_factory=dict)


def is_ipv6(address: str) -> bool:
    """Return True if *address* is a literal IPv6 address."""
    try:
        return isinstance(ipaddress.ip_address(address), ipaddress.IPv6Address)
    except ValueError:
        return False


def build_display_url(address: str, reverse_name: str) -> str:
    """Build the URL shown for a probed address.

    The PTR name is preferred.  When it is missing or the ``NO_PTR``
    sentinel, the literal address is used, bracketed if it is IPv6.
    """
    if reverse_name and reverse_name != NO_PTR:
        return f"https://{reverse_name}"
    if is_ipv6(address):
        return f"https://[{address}]"
    return f"https://{address}"


def parse_status_code(status_line: str) -> str:
    """Extract the status code token from an HTTP status line.

    Returns the second whitespace-delimited token when the first one
    starts with ``HTTP/``, otherwise an empty string.  The token is not
    checked for being numeric.
    """
    parts = status_line.split()
    if len(parts) >= 2 and parts[0].startswith("HTTP/"):
        return parts[1]
    return ""
