"""Exception hierarchy for resolution and per-address probe failures."""


class DhcError(Exception):
    """Base class for all dhc errors."""


class ResolutionError(DhcError):
    """Raised when forward DNS resolution of a domain fails entirely."""


class ProbeError(DhcError):
    """Base class for failures of a single address probe.

    Subclasses set ``kind``, which prefixes the message when the error is
    recorded on a ``ProbeResult``.
    """

    kind = "Probe error"

    def describe(self) -> str:
        """Return the text stored in ``ProbeResult.error``."""
        return f"{self.kind}: {self}"


class ProbeTimeout(ProbeError):
    """A connect, handshake, write or read exceeded its deadline."""

    kind = "Timeout"


class TlsError(ProbeError):
    """TLS handshake or certificate validation failed."""

    kind = "TLS error"


class IoError(ProbeError):
    """Any other transport failure (refused, reset, write/read error)."""

    kind = "I/O error"
