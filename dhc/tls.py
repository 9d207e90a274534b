"""TLS/HTTP probe: connect, handshake with SNI, send GET /, read the status line."""

import logging
import socket
import ssl
from collections.abc import Callable

from dhc.errors import IoError, ProbeTimeout, TlsError
from dhc.models import NO_RESPONSE

logger = logging.getLogger(__name__)

DEFAULT_PORT = 443
DEFAULT_TIMEOUT_MS = 5000

# Only the status line is consulted; longer responses are truncated.
READ_SIZE = 4096

# Called with the peer certificate (as returned by ``getpeercert()``) and
# the expected hostname.  Returns a rejection reason, or None to accept.
CertificateValidator = Callable[[dict, str], str | None]


def build_request(host: str) -> bytes:
    """Return the minimal HTTP/1.1 request sent to every backend."""
    return (
        f"GET / HTTP/1.1\r\n"
        f"Host: {host}\r\n"
        f"Connection: close\r\n"
        f"\r\n"
    ).encode("ascii")


def probe(
    address: str,
    sni_host: str,
    port: int = DEFAULT_PORT,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    context: ssl.SSLContext | None = None,
    validator: CertificateValidator | None = None,
) -> str:
    """Probe one backend over TLS and return its HTTP status line.

    Steps, each bounded by *timeout_ms*:

    1. TCP connect to ``address:port``.
    2. TLS handshake presenting *sni_host* as SNI.  The certificate is
       verified against the platform trust store and *sni_host*.  If a
       *validator* is given it is consulted before any request byte is
       written.
    3. Send ``GET /`` with ``Host: sni_host`` and ``Connection: close``.
    4. Read once, up to ``READ_SIZE`` bytes.

    Args:
        address: IP address of the backend.
        sni_host: Hostname used for SNI, certificate checks and ``Host``.
        port: TCP port.
        timeout_ms: Deadline applied to each network operation.
        context: SSL context to use (default:
            ``ssl.create_default_context()``).
        validator: Optional extra certificate policy.

    Returns:
        The first line of the response, or ``NO_RESPONSE`` if the peer
        closed the connection without sending anything.

    Raises:
        ProbeTimeout: If any operation exceeds the deadline.
        TlsError: If the handshake or certificate validation fails.
        IoError: On any other transport failure.
    """
    timeout = timeout_ms / 1000
    ctx = context or ssl.create_default_context()

    logger.debug("Connecting to %s port %d (SNI %s)", address, port, sni_host)
    try:
        sock = socket.create_connection((address, port), timeout=timeout)
    except TimeoutError as exc:
        raise ProbeTimeout(
            f"Connection to {address} port {port} timed out after {timeout_ms}ms"
        ) from exc
    except OSError as exc:
        raise IoError(f"Connection to {address} port {port} failed: {exc}") from exc

    with sock:
        tls = _handshake(ctx, sock, sni_host, timeout_ms)
        with tls:
            if validator is not None:
                reason = validator(tls.getpeercert() or {}, sni_host)
                if reason:
                    raise TlsError(f"Certificate rejected for {sni_host}: {reason}")
            data = _exchange(tls, sni_host, timeout_ms)

    if not data:
        logger.debug("%s closed the connection without a response", address)
        return NO_RESPONSE

    status_line = data.decode("ascii", errors="replace").split("\r\n", 1)[0]
    if not status_line:
        raise IoError(f"Empty status line from {address}")
    return status_line


def _handshake(
    ctx: ssl.SSLContext, sock: socket.socket, sni_host: str, timeout_ms: int
) -> ssl.SSLSocket:
    """Wrap *sock* in TLS, translating failures into probe errors."""
    try:
        return ctx.wrap_socket(sock, server_hostname=sni_host)
    except ssl.SSLCertVerificationError as exc:
        reason = getattr(exc, "verify_message", None) or str(exc)
        raise TlsError(f"Certificate validation failed: {reason}") from exc
    except ssl.SSLError as exc:
        reason = getattr(exc, "reason", None) or str(exc)
        raise TlsError(f"Handshake failed: {reason}") from exc
    except TimeoutError as exc:
        raise ProbeTimeout(f"TLS handshake timed out after {timeout_ms}ms") from exc
    except OSError as exc:
        raise IoError(f"Handshake I/O failed: {exc}") from exc


def _exchange(tls: ssl.SSLSocket, host: str, timeout_ms: int) -> bytes:
    """Send the request and perform the single read."""
    try:
        tls.sendall(build_request(host))
        return tls.recv(READ_SIZE)
    except TimeoutError as exc:
        raise ProbeTimeout(f"No response within {timeout_ms}ms") from exc
    except OSError as exc:
        raise IoError(f"Request failed: {exc}") from exc
