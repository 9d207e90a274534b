"""Sweep orchestration: resolve a domain, then probe every address in isolation."""

import logging
import ssl
import time
from concurrent.futures import ThreadPoolExecutor

from dhc.dns import resolve_all, reverse_lookup
from dhc.errors import ProbeError
from dhc.models import NO_PTR, ProbeResult, build_display_url, parse_status_code
from dhc.tls import DEFAULT_PORT, DEFAULT_TIMEOUT_MS, CertificateValidator, probe

logger = logging.getLogger(__name__)


def probe_all(
    domain: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    port: int = DEFAULT_PORT,
    workers: int = 1,
    context: ssl.SSLContext | None = None,
    validator: CertificateValidator | None = None,
) -> list[ProbeResult]:
    """Resolve *domain* and probe each of its addresses.

    A failure on one address never aborts the sweep; it is recorded in
    that address's ``ProbeResult.error``.

    Args:
        domain: Domain to resolve; also used as SNI and ``Host``.
        timeout_ms: Deadline for each individual network operation.
        port: Port probed on every address.
        workers: Number of concurrent probes.  ``1`` probes sequentially.
        context: Optional SSL context passed through to the probe.
        validator: Optional certificate policy passed through to the probe.

    Returns:
        One ``ProbeResult`` per resolved address, in resolution order.

    Raises:
        ResolutionError: If *domain* cannot be resolved at all.
    """
    logger.info("Resolving %s", domain)
    addresses = resolve_all(domain)
    logger.info("Probing %d address(es) for %s", len(addresses), domain)

    def _one(address: str) -> ProbeResult:
        return probe_one(
            address,
            domain,
            timeout_ms,
            port=port,
            context=context,
            validator=validator,
        )

    if workers <= 1 or len(addresses) <= 1:
        return [_one(address) for address in addresses]

    with ThreadPoolExecutor(
        max_workers=min(workers, len(addresses)),
        thread_name_prefix="dhc-probe",
    ) as pool:
        # map() yields in submission order, i.e. resolution order.
        return list(pool.map(_one, addresses))


def probe_one(
    address: str,
    domain: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    port: int = DEFAULT_PORT,
    context: ssl.SSLContext | None = None,
    validator: CertificateValidator | None = None,
) -> ProbeResult:
    """Reverse-resolve and probe a single address.

    Never raises: every failure ends up in the returned result.
    """
    result = ProbeResult(address=address)

    try:
        result.reverse_name = reverse_lookup(address, timeout_ms)
    except Exception as exc:  # noqa: BLE001 - any resolver failure means no PTR
        logger.debug("No PTR for %s: %s", address, exc)
        result.reverse_name = NO_PTR

    result.display_url = build_display_url(address, result.reverse_name)

    t0 = time.monotonic()
    try:
        status_line = probe(
            address,
            domain,
            port,
            timeout_ms,
            context=context,
            validator=validator,
        )
    except ProbeError as exc:
        result.error = exc.describe()
    except Exception as exc:  # noqa: BLE001 - isolate this address from the sweep
        result.error = f"Unexpected error: {type(exc).__name__}: {exc}"
    else:
        result.status_line = status_line
        result.status_code = parse_status_code(status_line)
    finally:
        result.elapsed_ms = int((time.monotonic() - t0) * 1000)

    if result.error:
        logger.warning("%s (%s): %s", address, result.display_url, result.error)
    else:
        logger.debug(
            "%s answered %r in %dms", address, result.status_line, result.elapsed_ms
        )
    return result


def select_fastest(results: list[ProbeResult]) -> ProbeResult | None:
    """Return the successful result with the lowest latency.

    Ties go to the earliest result.  Returns ``None`` if every probe
    failed.
    """
    ok = [r for r in results if not r.error]
    if not ok:
        return None
    return min(ok, key=lambda r: r.elapsed_ms)


def fastest(
    domain: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    *,
    port: int = DEFAULT_PORT,
    workers: int = 1,
    context: ssl.SSLContext | None = None,
    validator: CertificateValidator | None = None,
) -> ProbeResult | None:
    """Sweep *domain* and return its fastest working backend, if any.

    Takes the same arguments as ``probe_all``.

    Raises:
        ResolutionError: If *domain* cannot be resolved at all.
    """
    results = probe_all(
        domain,
        timeout_ms,
        port=port,
        workers=workers,
        context=context,
        validator=validator,
    )
    return select_fastest(results)
