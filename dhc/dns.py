"""DNS helpers: forward resolution and bounded reverse (PTR) lookup."""

import logging
import socket

import dns.exception
import dns.resolver
import dns.reversename

from dhc.errors import ResolutionError

logger = logging.getLogger(__name__)


def resolve_all(domain: str) -> list[str]:
    """Resolve a domain to all of its A and AAAA addresses.

    Wraps ``socket.getaddrinfo`` and returns the addresses deduplicated,
    in the order the system resolver returned them.

    Args:
        domain: The domain to resolve (e.g. ``"example.com"``).

    Returns:
        A list of IP address strings.

    Raises:
        ResolutionError: If DNS resolution fails entirely.
    """
    logger.debug("Resolving %s", domain)

    try:
        results = socket.getaddrinfo(
            domain,
            None,
            family=socket.AF_UNSPEC,
            type=socket.SOCK_STREAM,
        )
    except (OSError, UnicodeError) as exc:
        raise ResolutionError(f"Could not resolve {domain}: {exc}") from exc

    seen: set[str] = set()
    out: list[str] = []
    for _family, _type, _proto, _canonname, sockaddr in results:
        # sockaddr is (ip, port) for AF_INET, (ip, port, flow, scope) for AF_INET6
        ip = sockaddr[0]
        if ip not in seen:
            seen.add(ip)
            out.append(ip)

    logger.debug("Resolved %s → %d unique address(es)", domain, len(out))
    return out


def reverse_lookup(address: str, timeout_ms: int) -> str:
    """Look up the PTR hostname of *address*.

    The query goes through dnspython using the system resolver
    configuration, with *timeout_ms* as the total lifetime of the query.

    Returns:
        The first PTR target, without the trailing dot.

    Raises:
        TimeoutError: If no answer arrives within *timeout_ms*.
        dns.exception.DNSException: On NXDOMAIN, no answer, or any other
            resolver failure.
    """
    timeout = timeout_ms / 1000
    resolver = dns.resolver.Resolver(configure=True)
    resolver.lifetime = timeout

    name = dns.reversename.from_address(address)
    logger.debug("Querying PTR %s", name)
    try:
        answer = resolver.resolve(name, "PTR", lifetime=timeout)
    except dns.exception.Timeout as exc:
        raise TimeoutError(
            f"Reverse lookup of {address} timed out after {timeout_ms}ms"
        ) from exc

    hostname = str(answer[0].target).rstrip(".")
    if not hostname:
        raise dns.resolver.NoAnswer(f"Empty PTR record for {address}")
    return hostname
