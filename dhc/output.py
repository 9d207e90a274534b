"""Output renderer: rich table formatter, plain text and JSON formatters, dispatch."""

import dataclasses
import json
import logging
import sys
from io import StringIO

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dhc.models import ProbeResult, SweepRun
from dhc.prober import select_fastest

logger = logging.getLogger(__name__)

# Columns displayed in the results table.
_RESULT_COLUMNS = [
    ("URL", "display_url"),
    ("Address", "address"),
    ("PTR", "reverse_name"),
    ("Status", "status_line"),
    ("Time (ms)", "elapsed_ms"),
    ("Error", "error"),
]


def render(
    sweep: SweepRun,
    fmt: str,
    *,
    show_fastest: bool = True,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Dispatch output to the appropriate formatter.

    Args:
        sweep: Sweep to render.
        fmt: Output format — ``"table"``, ``"text"`` or ``"json"``.
        show_fastest: Whether to report the fastest working server.
        file: Writable file object for output (default: ``sys.stdout``).
        width: Explicit console width (default: auto-detect).

    Raises:
        ValueError: If *fmt* is not a known format.
    """
    if fmt == "table":
        render_table(sweep, show_fastest=show_fastest, file=file, width=width)
    elif fmt == "text":
        render_text(sweep, show_fastest=show_fastest, file=file)
    elif fmt == "json":
        render_json(sweep, show_fastest=show_fastest, file=file)
    else:
        raise ValueError(f"Unknown output format: {fmt!r}")


# ---------------------------------------------------------------------------
# Table (rich) formatter
# ---------------------------------------------------------------------------


def render_table(
    sweep: SweepRun,
    *,
    show_fastest: bool = True,
    file: object | None = None,
    width: int | None = None,
) -> None:
    """Render *sweep* as a ``rich`` table with a summary line beneath it.

    Args:
        sweep: Sweep to render.
        show_fastest: Whether to print the fastest working server.
        file: Writable file object (default: ``sys.stdout``).
        width: Explicit console width (default: auto-detect).
    """
    out = file or sys.stdout
    console = Console(file=out, highlight=False, width=width)

    table = Table(title=f"{sweep.domain} — {len(sweep.results)} addresses")
    for header, attr in _RESULT_COLUMNS:
        table.add_column(header, justify="right" if attr == "elapsed_ms" else "left")

    for r in sweep.results:
        row = [_fmt(getattr(r, attr)) for _, attr in _RESULT_COLUMNS]
        if r.error:
            # Failed probes have no measured response time worth showing.
            row[4] = "—"
            row[5] = f"[red]{escape(r.error)}[/red]"
        table.add_row(*row)

    console.print(table)
    _print_summary(console, sweep)

    if show_fastest:
        best = select_fastest(sweep.results)
        if best is None:
            console.print("  No working servers found.")
        else:
            console.print(
                f"  Fastest working server: {escape(best.display_url)} "
                f"({best.address}) in {best.elapsed_ms}ms"
            )


def _print_summary(console: Console, sweep: SweepRun) -> None:
    """Print a one-line summary beneath the results table."""
    results = sweep.results
    total = len(results)
    ok = sum(1 for r in results if not r.error)
    ok_pct = (ok / total * 100) if total else 0.0

    console.print(
        f"  {total} addresses, {ok} ok ({ok_pct:.0f}%), "
        f"{total - ok} failed, sweep took {sweep.duration_seconds:.2f}s"
    )


# ---------------------------------------------------------------------------
# Plain text formatter
# ---------------------------------------------------------------------------


def render_text(
    sweep: SweepRun,
    *,
    show_fastest: bool = True,
    file: object | None = None,
) -> None:
    """Render *sweep* as plain lines, one block per address.

    Args:
        sweep: Sweep to render.
        show_fastest: Whether to print the fastest working server.
        file: Writable file object (default: ``sys.stdout``).
    """
    out = file or sys.stdout
    lines: list[str] = []

    for r in sweep.results:
        lines.extend(_text_block(r))

    if show_fastest:
        best = select_fastest(sweep.results)
        lines.append("")
        if best is None:
            lines.append("No working servers found.")
        else:
            lines.append(
                f"Fastest working server: {best.display_url} (PTR={best.reverse_name})"
            )
            lines.append(f"  Status: {best.status_line}  Time: {best.elapsed_ms}ms")

    out.write("\n".join(lines) + "\n")  # type: ignore[union-attr]


def _text_block(r: ProbeResult) -> list[str]:
    """Format a single result for ``render_text``."""
    header = f"{r.display_url} (PTR={r.reverse_name})"
    if r.error:
        return [header, f"  ERROR: {r.error}"]
    return [header, f"  Status: {r.status_line}  Time: {r.elapsed_ms}ms"]


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------


def render_json(
    sweep: SweepRun,
    *,
    show_fastest: bool = True,
    file: object | None = None,
) -> None:
    """Render *sweep* as JSON to *file*.

    The output is an object with ``domain``, ``timestamp``,
    ``duration_seconds``, ``results`` (list of result dicts) and ``meta``.
    When *show_fastest* is set it also carries ``fastest``, the fastest
    working result or ``null``.

    Args:
        sweep: Sweep to render.
        show_fastest: Whether to include the ``fastest`` key.
        file: Writable file object (default: ``sys.stdout``).
    """
    out = file or sys.stdout
    payload = _sweep_to_dict(sweep)
    if show_fastest:
        best = select_fastest(sweep.results)
        payload["fastest"] = dataclasses.asdict(best) if best else None
    json.dump(payload, out, indent=2, default=str)
    out.write("\n")  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sweep_to_dict(sweep: SweepRun) -> dict:
    """Convert a ``SweepRun`` (and its results) to a plain dict."""
    return {
        "domain": sweep.domain,
        "timestamp": sweep.timestamp.isoformat(),
        "duration_seconds": sweep.duration_seconds,
        "results": [dataclasses.asdict(r) for r in sweep.results],
        "meta": sweep.meta,
    }


def _fmt(value: object) -> str:
    """Format a field value for table display.

    Empty strings and ``None`` become ``"—"``; other values are
    stringified and escaped for rich markup.
    """
    if value is None or value == "":
        return "—"
    return escape(str(value))


def render_to_string(
    sweep: SweepRun, fmt: str, *, show_fastest: bool = True, width: int = 200
) -> str:
    """Render to a string instead of stdout — useful for testing.

    Args:
        sweep: Sweep to render.
        fmt: Output format — ``"table"``, ``"text"`` or ``"json"``.
        show_fastest: Whether to report the fastest working server.
        width: Console width for table rendering (default: 200).

    Returns:
        The rendered output as a string.
    """
    buf = StringIO()
    render(sweep, fmt, show_fastest=show_fastest, file=buf, width=width)
    return buf.getvalue()
