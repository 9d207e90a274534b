"""CLI entry point for the dhc tool."""

import dataclasses
import logging
import sys
import time

import click

from dhc.config import OUTPUT_FORMATS, ConfigError, DhcConfig, load_config, validate_config
from dhc.errors import ResolutionError
from dhc.models import SweepRun
from dhc.output import render
from dhc.prober import probe_all
from dhc.summary import summary_to_meta

logger = logging.getLogger(__name__)


@click.command()
@click.argument("domain")
@click.option(
    "--timeout",
    "-t",
    "timeout_ms",
    default=None,
    type=click.IntRange(min=1),
    help="Per-operation timeout in milliseconds [default: 5000].",
)
@click.option(
    "--port",
    "-p",
    default=None,
    type=click.IntRange(1, 65535),
    help="TLS port to probe [default: 443].",
)
@click.option(
    "--workers",
    "-w",
    default=None,
    type=click.IntRange(min=1),
    help="Number of addresses probed concurrently [default: 1].",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    default=None,
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    help="Output format [default: table].",
)
@click.option(
    "--fastest/--no-fastest",
    "show_fastest",
    default=None,
    help="Report the fastest working server.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to YAML config file (default: ~/.dhc/config.yaml).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(
    domain: str,
    timeout_ms: int | None,
    port: int | None,
    workers: int | None,
    output_format: str | None,
    show_fastest: bool | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Probe every address DOMAIN resolves to over HTTPS."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        cfg = load_config(config_path)
    except (ConfigError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    cfg = _apply_overrides(
        cfg,
        timeout_ms=timeout_ms,
        port=port,
        workers=workers,
        output_format=output_format.lower() if output_format else None,
        show_fastest=show_fastest,
    )
    logger.debug("Config loaded: %s", cfg)

    try:
        sweep = run_sweep(domain, cfg)
    except ResolutionError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    render(sweep, cfg.output_format, show_fastest=cfg.show_fastest)


def run_sweep(domain: str, cfg: DhcConfig) -> SweepRun:
    """Probe every address of *domain* and wrap the outcome in a ``SweepRun``.

    Raises:
        ResolutionError: If *domain* cannot be resolved.
    """
    sweep = SweepRun(domain=domain, results=[], duration_seconds=0.0)

    t0 = time.monotonic()
    sweep.results = probe_all(
        domain,
        cfg.timeout_ms,
        port=cfg.port,
        workers=cfg.workers,
    )
    sweep.duration_seconds = time.monotonic() - t0
    sweep.meta.update(summary_to_meta(sweep.results))

    logger.info(
        "Sweep of %s finished: %d/%d address(es) ok in %.2fs",
        domain,
        sweep.meta["succeeded"],
        sweep.meta["total"],
        sweep.duration_seconds,
    )
    return sweep


def _apply_overrides(cfg: DhcConfig, **overrides: object) -> DhcConfig:
    """Return a copy of *cfg* with every non-``None`` override applied."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return cfg
    updated = dataclasses.replace(cfg, **changes)
    validate_config(updated)
    return updated
