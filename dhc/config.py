"""YAML configuration file loading."""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

# Optional per-user defaults for sweeps; CLI options override them.
DEFAULT_CONFIG_DIR = Path.home() / ".dhc"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"

OUTPUT_FORMATS = ("table", "json", "text")


@dataclass
class DhcConfig:
    """Top-level configuration for the dhc tool.

    Every field has a default, so a config file is never required.

    Attributes:
        timeout_ms: Deadline in milliseconds for each network operation
            (reverse lookup, connect, handshake, write, read).
        port: TLS port probed on every resolved address.
        workers: Number of addresses probed concurrently; ``1`` probes
            sequentially.
        output_format: Default output format (``"table"``, ``"json"`` or
            ``"text"``).
        show_fastest: Whether to report the fastest working server after
            the per-address results.
    """

    timeout_ms: int = 5000
    port: int = 443
    workers: int = 1
    output_format: str = "table"
    show_fastest: bool = True


# Keys in the YAML file that map to DhcConfig fields.
_YAML_KEY_TO_FIELD: dict[str, str] = {
    "timeout_ms": "timeout_ms",
    "port": "port",
    "workers": "workers",
    "format": "output_format",
    "show_fastest": "show_fastest",
}

# Fields that accept quoted integers in YAML (e.g. timeout_ms: "2000").
_INT_FIELDS = frozenset({"timeout_ms", "port", "workers"})


def load_config(path: Path | str | None = None) -> DhcConfig:
    """Load configuration from a YAML file.

    Args:
        path: Explicit path to a YAML config file.  If ``None``, the
            default location (``~/.dhc/config.yaml``) is tried.  If the
            default file doesn't exist, a ``DhcConfig`` with all defaults
            is returned silently.

    Returns:
        A populated and validated ``DhcConfig`` instance.

    Raises:
        FileNotFoundError: If an explicit *path* was given but doesn't exist.
        ConfigError: If the file contains invalid YAML, has an unexpected
            top-level structure, or holds out-of-range values.
    """
    resolved = _resolve_path(path)

    if resolved is None:
        logger.debug("No config file found; using defaults")
        return DhcConfig()

    logger.debug("Loading config from %s", resolved)
    text = resolved.read_text(encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {resolved}: {exc}") from exc

    if raw is None:
        # Empty file: all defaults.
        return DhcConfig()

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping at the top level in {resolved}, "
            f"got {type(raw).__name__}"
        )

    cfg = _build_config(raw, source=resolved)
    validate_config(cfg)
    return cfg


def validate_config(cfg: DhcConfig) -> None:
    """Check that *cfg* holds usable values.

    Raises:
        ConfigError: If any field is of the wrong type or out of range.
    """
    for name in ("timeout_ms", "port", "workers"):
        value = getattr(cfg, name)
        # bool is an int subclass; reject it explicitly.
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigError(f"{name} must be an integer, got {value!r}")

    if cfg.timeout_ms <= 0:
        raise ConfigError(f"timeout_ms must be positive, got {cfg.timeout_ms}")
    if not 1 <= cfg.port <= 65535:
        raise ConfigError(f"port must be between 1 and 65535, got {cfg.port}")
    if cfg.workers < 1:
        raise ConfigError(f"workers must be at least 1, got {cfg.workers}")
    if cfg.output_format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, "
            f"got {cfg.output_format!r}"
        )
    if not isinstance(cfg.show_fastest, bool):
        raise ConfigError(f"show_fastest must be true or false, got {cfg.show_fastest!r}")


class ConfigError(Exception):
    """Raised when a configuration file is malformed or unreadable."""


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _resolve_path(path: Path | str | None) -> Path | None:
    """Return a concrete ``Path`` to read, or ``None`` if nothing to read.

    Raises:
        FileNotFoundError: If the caller supplied an explicit path that
            doesn't exist on disk.
    """
    if path is not None:
        p = Path(path).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"Config file not found: {p}")
        return p

    # Try the default location.
    default = DEFAULT_CONFIG_PATH.expanduser()
    if default.is_file():
        return default
    return None


def _build_config(raw: dict, source: Path) -> DhcConfig:
    """Map raw YAML dict to a ``DhcConfig``, ignoring unknown keys."""
    kwargs: dict[str, object] = {}

    for yaml_key, field_name in _YAML_KEY_TO_FIELD.items():
        if yaml_key in raw:
            kwargs[field_name] = _coerce(field_name, raw[yaml_key])

    unknown = set(raw) - set(_YAML_KEY_TO_FIELD)
    if unknown:
        logger.warning(
            "Ignoring unknown config keys in %s: %s",
            source,
            ", ".join(sorted(unknown, key=str)),
        )

    return DhcConfig(**kwargs)


def _coerce(field_name: str, value: object) -> object:
    """Normalize YAML scalars that are commonly written quoted.

    ``timeout_ms: "2000"`` becomes ``2000`` and ``format: JSON`` becomes
    ``"json"``.  Anything else is passed through for ``validate_config``
    to judge.
    """
    if field_name in _INT_FIELDS and isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
    if field_name == "output_format" and isinstance(value, str):
        return value.strip().lower()
    return value
